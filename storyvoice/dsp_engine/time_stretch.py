"""Pitch-preserving speed change using SOLA.

Synchronous overlap-add keeps the analysis window length fixed and only
moves the read cursor. Each new read position is aligned by maximising
the cross-correlation (first channel) between the segment that would
naturally follow the last placed window and candidates around the
speed-adjusted target position.
"""
from __future__ import annotations

import logging
import math

import numpy as np

from .buffer import SampleBuffer, validate_speed
from .errors import InvalidParameterError

logger = logging.getLogger(__name__)

WINDOW_MS = 40.0
OVERLAP_MS = 20.0
# Must stay well below OVERLAP_MS: a wider search reaches back onto the
# segment that was just placed and locks onto it.
SEARCH_MS = 8.0

SAFETY_FACTOR = 0.2
SAFETY_SECONDS = 5


def round_half_up(value: float) -> int:
  return int(math.floor(value + 0.5))


def _ms_to_frames(sample_rate: int, ms: float) -> int:
  return round_half_up(sample_rate * ms / 1000.0)


def hann_window(size: int) -> np.ndarray:
  i = np.arange(size, dtype=np.float64)
  return 0.5 * (1.0 - np.cos(2.0 * np.pi * i / (size - 1)))


def best_alignment(reference: np.ndarray, natural_pos: int, overlap: int, start: int, end: int) -> int:
  """Return the ``t`` in ``[start, end]`` whose segment best matches ``natural_pos``.

  Ties go to the lowest ``t``.
  """
  segment = reference[natural_pos:natural_pos + overlap]
  region = reference[start:end + overlap]
  correlation = np.correlate(region, segment, mode="valid")
  return start + int(np.argmax(correlation))


def time_stretch(buffer: SampleBuffer, speed: float) -> SampleBuffer:
  """Change playback speed by ``speed`` without shifting pitch.

  The output holds roughly ``frame_count / speed`` frames. A speed of
  exactly 1.0 returns ``buffer`` itself.
  """
  speed = validate_speed(speed)
  if speed == 1.0:
    return buffer

  sr = buffer.sample_rate
  window_size = _ms_to_frames(sr, WINDOW_MS)
  overlap = _ms_to_frames(sr, OVERLAP_MS)
  search_range = _ms_to_frames(sr, SEARCH_MS)
  if window_size < 2 or overlap < 1:
    raise InvalidParameterError(f"Sample rate {sr} Hz is too low for time stretching")

  synthesis_hop = overlap
  target_analysis_hop = round_half_up(synthesis_hop * speed)

  source = buffer.samples.astype(np.float64)
  reference = source[0]
  frame_count = buffer.frame_count

  estimated = math.ceil(frame_count / speed)
  capacity = estimated + math.ceil(estimated * SAFETY_FACTOR) + sr * SAFETY_SECONDS
  output = np.zeros((buffer.channel_count, capacity), dtype=np.float64)
  window = hann_window(window_size)

  input_offset = 0
  output_offset = 0
  while output_offset + window_size < capacity and input_offset + window_size < frame_count:
    output[:, output_offset:output_offset + window_size] += (
      source[:, input_offset:input_offset + window_size] * window
    )

    natural_pos = input_offset + synthesis_hop
    approx_next = input_offset + target_analysis_hop
    search_start = max(0, approx_next - search_range)
    search_end = min(frame_count - window_size, approx_next + search_range)

    if search_end >= search_start:
      input_offset = best_alignment(reference, natural_pos, overlap, search_start, search_end)
    else:
      input_offset = approx_next
    output_offset += synthesis_hop

  final_length = output_offset + window_size
  logger.debug(
    "time_stretch x%.3f: %d -> %d frames (window %d, hop %d, search %d)",
    speed, frame_count, final_length, window_size, synthesis_hop, search_range,
  )
  return SampleBuffer(samples=output[:, :final_length], sample_rate=sr)
