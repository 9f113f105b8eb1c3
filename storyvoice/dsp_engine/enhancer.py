"""Fixed "cinematic" enhancement chain.

Low shelf (+6 dB @ 120 Hz) -> high shelf (+2 dB @ 8 kHz) -> compressor
(-24 dB threshold, 30 dB knee, 12:1, 3 ms attack, 250 ms release).
"""
from __future__ import annotations

import logging
from typing import Tuple

from .biquad_eq import FilterType, apply_eq_stack
from .buffer import SampleBuffer
from .compressor import DynamicsCompressor

logger = logging.getLogger(__name__)

CINEMATIC_EQ: Tuple[Tuple[FilterType, float, float], ...] = (
  ("lowshelf", 120.0, 6.0),
  ("highshelf", 8000.0, 2.0),
)

CINEMATIC_COMPRESSOR = DynamicsCompressor(
  threshold_db=-24.0,
  knee_db=30.0,
  ratio=12.0,
  attack_ms=3.0,
  release_ms=250.0,
)


def apply_enhancement(buffer: SampleBuffer) -> SampleBuffer:
  """Return a new buffer run through the cinematic EQ and compressor."""
  sr = buffer.sample_rate
  eq = apply_eq_stack(buffer.samples, sr, CINEMATIC_EQ)
  compressed = CINEMATIC_COMPRESSOR.process(eq, sr)
  logger.debug("enhanced %d frames x %d ch", buffer.frame_count, buffer.channel_count)
  return SampleBuffer(samples=compressed, sample_rate=sr)
