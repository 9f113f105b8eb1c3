"""In-memory sample buffer passed between pipeline stages.

Every stage returns a fresh ``SampleBuffer``; the wrapped array is marked
read-only so that no stage can mutate a buffer it does not own.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .errors import InvalidParameterError

SUPPORTED_CHANNEL_COUNTS = (1, 2)
BYTES_PER_SAMPLE = 2
# byte rate is a 32-bit header field
MAX_BYTE_RATE = 0xFFFFFFFF


def validate_format(sample_rate: int, channel_count: int) -> None:
  if isinstance(sample_rate, bool) or not isinstance(sample_rate, (int, np.integer)) or sample_rate <= 0:
    raise InvalidParameterError(f"Sample rate must be a positive integer, got {sample_rate!r}")
  if channel_count not in SUPPORTED_CHANNEL_COUNTS:
    raise InvalidParameterError(f"Channel count must be 1 or 2, got {channel_count!r}")
  if int(sample_rate) * channel_count * BYTES_PER_SAMPLE > MAX_BYTE_RATE:
    raise InvalidParameterError(f"Sample rate {sample_rate} Hz overflows the WAV byte-rate field")


def validate_speed(speed: float) -> float:
  try:
    value = float(speed)
  except (TypeError, ValueError) as exc:
    raise InvalidParameterError(f"Speed must be a number, got {speed!r}") from exc
  if not math.isfinite(value) or value <= 0.0:
    raise InvalidParameterError(f"Speed must be a positive finite number, got {speed!r}")
  return value


@dataclass(frozen=True)
class SampleBuffer:
  """Planar float32 audio, shape ``[channel_count, frame_count]``.

  Samples are nominally in -1..1. Values outside that range are allowed
  until the buffer is re-quantized by the encoder.
  """

  samples: np.ndarray
  sample_rate: int

  def __post_init__(self) -> None:
    data = np.array(self.samples, dtype=np.float32)
    if data.ndim == 1:
      data = data[np.newaxis, :]
    if data.ndim != 2:
      raise InvalidParameterError(
        f"Expected mono [N] or planar [channels, N] samples, got shape {data.shape}"
      )
    validate_format(self.sample_rate, data.shape[0])
    data.setflags(write=False)
    object.__setattr__(self, "samples", data)
    object.__setattr__(self, "sample_rate", int(self.sample_rate))

  @property
  def channel_count(self) -> int:
    return int(self.samples.shape[0])

  @property
  def frame_count(self) -> int:
    return int(self.samples.shape[1])

  @property
  def channels(self) -> tuple[np.ndarray, ...]:
    return tuple(self.samples[c] for c in range(self.channel_count))

  @property
  def duration(self) -> float:
    """Length in seconds."""
    return self.frame_count / float(self.sample_rate)

  @classmethod
  def from_channels(cls, channels, sample_rate: int) -> "SampleBuffer":
    """Build a buffer from a sequence of equal-length channel sequences."""
    arrays = [np.asarray(ch, dtype=np.float32) for ch in channels]
    if not arrays:
      raise InvalidParameterError("At least one channel is required")
    lengths = {a.shape[0] for a in arrays}
    if len(lengths) != 1:
      raise InvalidParameterError(f"Channels must have identical length, got {sorted(lengths)}")
    return cls(samples=np.stack(arrays, axis=0), sample_rate=sample_rate)

  def equals(self, other: "SampleBuffer") -> bool:
    return (
      self.sample_rate == other.sample_rate
      and self.samples.shape == other.samples.shape
      and bool(np.array_equal(self.samples, other.samples))
    )
