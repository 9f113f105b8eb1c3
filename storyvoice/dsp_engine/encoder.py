"""Canonical 16-bit PCM RIFF/WAVE writer."""
from __future__ import annotations

import struct

import numpy as np

from .buffer import SampleBuffer

BITS_PER_SAMPLE = 16
HEADER_SIZE = 44
WAV_MIME_TYPE = "audio/wav"

_PCM_FORMAT = 1


def build_wav_header(sample_rate: int, channel_count: int, data_bytes: int) -> bytes:
  block_align = channel_count * (BITS_PER_SAMPLE // 8)
  return b"".join(
    (
      b"RIFF",
      struct.pack("<I", 36 + data_bytes),
      b"WAVE",
      b"fmt ",
      struct.pack(
        "<IHHIIHH",
        16,
        _PCM_FORMAT,
        channel_count,
        sample_rate,
        sample_rate * block_align,
        block_align,
        BITS_PER_SAMPLE,
      ),
      b"data",
      struct.pack("<I", data_bytes),
    )
  )


def quantize_pcm16(samples: np.ndarray) -> np.ndarray:
  """Clamp to -1..1 and scale negatives by 32768, positives by 32767.

  The asymmetric scale keeps +1.0 inside int16 range. Fractions are
  rounded to the nearest integer.
  """
  s = np.clip(np.asarray(samples, dtype=np.float64), -1.0, 1.0)
  scaled = np.where(s < 0, s * 32768.0, s * 32767.0)
  return np.round(scaled).astype("<i2")


def encode_wav(buffer: SampleBuffer) -> bytes:
  """Interleave, quantize and wrap ``buffer`` in a 44-byte WAV header."""
  # [channels, frames] -> frame-major L,R,L,R,...
  interleaved = buffer.samples.T.reshape(-1)
  payload = quantize_pcm16(interleaved).tobytes()
  header = build_wav_header(buffer.sample_rate, buffer.channel_count, len(payload))
  return header + payload
