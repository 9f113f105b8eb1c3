"""RIFF/WAVE and raw 16-bit PCM decoding into ``SampleBuffer``.

Input is either a WAV container (detected by its ``RIFF``/``WAVE`` magic) or
headerless little-endian int16 PCM whose format is supplied by the caller.
"""
from __future__ import annotations

import logging
import struct

import numpy as np

from .buffer import SampleBuffer, validate_format
from .errors import EmptyAudioError

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_RATE = 24000
DEFAULT_CHANNEL_COUNT = 1

_CANONICAL_HEADER_SIZE = 44
_RIFF = b"RIFF"
_WAVE = b"WAVE"
_DATA = b"data"


def is_wav_container(data: bytes) -> bool:
  return (
    len(data) >= _CANONICAL_HEADER_SIZE
    and data[0:4] == _RIFF
    and data[8:12] == _WAVE
  )


def find_pcm_offset(data: bytes) -> int:
  """Return the byte offset of the ``data`` chunk payload.

  Walks the chunk table from offset 12. When no ``data`` chunk can be
  located the canonical 44-byte header size is assumed.
  """
  pos = 12
  end = len(data) - 8
  while pos < end:
    chunk_id = data[pos:pos + 4]
    if chunk_id == _DATA:
      return pos + 8
    (chunk_size,) = struct.unpack_from("<I", data, pos + 4)
    pos += 8 + chunk_size

  logger.warning("WAV chunk table unreadable, falling back to %d-byte header", _CANONICAL_HEADER_SIZE)
  return _CANONICAL_HEADER_SIZE


def decode_audio(
  data: bytes,
  sample_rate: int = DEFAULT_SAMPLE_RATE,
  channel_count: int = DEFAULT_CHANNEL_COUNT,
) -> SampleBuffer:
  """Decode WAV or raw int16 PCM bytes into a normalized float buffer.

  Args:
    data: WAV container bytes, or raw little-endian int16 PCM.
    sample_rate: rate used when ``data`` is not a WAV container.
    channel_count: channel count used when ``data`` is not a WAV container.

  Raises:
    EmptyAudioError: the payload holds no samples.
    InvalidParameterError: the effective format is unsupported.
  """
  data = bytes(data)
  pcm_offset = 0

  if is_wav_container(data):
    (channel_count,) = struct.unpack_from("<H", data, 22)
    (sample_rate,) = struct.unpack_from("<I", data, 24)
    pcm_offset = find_pcm_offset(data)
    logger.debug(
      "WAV container: %d ch, %d Hz, pcm offset %d", channel_count, sample_rate, pcm_offset
    )
  else:
    logger.debug("raw PCM input: %d ch, %d Hz", channel_count, sample_rate)

  validate_format(sample_rate, channel_count)

  payload = data[pcm_offset:]
  # int16 view ignores a trailing odd byte
  usable = len(payload) - (len(payload) % 2)
  pcm = np.frombuffer(payload[:usable], dtype="<i2")
  if pcm.size == 0:
    raise EmptyAudioError("Audio data is empty")

  frame_count = pcm.size // channel_count
  if frame_count == 0:
    raise EmptyAudioError("Audio data holds no complete frame")

  frames = pcm[: frame_count * channel_count].reshape(frame_count, channel_count)
  samples = frames.T.astype(np.float32) / 32768.0
  return SampleBuffer(samples=samples, sample_rate=sample_rate)
