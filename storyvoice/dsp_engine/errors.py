"""Error taxonomy for the speech audio engine.

Malformed WAV chunk tables are not represented here: the decoder recovers
from them locally by falling back to the canonical 44-byte header offset.
"""
from __future__ import annotations


class AudioProcessingError(Exception):
  """Base error for every failure surfaced by the DSP engine."""


class EmptyAudioError(AudioProcessingError):
  """Raised when a decoded payload holds zero PCM samples."""


class InvalidParameterError(AudioProcessingError, ValueError):
  """Raised for a non-positive speed, bad sample rate or channel count."""
