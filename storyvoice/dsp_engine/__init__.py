"""DSP engine for rendered speech.

Four stateless stages over ``SampleBuffer``: decoding of WAV / raw PCM,
SOLA time stretching, cinematic EQ + compression, and canonical WAV
encoding, plus the pipeline that composes them.
"""
from .buffer import SampleBuffer
from .decoder import decode_audio
from .encoder import WAV_MIME_TYPE, encode_wav
from .enhancer import apply_enhancement
from .errors import AudioProcessingError, EmptyAudioError, InvalidParameterError
from .pipeline import (
  ProcessingReport,
  RenderedAudio,
  process_speech_audio,
  process_speech_audio_async,
)
from .time_stretch import time_stretch

__all__ = [
  "SampleBuffer",
  "decode_audio",
  "encode_wav",
  "apply_enhancement",
  "time_stretch",
  "process_speech_audio",
  "process_speech_audio_async",
  "ProcessingReport",
  "RenderedAudio",
  "AudioProcessingError",
  "EmptyAudioError",
  "InvalidParameterError",
  "WAV_MIME_TYPE",
]
