"""Speech rendering pipeline.

Decode -> [time stretch if speed != 1] -> [enhance if enabled] -> encode.
Every stage returns a new buffer; nothing is shared between invocations.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List

from .buffer import SampleBuffer, validate_format, validate_speed
from .decoder import DEFAULT_CHANNEL_COUNT, DEFAULT_SAMPLE_RATE, decode_audio
from .encoder import encode_wav
from .enhancer import apply_enhancement
from .time_stretch import time_stretch

logger = logging.getLogger(__name__)


@dataclass
class ProcessingReport:
  processing_chain: List[str] = field(default_factory=list)
  sample_rate: int = 0
  channel_count: int = 0
  input_frames: int = 0
  output_frames: int = 0
  speed: float = 1.0

  @property
  def output_duration(self) -> float:
    if not self.sample_rate:
      return 0.0
    return self.output_frames / float(self.sample_rate)


@dataclass
class RenderedAudio:
  wav: bytes
  buffer: SampleBuffer
  report: ProcessingReport


def _validate(speed: float, sample_rate: int, channel_count: int) -> float:
  speed = validate_speed(speed)
  validate_format(sample_rate, channel_count)
  return speed


def process_speech_audio(
  data: bytes,
  speed: float = 1.0,
  enhance: bool = True,
  sample_rate: int = DEFAULT_SAMPLE_RATE,
  channel_count: int = DEFAULT_CHANNEL_COUNT,
) -> RenderedAudio:
  """Render TTS output bytes into a playback-ready WAV.

  ``sample_rate`` and ``channel_count`` describe ``data`` only when it is
  headerless PCM; a WAV container carries its own format.

  Raises:
    InvalidParameterError: before any processing, for bad arguments.
    EmptyAudioError: ``data`` holds no samples.
  """
  speed = _validate(speed, sample_rate, channel_count)

  buffer = decode_audio(data, sample_rate=sample_rate, channel_count=channel_count)
  report = ProcessingReport(
    processing_chain=["decode"],
    sample_rate=buffer.sample_rate,
    channel_count=buffer.channel_count,
    input_frames=buffer.frame_count,
    speed=speed,
  )

  if speed != 1.0:
    buffer = time_stretch(buffer, speed)
    report.processing_chain.append("time_stretch")

  if enhance:
    buffer = apply_enhancement(buffer)
    report.processing_chain.append("cinematic_enhance")

  wav = encode_wav(buffer)
  report.processing_chain.append("encode_wav")
  report.output_frames = buffer.frame_count

  logger.info(
    "rendered %d -> %d frames @ %d Hz, %d ch, chain=%s",
    report.input_frames,
    report.output_frames,
    report.sample_rate,
    report.channel_count,
    ",".join(report.processing_chain),
  )
  return RenderedAudio(wav=wav, buffer=buffer, report=report)


async def process_speech_audio_async(
  data: bytes,
  speed: float = 1.0,
  enhance: bool = True,
  sample_rate: int = DEFAULT_SAMPLE_RATE,
  channel_count: int = DEFAULT_CHANNEL_COUNT,
) -> RenderedAudio:
  """Async variant that yields to the event loop between stages.

  Each stage runs in a worker thread; the in-flight buffer is only ever
  touched by the stage currently holding it.
  """
  speed = _validate(speed, sample_rate, channel_count)
  report = ProcessingReport()

  buffer = await asyncio.to_thread(decode_audio, data, sample_rate, channel_count)
  report.processing_chain.append("decode")
  report.sample_rate = buffer.sample_rate
  report.channel_count = buffer.channel_count
  report.input_frames = buffer.frame_count
  report.speed = speed

  if speed != 1.0:
    buffer = await asyncio.to_thread(time_stretch, buffer, speed)
    report.processing_chain.append("time_stretch")

  if enhance:
    buffer = await asyncio.to_thread(apply_enhancement, buffer)
    report.processing_chain.append("cinematic_enhance")

  wav = await asyncio.to_thread(encode_wav, buffer)
  report.processing_chain.append("encode_wav")
  report.output_frames = buffer.frame_count
  logger.info(
    "rendered %d -> %d frames @ %d Hz (async), chain=%s",
    report.input_frames,
    report.output_frames,
    report.sample_rate,
    ",".join(report.processing_chain),
  )
  return RenderedAudio(wav=wav, buffer=buffer, report=report)
