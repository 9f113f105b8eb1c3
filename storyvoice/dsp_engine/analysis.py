"""Loudness and level statistics for rendered speech.

pyloudnorm stays confined to this module so the processing stages only
depend on numpy / scipy.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

import numpy as np
import pyloudnorm as pyln

from .buffer import SampleBuffer

_EPS = 1e-9


@dataclass
class LoudnessStats:
  integrated_lufs: Optional[float]
  true_peak_dbfs: float
  rms_dbfs: float
  peak: float
  rms: float


@lru_cache(maxsize=16)
def _meter_for_sr(sr: int) -> pyln.Meter:
  return pyln.Meter(sr)


def _finite_or_none(value: float) -> Optional[float]:
  return value if math.isfinite(value) else None


def measure_loudness(buffer: SampleBuffer) -> LoudnessStats:
  data = buffer.samples.astype(np.float64)
  peak = float(np.max(np.abs(data))) if data.size else 0.0
  rms = float(np.sqrt(np.mean(np.square(data)))) if data.size else 0.0
  rms_dbfs = 20.0 * np.log10(max(rms, _EPS))

  meter = _meter_for_sr(buffer.sample_rate)
  try:
    signal = data[0] if buffer.channel_count == 1 else data.T
    integrated = float(meter.integrated_loudness(signal))
  except ValueError:
    # shorter than one BS.1770 gating block
    integrated = float(rms_dbfs)

  return LoudnessStats(
    integrated_lufs=_finite_or_none(integrated),
    true_peak_dbfs=float(20.0 * np.log10(max(peak, _EPS))),
    rms_dbfs=float(rms_dbfs),
    peak=peak,
    rms=rms,
  )


def format_time(seconds: Optional[float]) -> str:
  """Format seconds as ``mm:ss`` for player displays."""
  if seconds is None or not math.isfinite(seconds):
    return "00:00"
  minutes = int(seconds // 60)
  secs = int(seconds % 60)
  return f"{minutes:02d}:{secs:02d}"
