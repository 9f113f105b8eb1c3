"""Feed-forward dynamics compressor.

Level detection is per sample peak in dB. The static curve applies
``ratio`` above ``threshold_db`` with a quadratic soft knee of
``knee_db`` width centred on the threshold. The resulting gain reduction
is smoothed with exponential attack/release time constants and a fixed
makeup gain is added, derived from the reduction a full-scale signal
would receive (the 0.6 exponent browser compressors use).
"""
from __future__ import annotations

from dataclasses import dataclass

import numpy as np

_EPS = 1e-9
MAKEUP_EXPONENT = 0.6


@dataclass(frozen=True)
class DynamicsCompressor:
  threshold_db: float = -24.0
  knee_db: float = 30.0
  ratio: float = 12.0
  attack_ms: float = 3.0
  release_ms: float = 250.0
  auto_makeup: bool = True

  def static_reduction_db(self, level_db: np.ndarray) -> np.ndarray:
    """Gain reduction (positive dB) the static curve applies at ``level_db``."""
    level_db = np.asarray(level_db, dtype=np.float64)
    slope = 1.0 - 1.0 / self.ratio
    over = level_db - self.threshold_db
    half_knee = self.knee_db / 2.0

    if self.knee_db > 0.0:
      knee_curve = slope * ((over + half_knee) ** 2) / (2.0 * self.knee_db)
    else:
      knee_curve = np.zeros_like(over)

    return np.where(
      over <= -half_knee,
      0.0,
      np.where(over >= half_knee, slope * over, knee_curve),
    )

  def makeup_gain_db(self) -> float:
    if not self.auto_makeup:
      return 0.0
    full_scale_reduction = float(self.static_reduction_db(np.array(0.0)))
    return MAKEUP_EXPONENT * full_scale_reduction

  def gain_reduction_envelope(self, x: np.ndarray, sr: int) -> np.ndarray:
    """Smoothed gain reduction in dB for a single channel."""
    level_db = 20.0 * np.log10(np.maximum(np.abs(x), _EPS))
    target = self.static_reduction_db(level_db)

    attack = np.exp(-1.0 / (0.001 * self.attack_ms * sr))
    release = np.exp(-1.0 / (0.001 * self.release_ms * sr))

    env = np.empty_like(target)
    prev = 0.0
    for i, g in enumerate(target):
      coeff = attack if g > prev else release
      prev = coeff * prev + (1.0 - coeff) * g
      env[i] = prev
    return env

  def process(self, x: np.ndarray, sr: int) -> np.ndarray:
    """Compress a mono ``[samples]`` or planar ``[channels, samples]`` signal.

    Each channel keeps its own detector; channels are not linked.
    """
    x = np.asarray(x, dtype=np.float64)
    makeup = self.makeup_gain_db()

    def compress_channel(ch: np.ndarray) -> np.ndarray:
      gr = self.gain_reduction_envelope(ch, sr)
      return ch * 10 ** ((makeup - gr) / 20.0)

    if x.ndim == 1:
      return compress_channel(x)
    return np.stack([compress_channel(ch) for ch in x], axis=0)
