"""Biquad shelving filters built on SciPy.

Coefficients follow the RBJ audio-EQ cookbook shelf transfer functions
with shelf slope S = 1, the same design browser audio engines use for
their ``lowshelf`` / ``highshelf`` biquad nodes. Sections are stored in
sos form and run with ``scipy.signal.sosfilt``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Tuple

import numpy as np
from scipy.signal import sosfilt

FilterType = Literal["lowshelf", "highshelf"]

SHELF_SLOPE = 1.0


@dataclass(frozen=True)
class BiquadFilter:
  """Container for a single biquad section.

  ``sos`` has shape (1, 6): ``[b0, b1, b2, 1, a1, a2]`` normalised by a0.
  """

  sos: np.ndarray

  @property
  def b(self) -> np.ndarray:
    return self.sos[0, :3]

  @property
  def a(self) -> np.ndarray:
    return self.sos[0, 3:]

  def process(self, x: np.ndarray) -> np.ndarray:
    """Filter a mono ``[samples]`` or planar ``[channels, samples]`` signal.

    Channels run independently through identical coefficients, each
    starting from zero state.
    """
    x = np.asarray(x, dtype=np.float64)
    if x.ndim == 1:
      return np.asarray(sosfilt(self.sos, x))
    return np.asarray(sosfilt(self.sos, x, axis=-1))

  def magnitude_db(self, freq: float, sr: int) -> float:
    """Magnitude response in dB at ``freq``."""
    z = np.exp(-1j * 2.0 * np.pi * freq / sr)
    b0, b1, b2 = self.b
    _, a1, a2 = self.a
    h = (b0 + b1 * z + b2 * z * z) / (1.0 + a1 * z + a2 * z * z)
    return float(20.0 * np.log10(np.abs(h)))


def _section(b0: float, b1: float, b2: float, a0: float, a1: float, a2: float) -> BiquadFilter:
  sos = np.array([[b0 / a0, b1 / a0, b2 / a0, 1.0, a1 / a0, a2 / a0]], dtype=np.float64)
  return BiquadFilter(sos=sos)


def _constant_gain(gain: float) -> BiquadFilter:
  return _section(gain, 0.0, 0.0, 1.0, 0.0, 0.0)


def design_biquad(ftype: FilterType, freq: float, sr: int, gain_db: float = 0.0) -> BiquadFilter:
  """Design a single shelving section.

  A corner at or above Nyquist makes a high shelf transparent and a low
  shelf a flat gain; a corner at or below 0 Hz does the opposite.
  """
  if sr <= 0:
    raise ValueError(f"Sample rate must be positive, got {sr}")

  a = 10 ** (gain_db / 40.0)
  normalized = freq / (sr * 0.5)

  if ftype == "lowshelf":
    if normalized >= 1.0:
      return _constant_gain(a * a)
    if normalized <= 0.0:
      return _constant_gain(1.0)
  elif ftype == "highshelf":
    if normalized >= 1.0:
      return _constant_gain(1.0)
    if normalized <= 0.0:
      return _constant_gain(a * a)
  else:
    raise ValueError(f"Unsupported filter type: {ftype}")

  w0 = np.pi * normalized
  cos_w0 = np.cos(w0)
  alpha = 0.5 * np.sin(w0) * np.sqrt((a + 1.0 / a) * (1.0 / SHELF_SLOPE - 1.0) + 2.0)
  k = 2.0 * np.sqrt(a) * alpha

  if ftype == "lowshelf":
    return _section(
      a * ((a + 1.0) - (a - 1.0) * cos_w0 + k),
      2.0 * a * ((a - 1.0) - (a + 1.0) * cos_w0),
      a * ((a + 1.0) - (a - 1.0) * cos_w0 - k),
      (a + 1.0) + (a - 1.0) * cos_w0 + k,
      -2.0 * ((a - 1.0) + (a + 1.0) * cos_w0),
      (a + 1.0) + (a - 1.0) * cos_w0 - k,
    )

  return _section(
    a * ((a + 1.0) + (a - 1.0) * cos_w0 + k),
    -2.0 * a * ((a - 1.0) + (a + 1.0) * cos_w0),
    a * ((a + 1.0) + (a - 1.0) * cos_w0 - k),
    (a + 1.0) - (a - 1.0) * cos_w0 + k,
    2.0 * ((a - 1.0) - (a + 1.0) * cos_w0),
    (a + 1.0) - (a - 1.0) * cos_w0 - k,
  )


def apply_eq_stack(
  x: np.ndarray,
  sr: int,
  bands: Tuple[Tuple[FilterType, float, float], ...],
) -> np.ndarray:
  """Apply a cascade of shelving filters in the given order.

  Args:
    x: mono or planar signal
    sr: sample rate
    bands: tuple of (type, freq, gain_db)
  """
  y = np.asarray(x, dtype=np.float64)
  for ftype, freq, gain_db in bands:
    y = design_biquad(ftype, freq, sr, gain_db=gain_db).process(y)
  return y
