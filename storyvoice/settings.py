"""Environment-driven service configuration."""
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

from storyvoice.dsp_engine.buffer import validate_format
from storyvoice.dsp_engine.decoder import DEFAULT_CHANNEL_COUNT, DEFAULT_SAMPLE_RATE
from storyvoice.dsp_engine.errors import InvalidParameterError

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    default_sample_rate: int = DEFAULT_SAMPLE_RATE
    default_channels: int = DEFAULT_CHANNEL_COUNT
    enhance_default: bool = True
    max_upload_bytes: int = 50 * 1024 * 1024
    min_speed: float = 0.25
    max_speed: float = 4.0
    cors_origins: Tuple[str, ...] = ("http://localhost:3000",)
    log_level: str = "INFO"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise InvalidParameterError(f"{name} must be an integer, got {raw!r}") from exc


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise InvalidParameterError(f"{name} must be a number, got {raw!r}") from exc


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise InvalidParameterError(f"{name} must be a boolean, got {raw!r}")


def load_settings() -> Settings:
    """Read settings from the environment without caching."""

    sample_rate = _int_env("STORYVOICE_DEFAULT_SAMPLE_RATE", DEFAULT_SAMPLE_RATE)
    channels = _int_env("STORYVOICE_DEFAULT_CHANNELS", DEFAULT_CHANNEL_COUNT)
    validate_format(sample_rate, channels)

    max_upload = _int_env("STORYVOICE_MAX_UPLOAD_BYTES", Settings.max_upload_bytes)
    if max_upload <= 0:
        raise InvalidParameterError(f"STORYVOICE_MAX_UPLOAD_BYTES must be positive, got {max_upload}")

    min_speed = _float_env("STORYVOICE_MIN_SPEED", Settings.min_speed)
    max_speed = _float_env("STORYVOICE_MAX_SPEED", Settings.max_speed)
    if not 0.0 < min_speed <= 1.0 <= max_speed:
        raise InvalidParameterError(
            f"Speed bounds must satisfy 0 < min <= 1 <= max, got {min_speed}..{max_speed}"
        )

    origins_raw = os.getenv("STORYVOICE_CORS_ORIGINS")
    if origins_raw:
        origins = tuple(o.strip() for o in origins_raw.split(",") if o.strip())
    else:
        origins = Settings.cors_origins

    return Settings(
        default_sample_rate=sample_rate,
        default_channels=channels,
        enhance_default=_bool_env("STORYVOICE_ENHANCE_DEFAULT", True),
        max_upload_bytes=max_upload,
        min_speed=min_speed,
        max_speed=max_speed,
        cors_origins=origins,
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
