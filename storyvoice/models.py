"""Pydantic response models for the speech audio service."""

from typing import Optional

from pydantic import BaseModel


class AnalysisResponse(BaseModel):
    sample_rate: int
    channels: int
    frames: int
    duration: float
    duration_label: str
    rms: float
    peak: float
    true_peak_dbfs: float
    integrated_lufs: Optional[float] = None


class ErrorDetail(BaseModel):
    error: str
    message: str


class HealthResponse(BaseModel):
    status: str

