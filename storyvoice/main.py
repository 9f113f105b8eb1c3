from typing import Any, Dict, Optional

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from storyvoice.dsp_engine import (
    WAV_MIME_TYPE,
    EmptyAudioError,
    InvalidParameterError,
    decode_audio,
    process_speech_audio_async,
)
from storyvoice.dsp_engine.analysis import format_time, measure_loudness
from storyvoice.logging_utils import get_logger, setup_logging
from storyvoice.models import AnalysisResponse, ErrorDetail, HealthResponse
from storyvoice.settings import get_settings

logger = get_logger("service")


def _error(status_code: int, code: str, exc: Exception) -> HTTPException:
    detail = ErrorDetail(error=code, message=str(exc))
    return HTTPException(status_code=status_code, detail=detail.model_dump())


async def _read_upload(file: UploadFile) -> bytes:
    """Read the whole upload, enforcing the configured size limit."""

    limit = get_settings().max_upload_bytes
    try:
        data = await file.read(limit + 1)
    finally:
        await file.close()
    if len(data) > limit:
        raise HTTPException(
            status_code=413,
            detail={"error": "UPLOAD_TOO_LARGE", "message": f"Upload exceeds {limit} bytes"},
        )
    return data


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title="StoryVoice DSP Engine")

    # Allow the studio front-end to call this service
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Processing-Chain", "X-Duration"],
    )

    @app.get("/health", response_model=HealthResponse)
    async def health():
        """Static liveness payload that does not touch the DSP stack."""

        return {"status": "ok"}

    @app.post("/process")
    async def process(
        file: UploadFile = File(...),
        speed: float = Form(1.0),
        enhance: Optional[bool] = Form(None),
        sample_rate: Optional[int] = Form(None),
        channels: Optional[int] = Form(None),
    ):
        """Render uploaded TTS audio (WAV or raw 16-bit PCM) to a WAV file.

        ``sample_rate`` / ``channels`` only apply to headerless PCM uploads.
        """

        current = get_settings()
        if not current.min_speed <= speed <= current.max_speed:
            bound = InvalidParameterError(
                f"Speed must be between {current.min_speed} and {current.max_speed}, got {speed}"
            )
            raise _error(422, "INVALID_PARAMETER", bound)
        data = await _read_upload(file)
        if enhance is None:
            enhance = current.enhance_default

        try:
            rendered = await process_speech_audio_async(
                data,
                speed=speed,
                enhance=enhance,
                sample_rate=current.default_sample_rate if sample_rate is None else sample_rate,
                channel_count=current.default_channels if channels is None else channels,
            )
        except InvalidParameterError as exc:
            raise _error(422, "INVALID_PARAMETER", exc) from exc
        except EmptyAudioError as exc:
            raise _error(400, "EMPTY_AUDIO", exc) from exc
        except Exception as exc:
            logger.exception("[DSP] Processing failed: %s", exc)
            raise _error(500, "DSP_PROCESSING_FAILED", exc) from exc

        report = rendered.report
        headers: Dict[str, Any] = {
            "X-Processing-Chain": ",".join(report.processing_chain),
            "X-Duration": format_time(report.output_duration),
            "Content-Disposition": 'inline; filename="speech.wav"',
        }
        return Response(content=rendered.wav, media_type=WAV_MIME_TYPE, headers=headers)

    @app.post("/analyze", response_model=AnalysisResponse)
    async def analyze(
        file: UploadFile = File(...),
        sample_rate: Optional[int] = Form(None),
        channels: Optional[int] = Form(None),
    ):
        """Return level, loudness and duration stats for an upload."""

        current = get_settings()
        data = await _read_upload(file)
        try:
            buffer = decode_audio(
                data,
                sample_rate=current.default_sample_rate if sample_rate is None else sample_rate,
                channel_count=current.default_channels if channels is None else channels,
            )
        except InvalidParameterError as exc:
            raise _error(422, "INVALID_PARAMETER", exc) from exc
        except EmptyAudioError as exc:
            raise _error(400, "EMPTY_AUDIO", exc) from exc

        stats = measure_loudness(buffer)
        return AnalysisResponse(
            sample_rate=buffer.sample_rate,
            channels=buffer.channel_count,
            frames=buffer.frame_count,
            duration=buffer.duration,
            duration_label=format_time(buffer.duration),
            rms=stats.rms,
            peak=stats.peak,
            true_peak_dbfs=stats.true_peak_dbfs,
            integrated_lufs=stats.integrated_lufs,
        )

    return app


app = create_app()
