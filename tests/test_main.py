"""Service-level tests for the FastAPI app."""

import struct

import numpy as np
import pytest
from fastapi.testclient import TestClient

from storyvoice.main import app
from storyvoice.settings import get_settings


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def pcm_bytes():
    t = np.arange(12000) / 24000.0
    return (0.4 * np.sin(2 * np.pi * 330.0 * t) * 32767).astype("<i2").tobytes()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_process_raw_pcm(client, pcm_bytes):
    response = client.post(
        "/process",
        files={"file": ("speech.pcm", pcm_bytes, "application/octet-stream")},
        data={"speed": "2.0", "enhance": "true"},
    )
    assert response.status_code == 200
    assert response.headers["content-type"] == "audio/wav"
    assert response.headers["x-processing-chain"] == "decode,time_stretch,cinematic_enhance,encode_wav"
    body = response.content
    assert body[:4] == b"RIFF"
    assert body[8:12] == b"WAVE"
    frames = struct.unpack_from("<I", body, 40)[0] // 2
    assert abs(frames - 6000) <= 0.25 * 6000


def test_process_wav_without_enhancement(client, wav_bytes):
    pcm = np.arange(-500, 500, dtype=np.int16) * 30
    response = client.post(
        "/process",
        files={"file": ("speech.wav", wav_bytes(pcm, framerate=16000), "audio/wav")},
        data={"enhance": "false"},
    )
    assert response.status_code == 200
    assert response.headers["x-processing-chain"] == "decode,encode_wav"
    assert struct.unpack_from("<I", response.content, 24)[0] == 16000


def test_process_rejects_bad_speed(client, pcm_bytes):
    response = client.post(
        "/process",
        files={"file": ("speech.pcm", pcm_bytes, "application/octet-stream")},
        data={"speed": "0"},
    )
    assert response.status_code == 422
    assert response.json()["detail"]["error"] == "INVALID_PARAMETER"


@pytest.mark.parametrize("speed", ["0.001", "10"])
def test_process_rejects_speed_outside_service_bounds(client, pcm_bytes, speed):
    response = client.post(
        "/process",
        files={"file": ("speech.pcm", pcm_bytes, "application/octet-stream")},
        data={"speed": speed},
    )
    assert response.status_code == 422
    assert response.json()["detail"]["error"] == "INVALID_PARAMETER"
    assert "between 0.25 and 4.0" in response.json()["detail"]["message"]


def test_process_rejects_bad_channels(client, pcm_bytes):
    response = client.post(
        "/process",
        files={"file": ("speech.pcm", pcm_bytes, "application/octet-stream")},
        data={"channels": "5"},
    )
    assert response.status_code == 422


def test_process_empty_upload(client):
    response = client.post("/process", files={"file": ("speech.pcm", b"", "application/octet-stream")})
    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "EMPTY_AUDIO"


def test_process_upload_limit(client, monkeypatch, pcm_bytes):
    monkeypatch.setenv("STORYVOICE_MAX_UPLOAD_BYTES", "100")
    get_settings.cache_clear()
    try:
        response = client.post(
            "/process",
            files={"file": ("speech.pcm", pcm_bytes, "application/octet-stream")},
        )
    finally:
        monkeypatch.delenv("STORYVOICE_MAX_UPLOAD_BYTES")
        get_settings.cache_clear()
    assert response.status_code == 413


def test_analyze(client, pcm_bytes):
    response = client.post(
        "/analyze",
        files={"file": ("speech.pcm", pcm_bytes, "application/octet-stream")},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["sample_rate"] == 24000
    assert payload["channels"] == 1
    assert payload["frames"] == 12000
    assert payload["duration"] == pytest.approx(0.5)
    assert payload["duration_label"] == "00:00"
    assert payload["peak"] == pytest.approx(0.4, abs=1e-3)


def test_analyze_empty(client):
    response = client.post("/analyze", files={"file": ("speech.pcm", b"", "application/octet-stream")})
    assert response.status_code == 400
