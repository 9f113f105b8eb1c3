import io
import wave

import numpy as np
import pytest

from storyvoice.dsp_engine.buffer import SampleBuffer


@pytest.fixture
def wav_bytes():
    """Return a factory that builds WAV bytes with the stdlib ``wave`` writer."""

    def _make(pcm: np.ndarray, n_channels: int = 1, framerate: int = 24000) -> bytes:
        out = io.BytesIO()
        with wave.open(out, "wb") as wf:
            wf.setnchannels(n_channels)
            wf.setsampwidth(2)
            wf.setframerate(framerate)
            wf.writeframes(np.asarray(pcm, dtype="<i2").tobytes())
        return out.getvalue()

    return _make


@pytest.fixture
def sine_buffer():
    """Return a factory for sine-tone buffers."""

    def _make(
        freq: float = 440.0,
        seconds: float = 1.0,
        sample_rate: int = 24000,
        channels: int = 1,
        amplitude: float = 0.5,
    ) -> SampleBuffer:
        t = np.arange(int(seconds * sample_rate)) / sample_rate
        tone = amplitude * np.sin(2.0 * np.pi * freq * t)
        return SampleBuffer(samples=np.tile(tone, (channels, 1)), sample_rate=sample_rate)

    return _make


@pytest.fixture
def noise_buffer():
    def _make(seconds: float = 1.0, sample_rate: int = 24000, channels: int = 1, seed: int = 7) -> SampleBuffer:
        rng = np.random.default_rng(seed)
        data = rng.uniform(-0.5, 0.5, size=(channels, int(seconds * sample_rate)))
        return SampleBuffer(samples=data, sample_rate=sample_rate)

    return _make
