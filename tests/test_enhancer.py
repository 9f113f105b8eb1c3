"""Tests for the compressor and the cinematic enhancement chain."""

import numpy as np
import pytest

from storyvoice.dsp_engine.buffer import SampleBuffer
from storyvoice.dsp_engine.compressor import DynamicsCompressor
from storyvoice.dsp_engine.enhancer import CINEMATIC_COMPRESSOR, CINEMATIC_EQ, apply_enhancement


class TestStaticCurve:
    def setup_method(self):
        self.comp = DynamicsCompressor()

    def test_below_knee(self):
        assert float(self.comp.static_reduction_db(np.array(-60.0))) == 0.0

    def test_above_knee(self):
        assert float(self.comp.static_reduction_db(np.array(-6.0))) == pytest.approx(11.0 / 12.0 * 18.0)

    def test_inside_knee_at_threshold(self):
        expected = (11.0 / 12.0) * 15.0 ** 2 / 60.0
        assert float(self.comp.static_reduction_db(np.array(-24.0))) == pytest.approx(expected)

    def test_knee_edges_continuous(self):
        lo, hi = self.comp.static_reduction_db(np.array([-39.0, -9.0]))
        assert lo == pytest.approx(0.0)
        assert hi == pytest.approx(11.0 / 12.0 * 15.0)

    def test_makeup_gain(self):
        assert self.comp.makeup_gain_db() == pytest.approx(0.6 * 22.0)
        assert DynamicsCompressor(auto_makeup=False).makeup_gain_db() == 0.0


class TestCompressorProcess:
    def test_quiet_signal_gets_makeup_only(self):
        comp = DynamicsCompressor()
        x = np.full(1000, 0.001)
        y = comp.process(x, 24000)
        np.testing.assert_allclose(y, x * 10 ** (13.2 / 20.0), rtol=1e-9)

    def test_loud_signal_reduced(self, sine_buffer):
        buf = sine_buffer(freq=1000.0, seconds=1.0, sample_rate=48000, amplitude=0.9)
        y = DynamicsCompressor().process(buf.samples[0], 48000)
        tail_in = buf.samples[0][24000:]
        tail_out = y[24000:]
        assert np.sqrt(np.mean(tail_out ** 2)) < np.sqrt(np.mean(tail_in.astype(np.float64) ** 2))

    def test_silent_channel_stays_silent(self, sine_buffer):
        tone = sine_buffer(seconds=0.2).samples[0]
        y = DynamicsCompressor().process(np.stack([tone, np.zeros_like(tone)]), 24000)
        assert y.shape == (2, tone.shape[0])
        assert not np.any(y[1])


class TestApplyEnhancement:
    def test_chain_constants(self):
        assert CINEMATIC_EQ == (("lowshelf", 120.0, 6.0), ("highshelf", 8000.0, 2.0))
        assert CINEMATIC_COMPRESSOR.threshold_db == -24.0
        assert CINEMATIC_COMPRESSOR.knee_db == 30.0
        assert CINEMATIC_COMPRESSOR.ratio == 12.0
        assert CINEMATIC_COMPRESSOR.attack_ms == 3.0
        assert CINEMATIC_COMPRESSOR.release_ms == 250.0

    @pytest.mark.parametrize("channels", [1, 2])
    def test_shape_preserved(self, noise_buffer, channels):
        buf = noise_buffer(seconds=0.5, channels=channels, sample_rate=22050)
        out = apply_enhancement(buf)
        assert out.channel_count == channels
        assert out.frame_count == buf.frame_count
        assert out.sample_rate == 22050
        assert np.all(np.isfinite(out.samples))

    def test_single_frame(self):
        buf = SampleBuffer(samples=np.array([0.25]), sample_rate=24000)
        out = apply_enhancement(buf)
        assert out.frame_count == 1

    def test_returns_new_buffer(self, sine_buffer):
        buf = sine_buffer(seconds=0.25)
        before = buf.samples.copy()
        out = apply_enhancement(buf)
        assert out is not buf
        np.testing.assert_array_equal(buf.samples, before)
        assert not np.allclose(out.samples, buf.samples)
