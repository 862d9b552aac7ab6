"""Tests for the FrameEngine module."""

import json

import numpy as np
import pytest

from spectrascope.core.analyzer import find_peaks
from spectrascope.core.errors import ErrorKind
from spectrascope.core.synthesizer import SynthesisParams, Synthesizer
from spectrascope.engine import EngineConfig, FrameEngine, FrameResult, compute_frame


class TestComputeFrame:
    """Tests for single-frame computation."""

    def test_returns_frame_result(self, two_tone_params):
        result = compute_frame(two_tone_params)
        assert isinstance(result, FrameResult)
        assert result.ok
        assert result.error is None

    def test_buffer_shapes(self, two_tone_params):
        result = compute_frame(two_tone_params)

        assert result.signal.shape == (256,)
        assert result.spectrum.shape == (129,)
        assert result.grid_spectrum.shape == (64, 64)
        assert result.grid_size == 64

    def test_two_tone_peaks(self, two_tone_params):
        """freqA=4, freqB=40 give the two largest spectrum peaks at bins 4 and 40."""
        result = compute_frame(two_tone_params)

        assert sorted(find_peaks(result.spectrum, count=2)) == [4, 40]
        assert np.all(np.abs(result.signal) <= 2.0)

    def test_grid_range(self, two_tone_params):
        result = compute_frame(two_tone_params.with_phase(0.7))
        assert result.grid_spectrum.min() >= 0.0
        assert result.grid_spectrum.max() <= 1.0

    def test_spectrum_non_negative(self):
        result = compute_frame(SynthesisParams(n=512, grid_size=32, noise=0.5))
        assert np.all(result.spectrum >= 0)

    def test_phase_changes_signal_not_peaks(self, two_tone_params):
        a = compute_frame(two_tone_params)
        b = compute_frame(two_tone_params.with_phase(1.1))

        assert not np.array_equal(a.signal, b.signal)
        assert sorted(find_peaks(a.spectrum)) == sorted(find_peaks(b.spectrum))

    def test_deterministic_without_rng(self):
        """Noise is seeded from the parameters, so repeat calls agree."""
        params = SynthesisParams(n=256, grid_size=32, noise=0.4, phase=2.0)
        a = compute_frame(params)
        b = compute_frame(params)

        np.testing.assert_array_equal(a.signal, b.signal)
        np.testing.assert_array_equal(a.grid_spectrum, b.grid_spectrum)

    def test_injected_rng(self):
        params = SynthesisParams(n=64, grid_size=8, noise=0.5)
        a = compute_frame(params, rng=np.random.default_rng(1))
        b = compute_frame(params, rng=np.random.default_rng(2))
        assert not np.array_equal(a.signal, b.signal)

    def test_full_spectrum_config(self, two_tone_params):
        result = compute_frame(two_tone_params, config=EngineConfig(half_spectrum=False))
        assert len(result.spectrum) == 256


class TestFrameErrors:
    """All-or-nothing error results."""

    @pytest.mark.parametrize("n", [300, 0, -8, 3, 1, 8192])
    def test_bad_n(self, n):
        result = compute_frame(SynthesisParams(n=n, grid_size=64))

        assert not result.ok
        assert result.error.kind is ErrorKind.SIZE
        assert result.signal is None
        assert result.spectrum is None
        assert result.grid_spectrum is None
        assert result.grid_size == 0

    @pytest.mark.parametrize("grid_size", [0, 48, 1024, -2])
    def test_bad_grid_size(self, grid_size):
        result = compute_frame(SynthesisParams(n=256, grid_size=grid_size))
        assert result.error.kind is ErrorKind.SIZE
        assert "gridSize" in result.error.message

    def test_float_size_rejected(self):
        result = compute_frame(SynthesisParams(n=256.0, grid_size=64))
        assert result.error.kind is ErrorKind.SIZE

    @pytest.mark.parametrize(
        "overrides",
        [
            {"noise": -0.1},
            {"noise": 1.5},
            {"freq_a": -1.0},
            {"freq_b": float("inf")},
            {"phase": float("nan")},
            {"noise": "loud"},
        ],
    )
    def test_bad_parameters(self, overrides):
        params = SynthesisParams(n=64, grid_size=8, **overrides)
        result = compute_frame(params)
        assert result.error.kind is ErrorKind.PARAMETER
        assert result.signal is None

    def test_custom_limits(self):
        config = EngineConfig(max_n=128)
        result = compute_frame(SynthesisParams(n=256, grid_size=8), config=config)
        assert result.error.kind is ErrorKind.SIZE

    def test_unexpected_failure_becomes_internal_error(self):
        """Nothing escapes compute_frame."""

        def broken_factory(params):
            raise ZeroDivisionError("boom")

        engine = FrameEngine(synthesizer=Synthesizer(rng_factory=broken_factory))
        result = engine.compute_frame(SynthesisParams(n=64, grid_size=8))

        assert result.error.kind is ErrorKind.INTERNAL
        assert "boom" in result.error.message

    def test_non_finite_output_is_internal_error(self, monkeypatch):
        engine = FrameEngine()
        monkeypatch.setattr(
            engine.analyzer, "analyze_1d", lambda signal, half=True: np.full(3, np.nan)
        )
        result = engine.compute_frame(SynthesisParams(n=64, grid_size=8))

        assert result.error.kind is ErrorKind.INTERNAL
        assert "spectrum" in result.error.message


class TestFrames:
    def test_phase_advances(self):
        engine = FrameEngine()
        params = SynthesisParams(n=64, grid_size=8, noise=0.0)
        results = list(engine.frames(params, 3))

        assert len(results) == 3
        assert all(r.ok for r in results)
        expected = engine.compute_frame(params.with_phase(2 * 0.04))
        np.testing.assert_array_equal(results[2].signal, expected.signal)

    def test_custom_step(self):
        engine = FrameEngine()
        params = SynthesisParams(n=64, grid_size=8, noise=0.0)
        first, second = engine.frames(params, 2, phase_step=0.5)
        expected = engine.compute_frame(params.with_phase(0.5))
        np.testing.assert_array_equal(second.signal, expected.signal)


class TestToDict:
    def test_success_payload(self, two_tone_params):
        payload = compute_frame(two_tone_params).to_dict()

        assert set(payload) == {"signal", "spectrum", "gridSpectrum", "gridSize", "n"}
        assert len(payload["gridSpectrum"]) == 64 * 64
        assert payload["gridSize"] == 64
        assert payload["n"] == 256
        json.dumps(payload)

    def test_row_major_flattening(self, two_tone_params):
        result = compute_frame(two_tone_params)
        flat = result.to_dict(precision=10)["gridSpectrum"]
        assert flat[1 * 64 + 5] == pytest.approx(result.grid_spectrum[1, 5], abs=1e-9)

    def test_precision(self, two_tone_params):
        payload = compute_frame(two_tone_params).to_dict(precision=2)
        assert all(v == round(v, 2) for v in payload["signal"])

    def test_error_payload(self):
        payload = compute_frame(SynthesisParams(n=300)).to_dict()
        assert payload["kind"] == "SizeError"
        assert "SizeError" in payload["error"]
        assert "signal" not in payload
