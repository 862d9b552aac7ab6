"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from spectrascope.core.synthesizer import SynthesisParams

SUPPORTED_SIZES = [2, 4, 8, 16, 64, 256, 1024, 4096]


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded generator for reproducible noise."""
    return np.random.default_rng(42)


@pytest.fixture
def two_tone_params() -> SynthesisParams:
    """Noise-free two-tone frame: bins 4 and 40 of a 256-point window."""
    return SynthesisParams(n=256, grid_size=64, freq_a=4.0, freq_b=40.0, noise=0.0, phase=0.0)


def pure_sine(n: int, k: int, phase: float = 0.0) -> np.ndarray:
    """
    Unit-amplitude sinusoid completing k cycles over n samples.

    Returns:
        float64 array of length n.
    """
    t = np.arange(n) / n
    return np.sin(2 * np.pi * k * t + phase)
