"""
Test-signal synthesis.

Generates the 1D two-tone waveform and the separable 2D grid pattern
driven by the same frequency controls and the caller-owned phase.
"""

import math
from dataclasses import dataclass, fields, replace
from typing import Any, Mapping

import numpy as np

from spectrascope.core.errors import ParameterError

# Phase multiplier on the second tone; makes the tones drift against
# each other as the phase advances.
DETUNE = 1.3


@dataclass(frozen=True)
class SynthesisParams:
    """Per-frame synthesis controls, passed by value."""

    n: int = 1024
    grid_size: int = 128
    freq_a: float = 6.0
    freq_b: float = 20.0
    noise: float = 0.08
    phase: float = 0.0

    # Accepted spellings per field, as sent by browser front-ends
    _ALIASES = {
        "n": ("n",),
        "grid_size": ("gridSize", "grid_size"),
        "freq_a": ("freqA", "freq_a"),
        "freq_b": ("freqB", "freq_b"),
        "noise": ("noise",),
        "phase": ("phase",),
    }

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "SynthesisParams":
        """
        Build params from a loosely typed mapping.

        Missing or non-numeric values fall back to the field default.
        Nothing is clamped here; range checks belong to the frame engine.

        Args:
            options: Query-string or JSON style mapping.

        Returns:
            A new SynthesisParams.
        """
        values = {}
        for f in fields(cls):
            for key in cls._ALIASES[f.name]:
                if key in options:
                    raw = options[key]
                    break
            else:
                continue

            if isinstance(raw, (list, tuple)):
                raw = raw[0] if raw else None

            parsed = _read_int(raw) if f.type in (int, "int") else _read_float(raw)
            if parsed is not None:
                values[f.name] = parsed

        return cls(**values)

    def with_phase(self, phase: float) -> "SynthesisParams":
        """Copy with a new phase."""
        return replace(self, phase=phase)

    def to_dict(self) -> dict[str, Any]:
        """camelCase view matching the front-end option names."""
        return {
            "n": self.n,
            "gridSize": self.grid_size,
            "freqA": self.freq_a,
            "freqB": self.freq_b,
            "noise": self.noise,
            "phase": self.phase,
        }


def _read_float(raw: Any) -> float | None:
    if isinstance(raw, bool):
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None


def _read_int(raw: Any) -> int | None:
    value = _read_float(raw)
    if value is None or not math.isfinite(value):
        return None
    return int(value)


def _noise(rng: np.random.Generator, amount: float, shape) -> np.ndarray | float:
    if amount > 0:
        return amount * rng.uniform(-1.0, 1.0, size=shape)
    return 0.0


def synthesize_signal(params: SynthesisParams, rng: np.random.Generator) -> np.ndarray:
    """
    Two detuned unit sinusoids plus uniform noise over n samples.

    value[i] = sin(2*pi*fa*t + phase) + sin(2*pi*fb*t + 1.3*phase) + noise*U(-1, 1)
    with t = i / n.
    """
    t = np.arange(params.n, dtype=np.float64) / params.n
    tone_a = np.sin(2 * np.pi * params.freq_a * t + params.phase)
    tone_b = np.sin(2 * np.pi * params.freq_b * t + params.phase * DETUNE)
    return tone_a + tone_b + _noise(rng, params.noise, params.n)


def synthesize_grid(params: SynthesisParams, rng: np.random.Generator) -> np.ndarray:
    """
    Separable 2D pattern, shape (grid_size, grid_size), row-major.

    value[y, x] = sin(2*pi*fa*u + phase) * cos(2*pi*fb*v) + noise*U(-1, 1)
    with u = x / g and v = y / g.
    """
    g = params.grid_size
    coords = np.arange(g, dtype=np.float64) / g
    across = np.sin(2 * np.pi * params.freq_a * coords + params.phase)
    down = np.cos(2 * np.pi * params.freq_b * coords)
    return np.outer(down, across) + _noise(rng, params.noise, (g, g))


def synthesize(
    params: SynthesisParams,
    rng: np.random.Generator,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Generate both test signals for one frame.

    The 1D signal draws its noise before the grid, so a seeded generator
    reproduces both buffers exactly.

    Args:
        params: Frame parameters (sizes assumed already validated).
        rng: Random source for the noise term.

    Returns:
        (signal, grid) float64 arrays.
    """
    signal = synthesize_signal(params, rng)
    grid = synthesize_grid(params, rng)
    return signal, grid


def frame_seed(params: SynthesisParams) -> int:
    """
    Deterministic per-frame seed derived from phase and length.

    Raises:
        ParameterError: If the phase (in thousandths) is not finite.
    """
    milli = params.phase * 1000
    if not math.isfinite(milli):
        raise ParameterError(f"phase must be finite, got {params.phase}")
    return (round(milli) + params.n * 37) % (1 << 63)


def randomize_params(
    rng: np.random.Generator,
    base: SynthesisParams | None = None,
) -> SynthesisParams:
    """
    Pick a fresh tone pair and noise level, keeping sizes and phase.

    freq_a is an integer in [2, 24], freq_b an integer in [18, 96] and
    noise lies in [0.02, 0.27], rounded to two decimals.
    """
    base = base or SynthesisParams()
    return replace(
        base,
        freq_a=float(rng.integers(2, 25)),
        freq_b=float(rng.integers(18, 97)),
        noise=round(float(rng.random()) * 0.25 + 0.02, 2),
    )


class Synthesizer:
    """
    Stateless synthesizer with a swappable random-source factory.

    The factory receives the frame parameters and returns a generator;
    by default it seeds from frame_seed so equal parameters give equal
    noise.
    """

    def __init__(self, rng_factory=None):
        self.rng_factory = rng_factory or (
            lambda params: np.random.default_rng(frame_seed(params))
        )

    def synthesize(
        self,
        params: SynthesisParams,
        rng: np.random.Generator | None = None,
    ) -> tuple[np.ndarray, np.ndarray]:
        """Synthesize with the given generator, or a fresh one from the factory."""
        if rng is None:
            rng = self.rng_factory(params)
        return synthesize(params, rng)
