"""
Frame engine.

Orchestrates one frame: validate parameters, synthesize the test
signals, analyze both, and bundle the render-ready buffers. Failures
come back as an error result; nothing escapes compute_frame.
"""

import math
from dataclasses import dataclass
from numbers import Real
from typing import Any, Iterator

import numpy as np

from spectrascope.core.analyzer import SpectrumAnalyzer
from spectrascope.core.errors import (
    ErrorKind,
    InternalError,
    ParameterError,
    SizeError,
    SpectrascopeError,
)
from spectrascope.core.numeric import is_power_of_two
from spectrascope.core.synthesizer import SynthesisParams, Synthesizer


@dataclass
class EngineConfig:
    """Limits and constants for the frame engine."""

    min_size: int = 2
    max_n: int = 4096
    max_grid_size: int = 512

    # Log compression offset for the 2D field
    epsilon: float = 1e-6

    # Nyquist-inclusive half spectrum (n // 2 + 1 bins) vs. all n bins
    half_spectrum: bool = True

    # Driver defaults
    phase_step: float = 0.04
    audio_gain: float = 0.3


@dataclass(frozen=True)
class FrameError:
    """Why a frame could not be produced."""

    kind: ErrorKind
    message: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


@dataclass(frozen=True)
class FrameResult:
    """
    All-or-nothing frame bundle.

    On success signal, spectrum, grid_spectrum and grid_size are set and
    error is None. On failure only error is set.
    """

    signal: np.ndarray | None = None
    spectrum: np.ndarray | None = None
    grid_spectrum: np.ndarray | None = None
    grid_size: int = 0
    error: FrameError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "FrameResult":
        return cls(error=FrameError(kind=kind, message=message))

    def to_dict(self, precision: int = 4) -> dict[str, Any]:
        """
        JSON-ready payload using the front-end's key names.

        Args:
            precision: Decimal places kept for float buffers.

        Returns:
            {"signal", "spectrum", "gridSpectrum", "gridSize", "n"} on
            success, {"error", "kind"} on failure. gridSpectrum is the
            row-major flattening of the grid.
        """
        if self.error is not None:
            return {"error": str(self.error), "kind": self.error.kind.value}

        def _round(values: np.ndarray) -> list[float]:
            return np.round(values, precision).ravel().tolist()

        return {
            "signal": _round(self.signal),
            "spectrum": _round(self.spectrum),
            "gridSpectrum": _round(self.grid_spectrum),
            "gridSize": self.grid_size,
            "n": len(self.signal),
        }


class FrameEngine:
    """
    Stateless parameters-to-frame pipeline.

    Holds only configuration and the stateless synthesizer/analyzer, so
    one engine can serve any number of frames or threads.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        synthesizer: Synthesizer | None = None,
    ):
        """
        Initialize the engine.

        Args:
            config: Size limits and constants.
            synthesizer: Synthesizer with a custom random-source factory.
        """
        self.cfg = config or EngineConfig()
        self.synthesizer = synthesizer or Synthesizer()
        self.analyzer = SpectrumAnalyzer(epsilon=self.cfg.epsilon)

    def _check_size(self, name: str, value: Any, maximum: int):
        if not is_power_of_two(value):
            raise SizeError(f"{name} must be a power of two, got {value!r}")
        if not self.cfg.min_size <= value <= maximum:
            raise SizeError(
                f"{name} must be between {self.cfg.min_size} and {maximum}, got {value}"
            )

    def validate(self, params: SynthesisParams):
        """
        Check sizes and parameter ranges before any work is done.

        Raises:
            SizeError: n or grid_size is not a power of two or out of range.
            ParameterError: Non-finite values, negative frequencies, or
                noise outside [0, 1].
        """
        self._check_size("n", params.n, self.cfg.max_n)
        self._check_size("gridSize", params.grid_size, self.cfg.max_grid_size)

        for name, value in (
            ("freqA", params.freq_a),
            ("freqB", params.freq_b),
            ("noise", params.noise),
            ("phase", params.phase),
        ):
            if isinstance(value, bool) or not isinstance(value, Real):
                raise ParameterError(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise ParameterError(f"{name} must be finite, got {value}")

        if params.freq_a < 0 or params.freq_b < 0:
            raise ParameterError("frequencies must be non-negative")
        if not 0.0 <= params.noise <= 1.0:
            raise ParameterError(f"noise must be within [0, 1], got {params.noise}")

    def _run(
        self,
        params: SynthesisParams,
        rng: np.random.Generator | None,
    ) -> FrameResult:
        self.validate(params)

        signal, grid = self.synthesizer.synthesize(params, rng)
        spectrum = self.analyzer.analyze_1d(signal, half=self.cfg.half_spectrum)
        grid_spectrum = self.analyzer.analyze_2d(grid, params.grid_size)

        for name, buf in (
            ("signal", signal),
            ("spectrum", spectrum),
            ("gridSpectrum", grid_spectrum),
        ):
            if not np.all(np.isfinite(buf)):
                raise InternalError(f"{name} contains non-finite values")

        return FrameResult(
            signal=signal,
            spectrum=spectrum,
            grid_spectrum=grid_spectrum,
            grid_size=params.grid_size,
        )

    def compute_frame(
        self,
        params: SynthesisParams,
        rng: np.random.Generator | None = None,
    ) -> FrameResult:
        """
        Compute one frame.

        Args:
            params: Frame parameters.
            rng: Optional noise source; when omitted the synthesizer's
                factory seeds one from the parameters.

        Returns:
            FrameResult with all buffers, or with only an error.
        """
        try:
            return self._run(params, rng)
        except SpectrascopeError as e:
            return FrameResult.failure(e.kind, str(e))
        except Exception as e:
            return FrameResult.failure(ErrorKind.INTERNAL, f"{type(e).__name__}: {e}")

    def frames(
        self,
        params: SynthesisParams,
        count: int,
        phase_step: float | None = None,
    ) -> Iterator[FrameResult]:
        """
        Drive an animation: one frame per tick, advancing the phase.

        Args:
            params: Starting parameters.
            count: Number of frames to yield.
            phase_step: Phase increment per tick (default from config).

        Yields:
            FrameResult per tick.
        """
        step = self.cfg.phase_step if phase_step is None else phase_step
        for i in range(count):
            yield self.compute_frame(params.with_phase(params.phase + i * step))


_default_engine = FrameEngine()


def compute_frame(
    params: SynthesisParams,
    rng: np.random.Generator | None = None,
    config: EngineConfig | None = None,
) -> FrameResult:
    """Compute one frame with the default engine, or one built from config."""
    engine = _default_engine if config is None else FrameEngine(config)
    return engine.compute_frame(params, rng)
