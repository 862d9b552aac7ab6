"""Core synthesis and spectral analysis modules."""

from spectrascope.core.analyzer import (
    SpectrumAnalyzer,
    analyze_1d,
    analyze_2d,
    fft_2d,
    find_peaks,
    ifft_2d,
)
from spectrascope.core.errors import (
    ErrorKind,
    InternalError,
    ParameterError,
    SizeError,
    SpectrascopeError,
)
from spectrascope.core.numeric import fft, ifft
from spectrascope.core.synthesizer import SynthesisParams, Synthesizer, synthesize

__all__ = [
    "SpectrumAnalyzer",
    "analyze_1d",
    "analyze_2d",
    "fft_2d",
    "find_peaks",
    "ifft_2d",
    "fft",
    "ifft",
    "ErrorKind",
    "InternalError",
    "ParameterError",
    "SizeError",
    "SpectrascopeError",
    "SynthesisParams",
    "Synthesizer",
    "synthesize",
]
