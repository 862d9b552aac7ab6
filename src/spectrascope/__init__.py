"""Real-time spectral synthesis and visualization engine."""

__version__ = "0.1.0"

from spectrascope.core.analyzer import SpectrumAnalyzer, analyze_1d, analyze_2d
from spectrascope.core.errors import ErrorKind, SizeError
from spectrascope.core.synthesizer import SynthesisParams, Synthesizer
from spectrascope.engine import EngineConfig, FrameEngine, FrameResult, compute_frame
from spectrascope.visualizers.palette import PaletteColor, map_color

__all__ = [
    "SpectrumAnalyzer",
    "analyze_1d",
    "analyze_2d",
    "ErrorKind",
    "SizeError",
    "SynthesisParams",
    "Synthesizer",
    "EngineConfig",
    "FrameEngine",
    "FrameResult",
    "compute_frame",
    "PaletteColor",
    "map_color",
]
