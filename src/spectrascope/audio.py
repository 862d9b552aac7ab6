"""
Loopable audio buffers built from the synthesized waveform.

The engine knows nothing about devices or playback; it only shapes
samples that a player can loop.
"""

import io

import numpy as np
import soundfile as sf

DEFAULT_GAIN = 0.3
DEFAULT_SAMPLE_RATE = 44100


def loop_buffer(signal: np.ndarray, gain: float = DEFAULT_GAIN) -> np.ndarray:
    """
    Single-cycle mono buffer for seamless looping.

    Args:
        signal: The frame's 1D waveform.
        gain: Output scale applied to every sample.

    Returns:
        float32 samples.
    """
    return (np.asarray(signal, dtype=np.float64) * gain).astype(np.float32)


def wav_bytes(buffer: np.ndarray, sample_rate: int = DEFAULT_SAMPLE_RATE) -> bytes:
    """Encode a mono buffer as an in-memory 16-bit WAV file."""
    out = io.BytesIO()
    sf.write(out, np.clip(buffer, -1.0, 1.0), sample_rate, format="WAV", subtype="PCM_16")
    return out.getvalue()
