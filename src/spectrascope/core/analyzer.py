"""
Spectral analysis module.

Computes the 1D magnitude spectrum of the waveform and the
log-compressed, DC-centred 2D magnitude field of the grid signal.
"""

import numpy as np
from scipy import signal as scipy_signal

from spectrascope.core.errors import SizeError
from spectrascope.core.numeric import fft, ifft, is_power_of_two, magnitude

# Added before log10 so empty bins do not produce -inf
LOG_EPSILON = 1e-6


def analyze_1d(signal, half: bool = True) -> np.ndarray:
    """
    Magnitude spectrum of a real signal.

    Magnitudes are not scaled by 1/n; a unit sinusoid on bin k reads n/2.

    Args:
        signal: Real samples; length must be a power of two.
        half: Return bins 0..n/2 inclusive (DC to Nyquist). When False,
            all n bins are returned.

    Returns:
        Non-negative float64 magnitudes.

    Raises:
        SizeError: If the length is not a power of two.
    """
    samples = np.asarray(signal, dtype=np.float64)
    if samples.ndim != 1:
        raise SizeError(f"expected a 1D signal, got shape {samples.shape}")
    if not is_power_of_two(len(samples)):
        raise SizeError(f"signal length must be a power of two, got {len(samples)}")

    mags = magnitude(fft(samples))
    if half:
        return mags[: len(samples) // 2 + 1]
    return mags


def fft_2d(grid: np.ndarray) -> np.ndarray:
    """Separable 2D FFT: every row, then every column."""
    rows = fft(grid)
    return fft(rows.swapaxes(-1, -2)).swapaxes(-1, -2)


def ifft_2d(spectrum: np.ndarray) -> np.ndarray:
    """Inverse of fft_2d, scaled by 1/(rows*cols)."""
    rows = ifft(spectrum)
    return ifft(rows.swapaxes(-1, -2)).swapaxes(-1, -2)


class SpectrumAnalyzer:
    """
    Turns synthesized buffers into render-ready spectra.

    The 2D path runs FFT -> magnitude -> log10 compression ->
    normalization by the peak -> quadrant shift -> clamp to [0, 1].
    """

    def __init__(self, epsilon: float = LOG_EPSILON):
        """
        Initialize the analyzer.

        Args:
            epsilon: Offset added to magnitudes before the logarithm.
        """
        self.epsilon = epsilon

    def analyze_1d(self, signal, half: bool = True) -> np.ndarray:
        """See module-level analyze_1d."""
        return analyze_1d(signal, half=half)

    def log_compress(self, mags: np.ndarray) -> np.ndarray:
        """log10(magnitude + epsilon)."""
        return np.log10(mags + self.epsilon)

    def normalize(self, log_mags: np.ndarray) -> np.ndarray:
        """
        Divide by the peak value.

        A non-positive or non-finite peak (all-zero or NaN input) falls
        back to a divisor of 1.
        """
        peak = np.max(log_mags) if log_mags.size else 0.0
        if not np.isfinite(peak) or peak <= 0:
            peak = 1.0
        return log_mags / peak

    def quadrant_shift(self, field: np.ndarray) -> np.ndarray:
        """Move cell (x, y) to ((x + g/2) mod g, (y + g/2) mod g)."""
        rows, cols = field.shape
        return np.roll(field, shift=(rows // 2, cols // 2), axis=(0, 1))

    def analyze_2d(self, grid, grid_size: int) -> np.ndarray:
        """
        Log-scaled, centred magnitude field of a square grid.

        Args:
            grid: grid_size * grid_size samples, either flat row-major or
                already shaped (grid_size, grid_size).
            grid_size: Side length; must be a power of two.

        Returns:
            (grid_size, grid_size) float64 array in [0, 1] with the
            zero-frequency cell at (grid_size // 2, grid_size // 2).

        Raises:
            SizeError: On a non power-of-two side or a mismatched grid.
        """
        if not is_power_of_two(grid_size):
            raise SizeError(f"grid size must be a power of two, got {grid_size}")

        cells = np.asarray(grid, dtype=np.float64)
        if cells.size != grid_size * grid_size:
            raise SizeError(
                f"grid holds {cells.size} samples, expected {grid_size * grid_size}"
            )
        cells = cells.reshape(grid_size, grid_size)

        mags = magnitude(fft_2d(cells))
        field = self.normalize(self.log_compress(mags))
        return np.clip(self.quadrant_shift(field), 0.0, 1.0)

    def find_peaks(self, spectrum, count: int = 2) -> np.ndarray:
        """See module-level find_peaks."""
        return find_peaks(spectrum, count=count)


def analyze_2d(grid, grid_size: int) -> np.ndarray:
    """Module-level shortcut using the default epsilon."""
    return SpectrumAnalyzer().analyze_2d(grid, grid_size)


def find_peaks(spectrum, count: int = 2) -> np.ndarray:
    """
    Bin indices of the strongest local maxima, strongest first.

    The spectrum is edge-padded with zeros so DC and the last bin can
    qualify as peaks.

    Args:
        spectrum: 1D magnitudes.
        count: Maximum number of peaks to return.

    Returns:
        int array of at most count indices.
    """
    mags = np.asarray(spectrum, dtype=np.float64)
    if mags.size == 0 or count <= 0:
        return np.array([], dtype=np.intp)

    padded = np.concatenate(([0.0], mags, [0.0]))
    peaks, props = scipy_signal.find_peaks(padded, height=0.0)
    if len(peaks) == 0:
        return np.array([], dtype=np.intp)

    order = np.argsort(-props["peak_heights"], kind="stable")
    return (peaks[order][:count] - 1).astype(np.intp)
