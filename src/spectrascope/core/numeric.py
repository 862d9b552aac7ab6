"""
Shared numeric helpers for the spectral core.

Power-of-two checks, bit-reversal tables, twiddle factors and an
iterative radix-2 Cooley-Tukey FFT and inverse FFT that run along the
last axis, so a whole grid of rows is transformed in one call.
"""

from functools import lru_cache
from numbers import Integral

import numpy as np

from spectrascope.core.errors import SizeError


def is_power_of_two(n) -> bool:
    """Return True for positive integral powers of two (1, 2, 4, ...)."""
    if isinstance(n, bool) or not isinstance(n, Integral):
        return False
    n = int(n)
    return n > 0 and (n & (n - 1)) == 0


def next_power_of_two(n: int) -> int:
    """
    Smallest power of two greater than or equal to n.

    Args:
        n: Any integer.

    Returns:
        The next power of two; 1 for n <= 1.
    """
    if n <= 1:
        return 1
    return 1 << (int(n) - 1).bit_length()


@lru_cache(maxsize=32)
def bit_reverse_indices(n: int) -> np.ndarray:
    """
    Bit-reversal permutation for an n-point radix-2 transform.

    The returned array is shared between callers and therefore read-only.
    """
    if not is_power_of_two(n):
        raise SizeError(f"bit reversal needs a power-of-two length, got {n}")

    bits = n.bit_length() - 1
    idx = np.arange(n, dtype=np.intp)
    rev = np.zeros(n, dtype=np.intp)
    for _ in range(bits):
        rev = (rev << 1) | (idx & 1)
        idx = idx >> 1

    rev.setflags(write=False)
    return rev


@lru_cache(maxsize=32)
def twiddle_factors(n: int, inverse: bool = False) -> np.ndarray:
    """
    Twiddle factors exp(-2*pi*i*k/n) for k in [0, n/2).

    With inverse=True the conjugate table exp(+2*pi*i*k/n) is returned.
    Read-only, cached per size and direction.
    """
    if not is_power_of_two(n):
        raise SizeError(f"twiddle table needs a power-of-two length, got {n}")

    sign = 1.0 if inverse else -1.0
    k = np.arange(n // 2, dtype=np.float64)
    table = np.exp(sign * 2j * np.pi * k / n)
    table.setflags(write=False)
    return table


def _butterflies(x, inverse: bool) -> np.ndarray:
    data = np.asarray(x, dtype=np.complex128)
    if data.ndim == 0:
        raise SizeError("cannot transform a scalar")

    n = data.shape[-1]
    if not is_power_of_two(n):
        raise SizeError(f"FFT length must be a power of two, got {n}")

    # Fancy indexing copies, so the butterflies below never touch the input.
    # Contiguity keeps the per-stage reshape a view.
    out = np.ascontiguousarray(data[..., bit_reverse_indices(n)])
    table = twiddle_factors(n, inverse)
    batch_shape = out.shape[:-1]

    size = 2
    while size <= n:
        half = size // 2
        w = table[:: n // size]
        blocks = out.reshape(batch_shape + (n // size, size))

        even = blocks[..., :half]
        odd = blocks[..., half:] * w
        blocks[..., half:] = even - odd
        blocks[..., :half] += odd

        size *= 2

    return out


def fft(x) -> np.ndarray:
    """
    Radix-2 decimation-in-time FFT along the last axis.

    Input is promoted to complex128 (real input gets a zero imaginary
    part). Leading axes are treated as a batch. No 1/n scaling is applied.

    Args:
        x: Array-like whose last axis has a power-of-two length.

    Returns:
        New complex128 array of the same shape.

    Raises:
        SizeError: If the last axis length is not a power of two.
    """
    return _butterflies(x, inverse=False)


def ifft(x) -> np.ndarray:
    """
    Inverse of fft along the last axis, scaled by 1/n.

    ifft(fft(x)) reproduces x to rounding error.

    Raises:
        SizeError: If the last axis length is not a power of two.
    """
    out = _butterflies(x, inverse=True)
    out /= out.shape[-1]
    return out


def magnitude(values: np.ndarray) -> np.ndarray:
    """Per-element sqrt(re^2 + im^2) as float64."""
    return np.hypot(values.real, values.imag)
