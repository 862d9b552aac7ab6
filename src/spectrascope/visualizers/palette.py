"""
Palette mapping.

Maps normalized spectrum magnitudes to RGB along a fixed 4-stop
gradient: near-black, teal, burnt orange, warm sand.
"""

import math
from dataclasses import dataclass

import numpy as np
from PIL import Image


@dataclass(frozen=True)
class PaletteColor:
    """An 8-bit RGB triple."""

    r: int
    g: int
    b: int

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)


# (position, (r, g, b))
PALETTE_STOPS = (
    (0.0, (10, 20, 26)),
    (0.45, (12, 123, 110)),
    (0.7, (211, 107, 52)),
    (1.0, (246, 206, 140)),
)

# Rec. 709 luma weights
LUMA_WEIGHTS = (0.2126, 0.7152, 0.0722)


def _segment_levels(lo, hi) -> int:
    """
    Number of interpolation steps for a segment, 0 for a continuous one.

    A segment where every channel rises interpolates freely. Where some
    channel falls, the span is snapped to the most levels for which the
    smallest possible rounded rise always outweighs the largest possible
    rounded fall in luminance.
    """
    deltas = [b - a for a, b in zip(lo, hi)]
    if all(d >= 0 for d in deltas):
        return 0

    for levels in range(max(abs(d) for d in deltas), 0, -1):
        rise = sum(w * math.floor(d / levels) for w, d in zip(LUMA_WEIGHTS, deltas) if d > 0)
        fall = sum(w * math.ceil(-d / levels) for w, d in zip(LUMA_WEIGHTS, deltas) if d < 0)
        if rise >= fall:
            return levels
    raise ValueError(f"palette segment {lo} -> {hi} darkens")


SEGMENT_LEVELS = tuple(
    _segment_levels(prev_rgb, next_rgb)
    for (_, prev_rgb), (_, next_rgb) in zip(PALETTE_STOPS, PALETTE_STOPS[1:])
)

_POSITIONS = np.array([pos for pos, _ in PALETTE_STOPS])
_ANCHORS = np.array([rgb for _, rgb in PALETTE_STOPS], dtype=np.float64)
_LEVELS = np.array(SEGMENT_LEVELS, dtype=np.float64)


def _round_half_up(value):
    return np.floor(value + 0.5)


def map_color(t: float) -> PaletteColor:
    """
    Color for a normalized scalar.

    Linear interpolation between the neighbouring stops. Values below 0
    (and NaN) clamp to the first anchor, values above 1 to the last.
    Luminance never decreases as t grows.

    Args:
        t: Normalized magnitude, nominally in [0, 1].

    Returns:
        PaletteColor with channels rounded half up.
    """
    if math.isnan(t) or t <= PALETTE_STOPS[0][0]:
        return PaletteColor(*PALETTE_STOPS[0][1])
    if t >= PALETTE_STOPS[-1][0]:
        return PaletteColor(*PALETTE_STOPS[-1][1])

    stops = zip(PALETTE_STOPS, PALETTE_STOPS[1:], SEGMENT_LEVELS)
    for (prev_t, prev_rgb), (next_t, next_rgb), levels in stops:
        if t <= next_t:
            span = (t - prev_t) / (next_t - prev_t)
            if levels:
                span = math.floor(span * levels + 0.5) / levels
            channels = [
                int(math.floor(p + (n - p) * span + 0.5))
                for p, n in zip(prev_rgb, next_rgb)
            ]
            return PaletteColor(*channels)

    return PaletteColor(*PALETTE_STOPS[-1][1])


def apply_palette(field: np.ndarray) -> np.ndarray:
    """
    Vectorized map_color over a scalar field.

    Args:
        field: (H, W) float array, nominally in [0, 1].

    Returns:
        (H, W, 3) uint8 RGB array.
    """
    vals = np.nan_to_num(np.asarray(field, dtype=np.float64), nan=0.0)
    vals = np.clip(vals, _POSITIONS[0], _POSITIONS[-1])

    # Segment index per cell; t == stop position stays in the lower segment
    seg = np.clip(np.searchsorted(_POSITIONS, vals, side="left") - 1, 0, len(_POSITIONS) - 2)
    lo = _POSITIONS[seg]
    hi = _POSITIONS[seg + 1]
    span = (vals - lo) / (hi - lo)

    levels = _LEVELS[seg]
    stepped = levels > 0
    span[stepped] = np.floor(span[stepped] * levels[stepped] + 0.5) / levels[stepped]
    span = span[..., np.newaxis]

    rgb = _ANCHORS[seg] + (_ANCHORS[seg + 1] - _ANCHORS[seg]) * span
    return _round_half_up(rgb).astype(np.uint8)


def grid_image(grid_spectrum: np.ndarray, scale: int = 1) -> Image.Image:
    """
    False-color image of a grid spectrum.

    Args:
        grid_spectrum: (g, g) field in [0, 1], DC already centred.
        scale: Integer upscaling factor, nearest-neighbour so cells stay crisp.

    Returns:
        RGB PIL image of size (g * scale, g * scale).
    """
    img = Image.fromarray(apply_palette(grid_spectrum))
    if scale > 1:
        w, h = img.size
        img = img.resize((w * scale, h * scale), Image.NEAREST)
    return img


def luminance(color: PaletteColor) -> float:
    """Rec. 709 relative luminance of a color, in 0-255 units."""
    wr, wg, wb = LUMA_WEIGHTS
    return wr * color.r + wg * color.g + wb * color.b
