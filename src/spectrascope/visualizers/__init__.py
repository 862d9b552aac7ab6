"""Visualization helpers for rendering spectra."""

from spectrascope.visualizers.palette import PaletteColor, apply_palette, grid_image, map_color

__all__ = ["PaletteColor", "apply_palette", "grid_image", "map_color"]
