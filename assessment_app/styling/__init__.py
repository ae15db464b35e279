"""Styling module for the AssessQt application."""

from .color_palette import ColorPalette, Theme

__all__ = ["ColorPalette", "Theme"]
