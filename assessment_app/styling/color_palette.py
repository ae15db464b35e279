"""Color palette for AssessQt supporting light and dark themes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class Theme(Enum):
    """Application theme options."""
    LIGHT = auto()
    DARK = auto()


@dataclass(frozen=True)
class ThemeColors:
    """Color definitions for a specific theme."""
    light: str
    dark: str

    def get(self, theme: Theme) -> str:
        """Get color value for the specified theme."""
        return self.light if theme == Theme.LIGHT else self.dark


class ColorPalette:
    """Centralized color definitions for the application."""

    # Text colors
    TEXT_PRIMARY = ThemeColors(
        light="#000000",      # Black
        dark="#F5F5F5"        # WhiteSmoke
    )

    TEXT_SECONDARY = ThemeColors(
        light="#666666",      # Dark Gray
        dark="#AAAAAA"        # Light Gray
    )

    # Background colors
    BACKGROUND_PRIMARY = ThemeColors(
        light="#FFFFFF",      # White
        dark="#1E1E1E"        # Dark Gray
    )

    BACKGROUND_SECONDARY = ThemeColors(
        light="#F5F5F5",      # WhiteSmoke
        dark="#2D2D2D"        # Slightly lighter dark
    )

    # Status colors
    SUCCESS = ThemeColors(
        light="#107C10",      # Green
        dark="#6FCF6F"        # Light Green
    )

    WARNING = ThemeColors(
        light="#C87F00",      # Dark Amber, readable on white
        dark="#FFC83D"        # Lighter Orange
    )

    ERROR = ThemeColors(
        light="#D13438",      # Red
        dark="#FF6B6B"        # Light Red
    )

    # Border colors
    BORDER_PRIMARY = ThemeColors(
        light="#D1D1D1",      # Gray
        dark="#555555"        # Dark Gray
    )

    # Button colors
    BUTTON_PRIMARY_BG = ThemeColors(
        light="#0078D4",      # Blue
        dark="#4A9EFF"        # Lighter Blue
    )

    BUTTON_PRIMARY_TEXT = ThemeColors(
        light="#FFFFFF",      # White
        dark="#000000"        # Black
    )

    BUTTON_SECONDARY_BG = ThemeColors(
        light="#F5F5F5",      # WhiteSmoke
        dark="#3A3A3A"        # Dark Gray
    )

    BUTTON_HOVER_BG = ThemeColors(
        light="#E8E8E8",      # Light Gray
        dark="#505050"        # Medium Gray
    )

    # Navigator buttons for answered questions
    ANSWERED_BG = ThemeColors(
        light="#DFF6DD",      # Pale Green
        dark="#1F4D2B"        # Deep Green
    )
