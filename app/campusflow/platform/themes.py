"""
Theme presets for event microsites.

Events store a copy of the chosen theme, never a key into this registry, so
editing a preset here does not change pages that already picked it.
"""
from __future__ import annotations

import copy
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

REQUIRED_COLORS = (
    "primary",
    "secondary",
    "accent",
    "background",
    "surface",
    "text",
    "textSecondary",
    "border",
    "success",
    "error",
)
REQUIRED_FONTS = ("heading", "body")


class ThemeValidationError(ValueError):
    pass


class UnknownThemePreset(KeyError):
    pass


THEME_PRESETS: dict[str, dict[str, Any]] = {
    "default": {
        "name": "Campus Default",
        "colors": {
            "primary": "#2563eb",
            "secondary": "#7c3aed",
            "accent": "#f59e0b",
            "background": "#ffffff",
            "surface": "#f8fafc",
            "text": "#0f172a",
            "textSecondary": "#64748b",
            "border": "#e2e8f0",
            "success": "#22c55e",
            "error": "#ef4444",
        },
        "fonts": {
            "heading": "Inter, system-ui, sans-serif",
            "body": "Inter, system-ui, sans-serif",
        },
        "layout": "standard",
        "borderRadius": "8px",
        "logo": None,
    },
    "hackathon": {
        "name": "Hackathon Neon",
        "colors": {
            "primary": "#00ff88",
            "secondary": "#00ccff",
            "accent": "#ff00ff",
            "background": "#0a0a0a",
            "surface": "#1a1a2e",
            "text": "#e0e0e0",
            "textSecondary": "#888888",
            "border": "#333333",
            "success": "#00ff88",
            "error": "#ff4444",
        },
        "fonts": {
            "heading": "'JetBrains Mono', monospace",
            "body": "'Inter', sans-serif",
        },
        "layout": "tech",
        "borderRadius": "4px",
        "logo": None,
    },
    "cultural": {
        "name": "Cultural Fest",
        "colors": {
            "primary": "#e11d48",
            "secondary": "#f97316",
            "accent": "#eab308",
            "background": "#fffbeb",
            "surface": "#fff7ed",
            "text": "#1c1917",
            "textSecondary": "#78716c",
            "border": "#e7e5e4",
            "success": "#16a34a",
            "error": "#dc2626",
        },
        "fonts": {
            "heading": "'Playfair Display', serif",
            "body": "'Lato', sans-serif",
        },
        "layout": "festive",
        "borderRadius": "16px",
        "logo": None,
    },
    "sports": {
        "name": "Sports Arena",
        "colors": {
            "primary": "#dc2626",
            "secondary": "#1d4ed8",
            "accent": "#fbbf24",
            "background": "#f0f9ff",
            "surface": "#ffffff",
            "text": "#0c0a09",
            "textSecondary": "#57534e",
            "border": "#d6d3d1",
            "success": "#15803d",
            "error": "#b91c1c",
        },
        "fonts": {
            "heading": "'Oswald', sans-serif",
            "body": "'Roboto', sans-serif",
        },
        "layout": "bold",
        "borderRadius": "6px",
        "logo": None,
    },
    "workshop": {
        "name": "Workshop Minimal",
        "colors": {
            "primary": "#6366f1",
            "secondary": "#8b5cf6",
            "accent": "#06b6d4",
            "background": "#fafafa",
            "surface": "#ffffff",
            "text": "#18181b",
            "textSecondary": "#71717a",
            "border": "#e4e4e7",
            "success": "#22c55e",
            "error": "#f43f5e",
        },
        "fonts": {
            "heading": "'Plus Jakarta Sans', sans-serif",
            "body": "'Plus Jakarta Sans', sans-serif",
        },
        "layout": "clean",
        "borderRadius": "12px",
        "logo": None,
    },
}


def validate_theme(theme: Any) -> dict[str, Any]:
    """Raise ThemeValidationError unless all 10 colors and both fonts are present."""
    if not isinstance(theme, dict):
        raise ThemeValidationError("Theme must be an object.")
    colors = theme.get("colors")
    fonts = theme.get("fonts")
    if not isinstance(colors, dict):
        raise ThemeValidationError("Theme missing colors.")
    if not isinstance(fonts, dict):
        raise ThemeValidationError("Theme missing fonts.")
    for key in REQUIRED_COLORS:
        if not colors.get(key):
            raise ThemeValidationError(f"Theme missing color: {key}")
    for key in REQUIRED_FONTS:
        if not fonts.get(key):
            raise ThemeValidationError(f"Theme missing font: {key}")
    return theme


class ThemeRegistry:
    """Read-only preset lookup. Every read hands out a deep copy."""

    def __init__(self, presets: Mapping[str, Mapping[str, Any]]):
        for key, preset in presets.items():
            try:
                validate_theme(preset)
            except ThemeValidationError as e:
                raise ThemeValidationError(f"Preset '{key}' is invalid: {e}") from e
        self._presets = MappingProxyType(copy.deepcopy(dict(presets)))

    def keys(self) -> list[str]:
        return list(self._presets.keys())

    def get(self, key: str) -> dict[str, Any]:
        if key not in self._presets:
            raise UnknownThemePreset(key)
        return copy.deepcopy(self._presets[key])

    def all(self) -> dict[str, dict[str, Any]]:
        return copy.deepcopy(dict(self._presets))


def default_theme_registry() -> ThemeRegistry:
    return ThemeRegistry(THEME_PRESETS)


def snapshot_theme(theme: dict[str, Any]) -> dict[str, Any]:
    """Validate an externally supplied theme and return a detached copy for storage."""
    return copy.deepcopy(validate_theme(theme))


def resolve_theme_config(registry: ThemeRegistry, payload: dict) -> dict[str, Any] | None:
    """
    Pick the theme an event write asks for. Returns None when the payload names none.

    ``theme_preset`` (a registry key) wins over ``theme_config`` (a full theme object).
    """
    preset_key = payload.get("theme_preset")
    if preset_key:
        try:
            return registry.get(str(preset_key))
        except UnknownThemePreset as e:
            raise ThemeValidationError(f"Unknown theme preset: {preset_key}") from e
    theme = payload.get("theme_config")
    if theme is None:
        return None
    return snapshot_theme(theme)
