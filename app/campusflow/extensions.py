"""
Process-wide, read-only collaborators kept on ``app.extensions``.

The module catalog, theme presets, event composer, and theme generator are
built once in ``create_app()``; request code looks them up here instead of
importing module-level globals, so tests can swap any of them per app.
"""
from __future__ import annotations

from flask import Flask, current_app

from app.campusflow.events.composer import EventComposer
from app.campusflow.platform.modules import ModuleCatalog, default_catalog
from app.campusflow.platform.theme_generator import GeminiThemeGenerator, theme_generator_from_config
from app.campusflow.platform.themes import ThemeRegistry, default_theme_registry


def init_registries(app: Flask) -> None:
    app.extensions["module_catalog"] = default_catalog()
    app.extensions["theme_registry"] = default_theme_registry()
    app.extensions["event_composer"] = EventComposer()
    app.extensions["theme_generator"] = theme_generator_from_config(app.config)


def module_catalog() -> ModuleCatalog:
    return current_app.extensions["module_catalog"]


def theme_registry() -> ThemeRegistry:
    return current_app.extensions["theme_registry"]


def event_composer() -> EventComposer:
    return current_app.extensions["event_composer"]


def theme_generator() -> GeminiThemeGenerator:
    return current_app.extensions["theme_generator"]
