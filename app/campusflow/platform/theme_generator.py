from __future__ import annotations

import json
import logging
import re
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass
from typing import Any

from app.campusflow.platform.themes import ThemeValidationError, validate_theme

logger = logging.getLogger(__name__)

ANSWER_KEYS = ("mood", "brightness", "colorFamily", "fontStyle", "intensity")

PROMPT_TEMPLATE = """You are a theme generator for a campus event platform. Your ONLY task is to convert user preferences into a valid theme JSON object.

USER PREFERENCES:
- Event Mood: {mood}
- Brightness Preference: {brightness}
- Primary Color Family: {colorFamily}
- Font Style: {fontStyle}
- Visual Intensity: {intensity}

REQUIREMENTS:
1. Return ONLY valid JSON, no explanations, no markdown, no comments
2. Use the EXACT schema below
3. Generate harmonious, accessible color palettes
4. Choose appropriate Google Fonts based on font style
5. Ensure text colors have sufficient contrast with backgrounds
6. For "Auto" brightness, choose based on mood (Professional/Minimal=Light, Energetic/Futuristic=Dark, Festive=Light)

EXACT SCHEMA (return this structure):
{{
  "name": "AI Generated Theme",
  "colors": {{
    "primary": "#hexcode",
    "secondary": "#hexcode",
    "accent": "#hexcode",
    "background": "#hexcode",
    "surface": "#hexcode",
    "text": "#hexcode",
    "textSecondary": "#hexcode",
    "border": "#hexcode",
    "success": "#22c55e",
    "error": "#ef4444"
  }},
  "fonts": {{
    "heading": "FontName, fallback",
    "body": "FontName, fallback"
  }},
  "layout": "standard",
  "borderRadius": "8px",
  "logo": null
}}

Return ONLY the JSON object, nothing else."""

_FENCE_RE = re.compile(r"```(?:json)?\s*")


class ThemeGenerationError(RuntimeError):
    pass


def missing_answers(answers: dict[str, Any]) -> list[str]:
    return [k for k in ANSWER_KEYS if not str(answers.get(k) or "").strip()]


def build_prompt(answers: dict[str, Any]) -> str:
    return PROMPT_TEMPLATE.format(**{k: str(answers.get(k) or "").strip() for k in ANSWER_KEYS})


def parse_theme_text(text: str) -> dict[str, Any]:
    """Strip markdown fences, decode, and check the theme shape."""
    cleaned = _FENCE_RE.sub("", text or "").strip()
    try:
        theme = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ThemeGenerationError("Generated theme is not valid JSON") from e
    if not isinstance(theme, dict) or not theme.get("name"):
        raise ThemeGenerationError("Generated theme missing required fields")
    try:
        return validate_theme(theme)
    except ThemeValidationError as e:
        raise ThemeGenerationError(f"Generated theme rejected: {e}") from e


@dataclass(frozen=True)
class GeminiThemeGenerator:
    api_key: str
    model: str = "gemini-2.5-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1"
    timeout_seconds: int = 30

    def _url(self) -> str:
        path = f"/models/{urllib.parse.quote(self.model)}:generateContent"
        return self.base_url.rstrip("/") + path + "?" + urllib.parse.urlencode({"key": self.api_key})

    def request_json(self, body: dict[str, Any]) -> dict[str, Any]:
        req = urllib.request.Request(self._url(), data=json.dumps(body).encode("utf-8"), method="POST")
        req.add_header("Content-Type", "application/json")
        req.add_header("Accept", "application/json")
        try:
            with urllib.request.urlopen(req, timeout=self.timeout_seconds) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as e:
            try:
                detail = e.read().decode("utf-8", errors="ignore")
            except Exception:
                detail = ""
            raise ThemeGenerationError(f"HTTP {e.code} from Gemini: {detail[:300]}") from e
        except (urllib.error.URLError, TimeoutError) as e:
            raise ThemeGenerationError(f"Gemini request failed: {e}") from e
        try:
            return json.loads(raw.decode("utf-8"))
        except Exception as e:
            raise ThemeGenerationError("Invalid JSON from Gemini") from e

    def generate(self, answers: dict[str, Any]) -> dict[str, Any]:
        if not self.api_key:
            raise ThemeGenerationError("Gemini API key not configured")
        data = self.request_json({"contents": [{"parts": [{"text": build_prompt(answers)}]}]})
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise ThemeGenerationError("Invalid response structure from Gemini") from e
        theme = parse_theme_text(text)
        logger.info("Generated theme '%s' (mood=%s)", theme.get("name"), answers.get("mood"))
        return theme


def theme_generator_from_config(config: dict) -> GeminiThemeGenerator:
    return GeminiThemeGenerator(
        api_key=(config.get("GEMINI_API_KEY") or "").strip(),
        model=(config.get("GEMINI_MODEL") or "gemini-2.5-flash").strip(),
        timeout_seconds=int(config.get("THEME_GENERATION_TIMEOUT") or 30),
    )
