"""Unit tests for the module catalog, theme registry, theme generator parsing and JSON columns."""
import json

import pytest

from app.campusflow.db import JSONDecodeError, JSONList, JSONObject
from app.campusflow.platform.modules import ModuleCatalog, ModuleDefinition, default_catalog, validate_module_configs
from app.campusflow.platform.theme_generator import (
    ThemeGenerationError,
    build_prompt,
    missing_answers,
    parse_theme_text,
)
from app.campusflow.platform.themes import (
    REQUIRED_COLORS,
    THEME_PRESETS,
    ThemeRegistry,
    ThemeValidationError,
    UnknownThemePreset,
    default_theme_registry,
    resolve_theme_config,
    snapshot_theme,
    validate_theme,
)


class TestModuleCatalog:
    def test_ordered_and_defaults(self):
        catalog = default_catalog()
        assert catalog.ids() == ["registration", "schedule", "announcements", "teams", "voting", "checkin", "leaderboard"]
        assert catalog.default_enabled_ids() == ["registration", "schedule", "announcements"]
        assert "voting" in catalog
        assert "livestream" not in catalog
        assert len(catalog) == 7

    def test_custom_catalog_sorted_by_sort_order(self):
        catalog = ModuleCatalog(
            [
                ModuleDefinition(id="b", name="B", description="", icon="x", default_enabled=False, sort_order=2),
                ModuleDefinition(id="a", name="A", description="", icon="x", default_enabled=True, sort_order=1),
            ]
        )
        assert catalog.ids() == ["a", "b"]
        assert catalog.get("b").name == "B"
        assert catalog.get("zzz") is None

    def test_schema_defaults(self):
        assert default_catalog().get("teams").defaults() == {"max_team_size": 4, "min_team_size": 2, "allow_solo": False}


class TestValidateModuleConfigs:
    def test_valid_configs(self):
        configs = {
            "registration": {"max_participants": 50, "waitlist_enabled": True},
            "leaderboard": {"update_frequency": "hourly"},
        }
        assert validate_module_configs(default_catalog(), configs) == []

    def test_type_errors(self):
        errors = validate_module_configs(
            default_catalog(),
            {
                "registration": {"waitlist_enabled": "yes", "max_participants": True},
                "leaderboard": {"update_frequency": "weekly"},
            },
        )
        assert len(errors) == 3
        assert "registration.waitlist_enabled must be true or false." in errors

    def test_unknown_modules_and_options_pass(self):
        assert validate_module_configs(default_catalog(), {"livestream": "anything", "teams": {"mascot": "owl"}}) == []

    def test_shape_errors(self):
        assert validate_module_configs(default_catalog(), ["teams"]) == ["module_configs must be an object keyed by module id."]
        assert validate_module_configs(default_catalog(), {"teams": 4}) == ["Config for module 'teams' must be an object."]
        assert validate_module_configs(default_catalog(), None) == []


class TestThemes:
    def test_presets_valid(self):
        for preset in THEME_PRESETS.values():
            validate_theme(preset)

    def test_missing_color_rejected(self):
        theme = json.loads(json.dumps(THEME_PRESETS["sports"]))
        del theme["colors"]["textSecondary"]
        with pytest.raises(ThemeValidationError, match="textSecondary"):
            validate_theme(theme)

    def test_registry_hands_out_copies(self):
        registry = default_theme_registry()
        theme = registry.get("hackathon")
        theme["colors"]["primary"] = "#000000"
        assert registry.get("hackathon")["colors"]["primary"] == THEME_PRESETS["hackathon"]["colors"]["primary"]
        with pytest.raises(UnknownThemePreset):
            registry.get("nope")

    def test_registry_rejects_invalid_preset(self):
        with pytest.raises(ThemeValidationError, match="broken"):
            ThemeRegistry({"broken": {"colors": {}, "fonts": {}}})

    def test_snapshot_is_detached(self):
        theme = json.loads(json.dumps(THEME_PRESETS["cultural"]))
        stored = snapshot_theme(theme)
        theme["colors"]["primary"] = "#000000"
        assert stored["colors"]["primary"] == THEME_PRESETS["cultural"]["colors"]["primary"]

    def test_resolve_preset_wins(self):
        registry = default_theme_registry()
        payload = {"theme_preset": "workshop", "theme_config": THEME_PRESETS["sports"]}
        assert resolve_theme_config(registry, payload) == THEME_PRESETS["workshop"]
        assert resolve_theme_config(registry, {}) is None


class TestThemeGeneratorParsing:
    def _text(self, **overrides):
        theme = dict(THEME_PRESETS["default"], name="Generated")
        theme.update(overrides)
        return json.dumps(theme)

    def test_missing_answers(self):
        assert missing_answers({"mood": "Calm", "brightness": " "}) == ["brightness", "colorFamily", "fontStyle", "intensity"]

    def test_prompt_mentions_answers(self):
        prompt = build_prompt(
            {"mood": "Festive", "brightness": "Light", "colorFamily": "Red", "fontStyle": "Playful", "intensity": "Bold"}
        )
        assert "Event Mood: Festive" in prompt
        assert '"primary": "#hexcode"' in prompt

    def test_parses_fenced_json(self):
        theme = parse_theme_text("```json\n" + self._text() + "\n```")
        assert theme["name"] == "Generated"
        assert set(REQUIRED_COLORS) <= set(theme["colors"])

    def test_rejects_bad_output(self):
        with pytest.raises(ThemeGenerationError):
            parse_theme_text("not json at all")
        with pytest.raises(ThemeGenerationError):
            parse_theme_text(self._text(fonts={"heading": "Inter"}))
        with pytest.raises(ThemeGenerationError):
            parse_theme_text(self._text(name=""))


class TestJSONColumns:
    def test_list_roundtrip_and_empty(self):
        col = JSONList()
        assert col.process_bind_param(["a", "b"], None) == '["a", "b"]'
        assert col.process_bind_param(None, None) == "[]"
        assert col.process_result_value(None, None) == []
        assert col.process_result_value('["x"]', None) == ["x"]

    def test_list_rejects_non_strings(self):
        with pytest.raises(JSONDecodeError):
            JSONList().process_bind_param(["a", 1], None)
        with pytest.raises(JSONDecodeError):
            JSONList().process_result_value('{"a": 1}', None)

    def test_object_checks(self):
        col = JSONObject()
        assert col.process_result_value("", None) == {}
        with pytest.raises(JSONDecodeError):
            col.process_bind_param(["not", "a", "dict"], None)
        with pytest.raises(JSONDecodeError):
            col.process_result_value("{broken", None)
