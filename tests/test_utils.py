from datetime import date, datetime

import pytest

from app.campusflow.errors import ValidationError
from app.campusflow.platform.recommendations import score_event
from app.campusflow.utils import (
    academic_year,
    clean_str_list,
    parse_datetime,
    parse_int,
    slugify,
    to_base36,
)


def test_to_base36():
    assert to_base36(0) == "0"
    assert to_base36(35) == "z"
    assert to_base36(36) == "10"
    with pytest.raises(ValueError):
        to_base36(-1)


def test_slugify():
    assert slugify("Hack Campus!", now_ms=35) == "hack-campus-z"
    assert slugify("  Rang   Tarang 2026 ", now_ms=36) == "rang-tarang-2026-10"
    assert slugify("!!!", now_ms=1) == "1"


def test_academic_year():
    assert academic_year(date(2026, 3, 15)) == "2025-26"
    assert academic_year(datetime(2026, 8, 1)) == "2026-27"
    assert academic_year(date(2099, 7, 1)) == "2099-00"


def test_parse_datetime():
    assert parse_datetime("2026-03-15T09:00:00Z", "start_date") == datetime(2026, 3, 15, 9, 0)
    assert parse_datetime("2026-03-15T09:00:00+05:30", "start_date") == datetime(2026, 3, 15, 9, 0)
    assert parse_datetime("", "start_date") is None
    with pytest.raises(ValidationError):
        parse_datetime("soon", "start_date")


def test_parse_int():
    assert parse_int("12", "score") == 12
    assert parse_int(None, "score") is None
    with pytest.raises(ValidationError):
        parse_int(True, "score")
    with pytest.raises(ValidationError):
        parse_int("lots", "score")


def test_clean_str_list():
    assert clean_str_list([" ai ", "ai", "", "web"], "tags") == ["ai", "web"]
    assert clean_str_list(None, "tags") == []
    with pytest.raises(ValidationError):
        clean_str_list("ai,web", "tags")
    with pytest.raises(ValidationError):
        clean_str_list(["ai", 3], "tags")


class TestScoreEvent:
    def test_interest_matches_plus_department_boost(self):
        assert score_event(["Tech", "ai"], "CSE", ["tech", "web"], "CSE") == 1.5

    def test_substring_match_on_tags(self):
        # "ml" is found inside "html"
        assert score_event(["ml"], None, ["HTML"], None) == 1.0

    def test_one_point_per_interest(self):
        assert score_event(["ai"], "CSE", ["ai", "ai-ethics"], "ECE") == 1.0

    def test_no_match(self):
        assert score_event([], "CSE", ["music"], "Cultural") == 0.0
        assert score_event(["music"], None, [], None) == 0.0
