from __future__ import annotations

import re
import time
from datetime import date, datetime
from typing import Any

from app.campusflow.errors import ValidationError

_SLUG_STRIP_RE = re.compile(r"[^a-z0-9]+")
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(n: int) -> str:
    if n < 0:
        raise ValueError("negative")
    if n == 0:
        return "0"
    out = []
    while n:
        n, r = divmod(n, 36)
        out.append(_BASE36[r])
    return "".join(reversed(out))


def slugify(title: str, *, now_ms: int | None = None) -> str:
    """`title-words-<base36 millis>`; the timestamp suffix keeps repeated titles unique."""
    base = _SLUG_STRIP_RE.sub("-", (title or "").lower()).strip("-")
    stamp = to_base36(now_ms if now_ms is not None else int(time.time() * 1000))
    return f"{base}-{stamp}" if base else stamp


def parse_datetime(value: Any, field: str) -> datetime | None:
    """Parse an ISO-8601 date or datetime string. Empty -> None, garbage -> ValidationError."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    s = str(value).strip()
    if not s:
        return None
    if s.endswith("Z"):
        s = s[:-1]
    try:
        dt = datetime.fromisoformat(s)
    except ValueError as e:
        raise ValidationError(f"{field} must be an ISO-8601 date/time.") from e
    # Stored naive; drop any offset the client sent.
    return dt.replace(tzinfo=None)


def parse_int(value: Any, field: str) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer.")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{field} must be an integer.") from e


def clean_str(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def clean_str_list(value: Any, field: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise ValidationError(f"{field} must be a list of strings.")
    out: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValidationError(f"{field} must be a list of strings.")
        item = item.strip()
        if item and item not in out:
            out.append(item)
    return out


def isoformat(value: datetime | date | None) -> str | None:
    return value.isoformat() if value is not None else None


def academic_year(when: datetime | date | None) -> str:
    """Academic years start in July: 2026-03-15 -> "2025-26", 2026-08-01 -> "2026-27"."""
    when = when or datetime.utcnow()
    start = when.year if when.month >= 7 else when.year - 1
    return f"{start}-{str(start + 1)[-2:]}"
