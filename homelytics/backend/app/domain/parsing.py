# app/domain/parsing.py
from __future__ import annotations

import json
from datetime import date, datetime, timezone
from typing import Any

_TRUE_STRINGS = frozenset({"y", "yes", "true", "t", "1"})
_FALSE_STRINGS = frozenset({"n", "no", "false", "f", "0", ""})


def to_int(x: Any) -> int | None:
    if x is None or x == "":
        return None
    try:
        return int(float(x))
    except (TypeError, ValueError, OverflowError):
        return None


def to_float(x: Any) -> float | None:
    if x is None or x == "":
        return None
    try:
        return float(x)
    except (TypeError, ValueError):
        return None


def to_text(x: Any) -> str | None:
    """
    Scalars pass through as str. RESO enumerations ("Flooring", "Appliances", ...)
    arrive as JSON arrays and are stored comma-joined.
    """
    if x is None:
        return None
    if isinstance(x, str):
        return x
    if isinstance(x, (list, tuple)):
        parts = [str(p) for p in x if p is not None and str(p).strip()]
        return ", ".join(parts) if parts else None
    if isinstance(x, dict):
        return json.dumps(x, sort_keys=True)
    return str(x)


def to_datetime(x: Any) -> datetime | None:
    """
    ISO-8601 string -> naive UTC datetime. Unparsable -> None, never a sentinel.
    """
    if x is None:
        return None
    if isinstance(x, datetime):
        dt = x
    elif isinstance(x, date):
        dt = datetime(x.year, x.month, x.day)
    elif isinstance(x, str):
        s = x.strip()
        if not s:
            return None
        if s.endswith(("Z", "z")):
            s = s[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            return None
    else:
        return None

    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def to_date(x: Any) -> date | None:
    if isinstance(x, date) and not isinstance(x, datetime):
        return x
    dt = to_datetime(x)
    return dt.date() if dt is not None else None


def to_yn(x: Any) -> bool | None:
    """
    Three-valued YN flag: None stays unknown. Strings are read as Y/N words;
    an unrecognised word is unknown too. Other values by truthiness.
    """
    if x is None:
        return None
    if isinstance(x, bool):
        return x
    if isinstance(x, str):
        s = x.strip().lower()
        if s in _TRUE_STRINGS:
            return True
        if s in _FALSE_STRINGS:
            return False
        return None
    if isinstance(x, (list, tuple, dict)):
        return bool(x)
    try:
        return bool(float(x))
    except (TypeError, ValueError):
        return bool(x)


def get_first(payload: dict[str, Any], *keys: str) -> Any:
    """Return first non-empty key from payload."""
    for k in keys:
        v = payload.get(k)
        if v is None:
            continue
        if isinstance(v, str) and not v.strip():
            continue
        return v
    return None
