"""Tolerant, typed readers for frontmatter properties.

Frontmatter is an untyped bag: a property may be missing, empty, a string
where a number was expected, or a YAML-native date. Each reader here handles
one target type and falls back to a default instead of raising, so a single
malformed property never spoils the rest of a note.
"""

import math
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from typing import Any

from ..models import WBSStatus


def lookup(properties: Mapping[str, Any] | None, keys: str | Sequence[str], default: Any = None) -> Any:
    """Return the value of the first key present in `properties`.

    `keys` is a single property name or several candidates (primary name
    first, then legacy aliases).
    """
    if not properties:
        return default
    if isinstance(keys, str):
        keys = (keys,)
    for key in keys:
        if key in properties:
            return properties[key]
    return default


def as_str(value: Any) -> str | None:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return None


def as_label(value: Any) -> str | None:
    """Like `as_str`, but also accepts YAML numbers (`wbs-number: 2`)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    return as_str(value)


def as_number(value: Any, default: float | None = None) -> float | None:
    """Read a number, parsing numeric strings. Booleans are not numbers."""
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return default if math.isnan(value) else value
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return default
        if math.isnan(parsed):
            return default
        return int(parsed) if parsed.is_integer() else parsed
    return default


def as_int(value: Any, default: int | None = None) -> int | None:
    number = as_number(value)
    if number is None or math.isinf(number):
        return default
    return int(number)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def as_str_list(value: Any) -> list[str]:
    """Read a list of strings; a lone string becomes a one-item list."""
    if isinstance(value, str):
        stripped = value.strip()
        return [stripped] if stripped else []
    if isinstance(value, list):
        result = []
        for entry in value:
            if entry is None or isinstance(entry, (dict, list)):
                continue
            text = str(entry).strip()
            if text:
                result.append(text)
        return result
    return []


def as_mapping(value: Any) -> dict[str, Any]:
    return dict(value) if isinstance(value, Mapping) else {}


def as_mapping_list(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [dict(entry) for entry in value if isinstance(entry, Mapping)]


def as_date(value: Any) -> date | None:
    """Read a calendar date, discarding any time of day.

    YAML hands us `date`/`datetime` objects for unquoted values; quoted
    values arrive as strings like "2024-01-15" or "2024-01-15T09:30".
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()[:10]
        try:
            return date.fromisoformat(text)
        except ValueError:
            return None
    return None


def is_truthy(value: Any) -> bool:
    """Truthiness of a checkbox-like property.

    | value            | truthy when                               |
    |------------------|-------------------------------------------|
    | bool             | True                                      |
    | int / float      | non-zero                                  |
    | str              | non-empty and not "false" / "0"           |
    | list/tuple/set   | non-empty                                 |
    | None             | never                                     |
    | anything else    | always (present object)                   |
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0 and not math.isnan(value)
    if isinstance(value, str):
        text = value.strip().lower()
        return text not in ("", "false", "0")
    if isinstance(value, (list, tuple, set)):
        return len(value) > 0
    return True


_STATUS_WORDS: dict[WBSStatus, tuple[str, ...]] = {
    WBSStatus.COMPLETED: ("completed", "done", "complete", "完了", "済", "済み"),
    WBSStatus.IN_PROGRESS: ("in-progress", "inprogress", "in progress", "doing", "進行中", "作業中", "対応中"),
    WBSStatus.BLOCKED: ("blocked", "hold", "on hold", "ブロック", "ブロック中", "保留", "待ち"),
    WBSStatus.CANCELLED: ("cancelled", "canceled", "キャンセル", "中止", "取消"),
    WBSStatus.NOT_STARTED: ("not-started", "todo", "to do", "not started", "未着手", "未開始", "予定"),
}

_STATUS_LOOKUP: dict[str, WBSStatus] = {
    word: status for status, words in _STATUS_WORDS.items() for word in words
}


def normalize_status(value: Any) -> WBSStatus:
    """Map English or Japanese status text onto `WBSStatus`."""
    if isinstance(value, WBSStatus):
        return value
    if not isinstance(value, str):
        return WBSStatus.NOT_STARTED
    return _STATUS_LOOKUP.get(value.strip().lower(), WBSStatus.NOT_STARTED)


def normalize_choice(value: Any, table: Mapping[str, str], default: str) -> str:
    """Case-insensitive lookup of free text in a word -> value table."""
    if not isinstance(value, str):
        return default
    return table.get(value.strip().lower(), default)
