"""Cell coercion helpers shared by the record mappers.

Sheets hands back every cell as a string and trims trailing empty cells,
so a row may be shorter than the tab's column count.  These helpers read
positions defensively and turn typed values back into cell strings.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and ``Z`` suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def today_iso() -> str:
    """Current UTC date as ``YYYY-MM-DD``."""
    return datetime.now(timezone.utc).date().isoformat()


def epoch_millis_id() -> str:
    """Time-based record id: milliseconds since the epoch, as a string."""
    return str(time.time_ns() // 1_000_000)


def cell(row: list[Any], index: int) -> str:
    """Return the cell at ``index`` as a string, ``""`` when absent."""
    if index >= len(row) or row[index] is None:
        return ""
    return str(row[index])


def split_list(value: str) -> list[str]:
    """``"a, b,c"`` -> ``["a", "b", "c"]``; empty cell -> ``[]``."""
    if not value:
        return []
    return [part.strip() for part in value.split(",")]


def join_list(values: list[str] | str) -> str:
    if isinstance(values, str):
        return values
    return ", ".join(values)


def bool_cell(value: bool) -> str:
    return "true" if value else "false"


def parse_bool(value: Any) -> bool:
    """Only the literal ``"true"`` (or a real ``True``) reads as true."""
    return value is True or value == "true"


def parse_int(value: Any, default: int = 0) -> int:
    """Lenient integer parse: leading sign and digits, anything else -> ``default``.

    ``"150 riders"`` parses as ``150`` the way a spreadsheet user would expect.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    text = str(value or "").strip()
    digits = ""
    for i, ch in enumerate(text):
        if ch.isdigit() or (i == 0 and ch in "+-"):
            digits += ch
        else:
            break
    try:
        return int(digits)
    except ValueError:
        return default
