"""Typed reads from untyped TOML tables and GitHub JSON payloads.

Both arrive as ``dict[str, object]``. Values are narrowed here, once, and a
value of the wrong type reads as missing.
"""

from __future__ import annotations

from typing import Mapping, cast

StrDict = dict[str, object]
ObjList = list[object]


def as_str_dict(obj: object) -> StrDict | None:
    """``obj`` as a string-keyed dict, or None."""
    if isinstance(obj, dict) and all(isinstance(k, str) for k in cast(dict[object, object], obj)):
        return cast(StrDict, obj)
    return None


def as_obj_list(obj: object) -> ObjList | None:
    return cast(ObjList, obj) if isinstance(obj, list) else None


def _number(value: object) -> bool:
    # TOML and JSON booleans are ints to isinstance.
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def get_raw_str(table: Mapping[str, object], key: str) -> str | None:
    value = table.get(key)
    return value if isinstance(value, str) else None


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """Stripped string; blank counts as missing."""
    value = get_raw_str(table, key)
    if value is None:
        return None
    return value.strip() or None


def get_int(table: Mapping[str, object], key: str) -> int | None:
    value = table.get(key)
    return value if _number(value) and isinstance(value, int) else None


def get_float(table: Mapping[str, object], key: str) -> float | None:
    value = table.get(key)
    return float(cast(float, value)) if _number(value) else None


def get_table(table: Mapping[str, object], key: str) -> StrDict | None:
    return as_str_dict(table.get(key))


def get_list(table: Mapping[str, object], key: str) -> ObjList | None:
    return as_obj_list(table.get(key))


def get_str_list(table: Mapping[str, object], key: str) -> list[str] | None:
    """Non-blank strings of a list, stripped; other items are skipped."""
    items = get_list(table, key)
    if items is None:
        return None
    stripped = (item.strip() for item in items if isinstance(item, str))
    return [s for s in stripped if s]
