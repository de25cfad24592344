"""Small helpers shared by trace mapping, evaluation and CSV rendering."""

from __future__ import annotations

import json
import re
from typing import Any, Iterable, Mapping

_SPECIAL_CHARS = re.compile(r"[\n\r\t\f,]")


def replace_special_characters(text: str, replacement: str = "") -> str:
    """Make a key CSV-safe: commas become '-', control whitespace becomes replacement."""
    return _SPECIAL_CHARS.sub(lambda m: "-" if m.group(0) == "," else replacement, text)


def is_equal(left: Any, right: Any) -> bool:
    """Structural deep equality for decision results.

    Unlike ``==``, booleans never equal numbers (``0`` vs ``False``), and a key
    holding ``None`` differs from an absent key. NaN never equals anything.
    Cyclic structures are not supported.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right

    if isinstance(left, Mapping) and isinstance(right, Mapping):
        if set(left.keys()) != set(right.keys()):
            return False
        return all(is_equal(left[key], right[key]) for key in left)

    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
        if len(left) != len(right):
            return False
        return all(is_equal(a, b) for a, b in zip(left, right))

    if isinstance(left, (Mapping, list, tuple)) or isinstance(right, (Mapping, list, tuple)):
        return False

    if left is None or right is None:
        return left is right

    return left == right


def reduce_to_clean_obj(
    items: Iterable[Any] | None,
    key_name: str = "name",
    value_name: str = "value",
    replacement: str = "",
) -> dict[str, Any]:
    """Collapse a list of name/value records into one dict with sanitized keys.

    Records may be mappings or objects exposing the named attributes.
    """
    if items is None:
        return {}

    result: dict[str, Any] = {}
    for item in items:
        if item is None:
            continue
        if isinstance(item, Mapping):
            key, value = item.get(key_name), item.get(value_name)
        else:
            key, value = getattr(item, key_name, None), getattr(item, value_name, None)
        if key is None:
            continue
        result[replace_special_characters(str(key), replacement)] = value
    return result


def filter_keys(keys: list[str]) -> list[str]:
    """Drop base keys that also appear in indexed form (``key`` when ``key[0]`` exists)."""
    filtered = []
    for key in keys:
        if "[" not in key:
            base = key.split("[")[0]
            if any((base + "[") in other for other in keys):
                continue
        filtered.append(key)
    return filtered


def extract_unique_keys(results: Mapping[str, Any], attribute: str) -> list[str]:
    """Union of keys of one attribute across every result, in first-seen order."""
    seen: dict[str, None] = {}
    for result in results.values():
        if isinstance(result, Mapping):
            values = result.get(attribute)
        else:
            values = getattr(result, attribute, None)
        if values:
            for key in values:
                seen.setdefault(key, None)
    return filter_keys(list(seen))


def derive_name_from_filepath(filepath: str) -> str:
    """Rule name from its path: ``a/b/winter.json`` gives ``winter``."""
    name = filepath.replace("\\", "/").split("/")[-1]
    return name[: -len(".json")] if name.endswith(".json") else name


def structural_key(value: Any) -> str:
    """Stable text form of a value for structural deduplication."""
    return json.dumps(value, sort_keys=True, default=str)
