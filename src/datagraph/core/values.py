"""
Structured Values - The value domain of payloads, config and metadata.

A structured value is one of:
- None, bool, int, float, str
- a list of structured values
- a mapping of str to structured values

Strategies never poke at raw dicts directly; they go through the typed
config getters below, which only assert the keys they ask for.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, TypeAlias

from datagraph.core.errors import InvalidStateError


StructuredValue: TypeAlias = (
    None | bool | int | float | str | list["StructuredValue"] | dict[str, "StructuredValue"]
)

_SCALARS = (type(None), bool, int, float, str)


def check_structured(value: Any, path: str = "value") -> None:
    """
    Validate that a value is a structured value.

    Raises:
        ValueError: naming the first offending path
    """
    if isinstance(value, _SCALARS):
        return
    if isinstance(value, (list, tuple)):
        for i, item in enumerate(value):
            check_structured(item, f"{path}[{i}]")
        return
    if isinstance(value, Mapping):
        for key, item in value.items():
            if not isinstance(key, str):
                raise ValueError(f"{path} has a non-string key: {key!r}")
            check_structured(item, f"{path}.{key}")
        return
    raise ValueError(f"{path} is not a structured value: {type(value).__name__}")


def check_mapping(value: Any, path: str) -> dict[str, Any]:
    """Validate a structured mapping and return it as a plain dict."""
    if not isinstance(value, Mapping):
        raise ValueError(f"{path} must be an object")
    check_structured(value, path)
    return dict(value)


def to_text(value: Any) -> str:
    """
    Canonical textual form of a value.

    Strings pass through unchanged; everything else becomes compact JSON.
    """
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def config_str(
    config: Mapping[str, Any],
    key: str,
    default: str | None = None,
) -> str | None:
    """Read an optional string setting from a control node's config."""
    value = config.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise InvalidStateError(
            f"config.{key} must be a string, got {type(value).__name__}"
        )
    return value


def config_int(
    config: Mapping[str, Any],
    key: str,
    default: int | None = None,
) -> int | None:
    """Read an optional integer setting from a control node's config."""
    value = config.get(key)
    if value is None:
        return default
    # bool is an int subclass but never a sensible count
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidStateError(
            f"config.{key} must be an integer, got {type(value).__name__}"
        )
    return value
