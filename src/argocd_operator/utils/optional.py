"""Helpers for optional (possibly unset) spec fields.

A spec field is unset when its key is missing or holds None. Late-init helpers
fill unset fields in place from an observed value and never touch a field that
is already set.
"""

from __future__ import annotations

import copy
from typing import Any


def late_init(params: dict[str, Any], key: str, observed: Any) -> None:
    """Copy observed into params[key] when the field is unset and observed is not None."""
    if params.get(key) is None and observed is not None:
        params[key] = copy.deepcopy(observed)


def late_init_string(params: dict[str, Any], key: str, observed: str | None) -> None:
    """Like late_init, but an empty observed string counts as absent."""
    if params.get(key) is None and observed:
        params[key] = observed


def late_init_int(params: dict[str, Any], key: str, observed: int | None) -> None:
    """Like late_init, but a zero observed value counts as absent."""
    if params.get(key) is None and observed:
        params[key] = int(observed)


def late_init_bool(params: dict[str, Any], key: str, observed: bool | None) -> None:
    """Set an unset bool from observed; a missing observed value means False."""
    if params.get(key) is None:
        params[key] = bool(observed)


def string_to_optional(value: str | None) -> str | None:
    """Map an empty string to None."""
    return value if value else None


def string_matches(desired: str | None, observed: str | None) -> bool:
    """Desired optional string equals observed, with empty observed meaning unset."""
    return desired == string_to_optional(observed)


def bool_matches(desired: bool | None, observed: bool | None) -> bool:
    """An unset desired bool matches anything."""
    return desired is None or desired == bool(observed)


def int_matches(desired: int | None, observed: int | None) -> bool:
    """An unset desired int matches anything."""
    return desired is None or int(desired) == int(observed or 0)


def to_int(value: Any) -> int:
    """Coerce a wire integer (number, numeric string or missing) to int."""
    return int(value) if value not in (None, "") else 0


def set_if(payload: dict[str, Any], key: str, value: Any) -> None:
    """Write value into payload unless it is None."""
    if value is not None:
        payload[key] = value
