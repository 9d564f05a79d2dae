"""Structural comparison helpers used by the per-kind equality rules."""

from __future__ import annotations

from typing import Any, Callable, Sequence


def is_empty(value: Any) -> bool:
    """True for None and for the zero value of JSON types."""
    return value is None or value == "" or value is False or value == [] or value == {} or (
        isinstance(value, (int, float)) and not isinstance(value, bool) and value == 0
    )


def prune_empty(value: Any) -> Any:
    """Drop empty entries from mappings, recursively.

    Lists keep their length and order so that positional differences still
    count; their elements are pruned in turn.
    """
    if isinstance(value, dict):
        pruned = {}
        for key, item in value.items():
            item = prune_empty(item)
            if not is_empty(item):
                pruned[key] = item
        return pruned
    if isinstance(value, list):
        return [prune_empty(item) for item in value]
    return value


def equate_empty(a: Any, b: Any) -> bool:
    """Compare two JSON values treating unset and zero values as equal."""
    return prune_empty(a) == prune_empty(b)


def list_equal(a: Sequence[Any] | None, b: Sequence[Any] | None) -> bool:
    """Plain equality where None and an empty list are the same."""
    return list(a or []) == list(b or [])


def equal_lists(
    desired: Sequence[Any] | None,
    observed: Sequence[Any] | None,
    element_equal: Callable[[Any, Any], bool],
) -> bool:
    """Compare two lists element by element.

    Both None is a match; exactly one None or a length difference is a
    mismatch without looking at the elements.
    """
    if desired is None and observed is None:
        return True
    if desired is None or observed is None or len(desired) != len(observed):
        return False
    return all(element_equal(d, o) for d, o in zip(desired, observed))
