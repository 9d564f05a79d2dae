"""Tests for comparison and optional-field helpers."""

from __future__ import annotations

import pytest

from argocd_operator.utils.compare import equal_lists, equate_empty, is_empty, list_equal, prune_empty
from argocd_operator.utils.optional import (
    bool_matches,
    int_matches,
    late_init,
    late_init_bool,
    late_init_int,
    late_init_string,
    set_if,
    string_matches,
    string_to_optional,
    to_int,
)


class TestPruneEmpty:
    """Test cases for zero-value normalization."""

    @pytest.mark.parametrize("value", [None, "", False, 0, 0.0, [], {}])
    def test_empty_values(self, value):
        """Test the values that count as unset."""
        assert is_empty(value)

    @pytest.mark.parametrize("value", ["x", True, 1, [None], {"a": 1}])
    def test_non_empty_values(self, value):
        """Test values that are set."""
        assert not is_empty(value)

    def test_prune_nested(self):
        """Test that empty entries are dropped recursively."""
        value = {"a": {"b": "", "c": {"d": None}}, "e": [{"f": 0, "g": "x"}], "h": 1}

        assert prune_empty(value) == {"e": [{"g": "x"}], "h": 1}

    def test_lists_keep_positions(self):
        """Test that list elements are pruned but never removed."""
        assert prune_empty([{"a": ""}, {"b": 1}]) == [{}, {"b": 1}]

    def test_equate_empty(self):
        """Test that unset and zero values compare equal."""
        assert equate_empty({"automated": {"prune": False}}, {"automated": {}})
        assert equate_empty({"retry": None}, {})
        assert not equate_empty({"automated": {"prune": True}}, {"automated": {}})


class TestListComparison:
    """Test cases for list comparison helpers."""

    def test_list_equal_none_is_empty(self):
        """Test that None and [] are equal."""
        assert list_equal(None, [])
        assert list_equal(["a"], ["a"])
        assert not list_equal(["a", "b"], ["b", "a"])

    def test_equal_lists(self):
        """Test element-wise comparison."""
        same_name = lambda d, o: d["name"] == o["name"]  # noqa: E731

        assert equal_lists(None, None, same_name)
        assert not equal_lists(None, [], same_name)
        assert not equal_lists([{"name": "a"}], [], same_name)
        assert equal_lists([{"name": "a", "x": 1}], [{"name": "a", "x": 2}], same_name)
        assert not equal_lists([{"name": "a"}], [{"name": "b"}], same_name)


class TestLateInit:
    """Test cases for late initialization helpers."""

    def test_late_init_fills_unset(self):
        """Test that unset fields take the observed value."""
        params = {"description": None}

        late_init(params, "description", "observed")
        late_init(params, "labels", {"team": "a"})

        assert params == {"description": "observed", "labels": {"team": "a"}}

    def test_late_init_keeps_set_fields(self):
        """Test that set fields are never overwritten."""
        params = {"description": "mine", "limit": 0}

        late_init(params, "description", "observed")
        late_init_int(params, "limit", 10)

        assert params == {"description": "mine", "limit": 0}

    def test_late_init_copies(self):
        """Test that observed structures are copied."""
        observed = {"team": "a"}
        params = {}

        late_init(params, "labels", observed)
        observed["team"] = "b"

        assert params["labels"] == {"team": "a"}

    def test_late_init_ignores_zero_values(self):
        """Test that empty strings and zero ints are not late-initialized."""
        params = {}

        late_init_string(params, "project", "")
        late_init_int(params, "limit", 0)
        late_init(params, "other", None)

        assert params == {}

    def test_late_init_bool(self):
        """Test that an unset bool becomes the observed value, defaulting to False."""
        params = {"insecure": True}

        late_init_bool(params, "insecure", False)
        late_init_bool(params, "enableLfs", None)

        assert params == {"insecure": True, "enableLfs": False}


class TestOptionalMatching:
    """Test cases for optional field matching."""

    def test_string_matches(self):
        """Test that empty observed strings mean unset."""
        assert string_to_optional("") is None
        assert string_matches(None, "")
        assert string_matches("a", "a")
        assert not string_matches("a", "")

    def test_bool_and_int_matches(self):
        """Test that unset desired values match anything."""
        assert bool_matches(None, True)
        assert bool_matches(False, None)
        assert not bool_matches(True, None)
        assert int_matches(None, 5)
        assert int_matches(0, None)
        assert not int_matches(3, "4")

    @pytest.mark.parametrize("value,expected", [(None, 0), ("", 0), ("42", 42), (7, 7)])
    def test_to_int(self, value, expected):
        """Test coercing wire integers."""
        assert to_int(value) == expected

    def test_set_if(self):
        """Test that None values are skipped."""
        payload = {}

        set_if(payload, "a", None)
        set_if(payload, "b", False)

        assert payload == {"b": False}
