"""Field/pool name parsing: string and list inputs must both produce correct labels."""
import pytest

from match_scheduler.utils.fields import (
    clamp_pool_index,
    field_label_for_index,
    field_labels,
    parse_names,
    pool_labels,
)


def test_parse_names_string_comma_separated():
    """'North,South' parses to two names (no list('A,B') corruption)."""
    assert parse_names("North,South") == ["North", "South"]


def test_parse_names_list_unchanged():
    assert parse_names(["North", "South"]) == ["North", "South"]


def test_parse_names_none_or_empty():
    assert parse_names(None) == []
    assert parse_names("") == []
    assert parse_names("   ") == []


def test_parse_names_list_keeps_empty_positions():
    """A blank entry in a list keeps its slot so later names stay aligned."""
    assert parse_names(["North", "", None, 4]) == ["North", "", "", "4"]


def test_field_labels_default_and_override():
    assert field_labels(None, 3) == ["Field 1", "Field 2", "Field 3"]
    assert field_labels(["Center", "", "Back"], 3) == ["Center", "Field 2", "Back"]
    assert field_labels("A,B,C,D", 2) == ["A", "B"]


def test_pool_labels_default():
    assert pool_labels([], 2) == ["Pool 1", "Pool 2"]
    assert pool_labels(["Red"], 2) == ["Red", "Pool 2"]


def test_field_label_for_index_is_one_based():
    assert field_label_for_index(["Center", "Back"], 1) == "Center"
    assert field_label_for_index(["Center", "Back"], 2) == "Back"
    assert field_label_for_index(["Center", "Back"], 3) == "Field 3"
    assert field_label_for_index(None, 1) == "Field 1"


@pytest.mark.parametrize(
    "pool_index,pool_count,expected",
    [
        (None, 3, 1),
        (2, 3, 2),
        (5, 3, 3),
        (0, 3, 1),
        ("x", 3, 1),
    ],
)
def test_clamp_pool_index(pool_index, pool_count, expected):
    assert clamp_pool_index(pool_index, pool_count) == expected
