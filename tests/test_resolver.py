"""Tests for nested field resolution."""

from typing import Any

from site_search_index.resolver import find_nested_field


def test_direct_field() -> None:
    """Test a field owned by the section itself."""
    assert find_nested_field({"title": "Top"}, "title") == "Top"


def test_deeply_nested_field() -> None:
    """Test a field several mappings deep."""
    section = {"sectionType": "x", "content": {"main": {"text": {"title": "Deep Title"}}}}
    assert find_nested_field(section, "title") == "Deep Title"


def test_direct_field_wins_over_nested() -> None:
    """Test pre-order search prefers the shallow match."""
    section = {"text": {"title": "Nested"}, "title": "Shallow"}
    assert find_nested_field(section, "title") == "Shallow"


def test_first_match_in_insertion_order() -> None:
    """Test that sibling mappings are searched in order."""
    section = {"a": {"prose": "First"}, "b": {"prose": "Second"}}
    assert find_nested_field(section, "prose") == "First"


def test_lists_are_not_searched() -> None:
    """Test that list values are skipped."""
    section = {"items": [{"title": "In a list"}]}
    assert find_nested_field(section, "title") is None


def test_non_string_and_empty_values_are_skipped() -> None:
    """Test that only non-empty strings count as matches."""
    section = {"title": 5, "inner": {"title": ""}, "other": {"title": "Found"}}
    assert find_nested_field(section, "title") == "Found"


def test_invalid_input() -> None:
    """Test non-mapping input."""
    assert find_nested_field(None, "title") is None
    assert find_nested_field("title", "title") is None
    assert find_nested_field(["title"], "title") is None


def test_cyclic_structure_fails_closed() -> None:
    """Test that a self-referencing structure returns not found."""
    section: dict[str, Any] = {"sectionType": "loop"}
    section["self"] = section
    assert find_nested_field(section, "title") is None


def test_depth_limit() -> None:
    """Test that matches below the depth bound are ignored."""
    section: dict[str, Any] = {"title": "Bottom"}
    for _ in range(5):
        section = {"child": section}
    assert find_nested_field(section, "title", max_depth=3) is None
    assert find_nested_field(section, "title", max_depth=5) == "Bottom"
