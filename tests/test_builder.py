"""Tests for search index assembly."""

import pytest

from site_search_index.builder import (
    GENERATOR,
    INDEX_VERSION,
    MAX_FIELD_LENGTH,
    clean_text,
    create_search_index,
    generate_index_stats,
    optimize_entry,
    remove_empty_fields,
)
from site_search_index.config import SearchConfig
from site_search_index.errors import IndexBuildError
from site_search_index.models import Heading, SearchEntry


def _entry(index: int, **overrides) -> SearchEntry:
    values = {
        "id": f"page:/p{index}",
        "type": "page",
        "url": f"/p{index}",
        "title": f"Page {index}",
        "content": f"Body of page {index}",
        "word_count": 4,
    }
    values.update(overrides)
    return SearchEntry(**values)


def test_clean_text() -> None:
    """Test whitespace collapsing, character filtering and truncation."""
    assert clean_text("  Hello \n\t world  ") == "Hello world"
    assert clean_text("Price: <$10> & more!") == "Price: 10  more!"
    assert clean_text("Café (déjà vu)") == "Café (déjà vu)"
    assert clean_text(None) == ""
    assert clean_text(42) == ""
    assert len(clean_text("a" * (MAX_FIELD_LENGTH + 10))) == MAX_FIELD_LENGTH


def test_remove_empty_fields() -> None:
    """Test only null and empty string values are dropped."""
    data = {"a": None, "b": "", "c": [], "d": 0, "e": "x"}
    assert remove_empty_fields(data) == {"c": [], "d": 0, "e": "x"}


def test_optimize_entry_defaults() -> None:
    """Test defaults for loosely shaped entries."""
    optimized = optimize_entry({"title": "  Loose ", "content": "Text", "description": ""}, 3)
    assert optimized["id"] == "entry-3"
    assert optimized["type"] == "page"
    assert optimized["url"] == "/"
    assert optimized["title"] == "Loose"
    assert optimized["score"] == 0
    assert "description" not in optimized


def test_optimize_entry_rejects_other_types() -> None:
    """Test non-entry values raise."""
    with pytest.raises(IndexBuildError, match="Entry 0 is a str"):
        optimize_entry("not an entry", 0)


def test_empty_index() -> None:
    """Test an index with no entries is still well formed."""
    index = create_search_index([], SearchConfig())

    assert index["version"] == INDEX_VERSION
    assert index["generator"] == GENERATOR
    assert index["generated"].endswith("Z")
    assert index["totalEntries"] == 0
    assert index["entries"] == []
    assert index["stats"] == {
        "totalEntries": 0,
        "entriesByType": {},
        "entriesBySectionType": {},
        "averageContentLength": 0,
        "totalContentLength": 0,
    }
    assert "lazyLoadUrl" not in index


def test_none_entries_treated_as_empty() -> None:
    """Test a missing entry list."""
    assert create_search_index(None, SearchConfig())["totalEntries"] == 0


def test_missing_config_raises() -> None:
    """Test the configuration is required."""
    with pytest.raises(IndexBuildError):
        create_search_index([_entry(0)], None)


def test_index_preserves_order_and_totals() -> None:
    """Test entry order and the entry count invariants."""
    entries = [
        _entry(0),
        _entry(1, type="section", section_type="hero", section_index=0, url="/p1#hero"),
        _entry(2, type="section", section_type="traditional", section_index=0),
        _entry(3, headings=[Heading(level="h1", id="top", title="Top")]),
    ]

    index = create_search_index(entries, SearchConfig(index_levels=["page", "section"]))

    assert [entry["id"] for entry in index["entries"]] == ["page:/p0", "page:/p1", "page:/p2", "page:/p3"]
    assert index["totalEntries"] == len(index["entries"]) == index["stats"]["totalEntries"] == 4
    assert sum(index["stats"]["entriesByType"].values()) == 4
    assert index["stats"]["entriesByType"] == {"page": 2, "section": 2}
    assert index["stats"]["entriesBySectionType"] == {"hero": 1, "traditional": 1}
    assert index["entries"][1]["sectionIndex"] == 0
    assert index["entries"][3]["headings"] == [{"level": "h1", "id": "top", "title": "Top"}]
    assert index["config"]["indexLevels"] == ["page", "section"]
    assert index["config"]["lazyLoad"] is False
    assert index["config"]["fuseOptions"]["threshold"] == 0.3


def test_index_entries_are_cleaned() -> None:
    """Test text fields pass through cleaning."""
    entry = _entry(0, title="Hello   <World>", content="x" * 3000, lead_in="Lead\nin")
    optimized = create_search_index([entry], SearchConfig())["entries"][0]
    assert optimized["title"] == "Hello World"
    assert len(optimized["content"]) == MAX_FIELD_LENGTH
    assert optimized["leadIn"] == "Lead in"
    assert optimized["score"] == 0


def test_generate_index_stats_rounds_average() -> None:
    """Test average content length rounding."""
    entries = [
        {"type": "page", "content": "ab"},
        {"type": "page", "content": "abc"},
    ]
    stats = generate_index_stats(entries)
    assert stats.total_content_length == 5
    assert stats.average_content_length == 3


def test_lazy_load_url() -> None:
    """Test the lazy load location is derived from the index path."""
    config = SearchConfig(lazy_load=True, index_path="search/site.json")
    index = create_search_index([], config)
    assert index["lazyLoadUrl"] == "search/site-lazy.json"
    assert index["config"]["lazyLoad"] is True


def test_malformed_entry_raises() -> None:
    """Test malformed entries stop the build."""
    with pytest.raises(IndexBuildError):
        create_search_index([_entry(0), 17], SearchConfig())
