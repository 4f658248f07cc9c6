"""Tests for indexing options."""

import json
from pathlib import Path

import pytest

from site_search_index.anchors import AnchorOptions
from site_search_index.config import SearchConfig, deep_merge, load_config_file
from site_search_index.errors import ConfigError


def test_defaults() -> None:
    """Test default option values."""
    config = SearchConfig()
    assert config.pattern == ["**/*.html"]
    assert config.ignore == []
    assert config.index_path == "search-index.json"
    assert config.index_levels == ["page"]
    assert config.exclude_selectors == ["nav", "header", "footer"]
    assert config.anchor_options == AnchorOptions()
    assert config.fuse_options["threshold"] == 0.3


def test_scalar_patterns_are_normalized() -> None:
    """Test that single patterns become lists."""
    config = SearchConfig(pattern="**/*.md", ignore="drafts/**")
    assert config.pattern == ["**/*.md"]
    assert config.ignore == ["drafts/**"]


def test_from_mapping_accepts_camel_case() -> None:
    """Test camelCase option names and nested merging."""
    config = SearchConfig.from_mapping(
        {
            "indexLevels": ["page", "section"],
            "fuseOptions": {"threshold": 0.1},
            "anchorOptions": {"maxLength": 20},
            "excludeSelectors": [],
        }
    )
    assert config.index_levels == ["page", "section"]
    assert config.fuse_options["threshold"] == 0.1
    assert config.fuse_options["includeScore"] is True
    assert config.anchor_options.max_length == 20
    assert config.exclude_selectors == []


def test_from_mapping_ignores_unknown_keys() -> None:
    """Test unknown options are dropped."""
    config = SearchConfig.from_mapping({"notAnOption": True})
    assert not hasattr(config, "not_an_option")


@pytest.mark.parametrize(
    "options",
    [
        {"index_levels": ["everything"]},
        {"batch_size": 0},
        {"chunk_size": -5},
        {"min_section_length": -1},
        {"anchor_options": {"max_length": 0}},
        {"anchor_options": {"colour": "red"}},
        {"batch_size": "ten"},
    ],
)
def test_invalid_options(options: dict) -> None:
    """Test validation failures raise ConfigError."""
    with pytest.raises(ConfigError):
        SearchConfig.from_mapping(options)


def test_deep_merge_does_not_mutate() -> None:
    """Test nested merge semantics."""
    target = {"a": {"x": 1, "y": 2}, "b": [1]}
    source = {"a": {"y": 3}, "b": [2]}
    merged = deep_merge(target, source)
    assert merged == {"a": {"x": 1, "y": 3}, "b": [2]}
    assert target == {"a": {"x": 1, "y": 2}, "b": [1]}


def test_to_index_config() -> None:
    """Test the consumer part embedded in the index."""
    config = SearchConfig(lazy_load=True)
    assert config.to_index_config() == {
        "fuseOptions": config.fuse_options,
        "indexLevels": ["page"],
        "lazyLoad": True,
    }


def test_fields_for() -> None:
    """Test section field maps and their fallback."""
    config = SearchConfig(component_fields={"hero": ["title", "prose"]})
    assert config.fields_for("hero") == ["title", "prose"]
    assert config.fields_for("other") == ["title", "prose", "leadIn"]


def test_load_yaml_file(tmp_path: Path) -> None:
    """Test loading options from YAML."""
    path = tmp_path / "search.yaml"
    path.write_text("pattern: '**/*.md'\nindexLevels:\n  - section\n")
    config = load_config_file(path)
    assert config.pattern == ["**/*.md"]
    assert config.index_levels == ["section"]


def test_load_json_file(tmp_path: Path) -> None:
    """Test loading options from JSON."""
    path = tmp_path / "search.json"
    path.write_text(json.dumps({"lazyLoad": True}))
    assert load_config_file(path).lazy_load is True


def test_load_empty_file(tmp_path: Path) -> None:
    """Test an empty file yields defaults."""
    path = tmp_path / "search.yaml"
    path.write_text("")
    assert load_config_file(path) == SearchConfig()


def test_load_invalid_file(tmp_path: Path) -> None:
    """Test unreadable or non-mapping files."""
    missing = tmp_path / "missing.yaml"
    with pytest.raises(ConfigError):
        load_config_file(missing)

    listing = tmp_path / "list.yaml"
    listing.write_text("- a\n- b\n")
    with pytest.raises(ConfigError, match="mapping"):
        load_config_file(listing)
