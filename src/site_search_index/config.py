"""Indexing options and their defaults."""

import dataclasses
import json
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from site_search_index.anchors import AnchorOptions
from site_search_index.errors import ConfigError

logger = logging.getLogger(__name__)

INDEX_LEVELS = ("page", "section", "component")

DEFAULT_CONTENT_FIELDS = ["summary", "intro", "leadIn", "subTitle", "abstract", "overview"]


def _default_fuse_options() -> dict[str, Any]:
    """Default options for the client-side fuzzy search engine."""
    return {
        "keys": [
            {"name": "title", "weight": 10},
            {"name": "tags", "weight": 8},
            {"name": "leadIn", "weight": 5},
            {"name": "prose", "weight": 3},
            {"name": "content", "weight": 1},
        ],
        "threshold": 0.3,
        "includeScore": True,
        "includeMatches": True,
        "minMatchCharLength": 2,
        "ignoreLocation": True,
    }


@dataclass
class SearchConfig:
    """Options controlling document selection, extraction and index output."""

    pattern: list[str] = field(default_factory=lambda: ["**/*.html"])
    ignore: list[str] = field(default_factory=list)
    index_path: str = "search-index.json"
    index_levels: list[str] = field(default_factory=lambda: ["page"])
    sections_field: str = "sections"
    section_type_field: str = "sectionType"
    component_fields: dict[str, list[str]] = field(default_factory=dict)
    auto_detect_section_types: bool = False
    strip_html: bool = True
    generate_anchors: bool = True
    exclude_selectors: list[str] = field(default_factory=lambda: ["nav", "header", "footer"])
    anchor_options: AnchorOptions = field(default_factory=AnchorOptions)
    max_section_length: int = 2000
    chunk_size: int = 1500
    min_section_length: int = 50
    content_fields: list[str] = field(default_factory=lambda: list(DEFAULT_CONTENT_FIELDS))
    fuse_options: dict[str, Any] = field(default_factory=_default_fuse_options)
    lazy_load: bool = False
    batch_size: int = 10
    max_workers: int = 1

    def __post_init__(self) -> None:
        """Normalise scalar options and validate the result.

        Raises:
            ConfigError: If any option is out of range.
        """
        if isinstance(self.pattern, str):
            self.pattern = [self.pattern]
        if isinstance(self.ignore, str):
            self.ignore = [self.ignore]
        elif not isinstance(self.ignore, list):
            self.ignore = []
        if isinstance(self.index_levels, str):
            self.index_levels = [self.index_levels]
        if isinstance(self.anchor_options, Mapping):
            self.anchor_options = AnchorOptions(**_snake_keys(self.anchor_options))
        self.validate()

    def validate(self) -> None:
        """Check option values.

        Raises:
            ConfigError: If any option is out of range.
        """
        unknown = [level for level in self.index_levels if level not in INDEX_LEVELS]
        if unknown:
            msg = f"Unknown index levels: {', '.join(unknown)}"
            raise ConfigError(msg)
        for name in ("batch_size", "max_workers", "chunk_size", "max_section_length"):
            if getattr(self, name) < 1:
                msg = f"{name} must be at least 1"
                raise ConfigError(msg)
        if self.min_section_length < 0:
            msg = "min_section_length must not be negative"
            raise ConfigError(msg)
        if self.anchor_options.max_length < 1:
            msg = "anchor_options.max_length must be at least 1"
            raise ConfigError(msg)
        if not self.index_path:
            msg = "index_path must not be empty"
            raise ConfigError(msg)

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any] | None = None) -> "SearchConfig":
        """Build a configuration by merging user options over the defaults.

        Keys may be given in snake_case or camelCase. Nested mappings are
        merged, other values replace the default. Unknown keys are ignored
        with a warning.

        Args:
            options: User supplied options.

        Returns:
            The merged configuration.

        Raises:
            ConfigError: If a value has the wrong type or is out of range.
        """
        defaults = dataclasses.asdict(cls())
        user = _snake_keys(options or {})

        for key in list(user):
            if key not in defaults:
                logger.warning("Ignoring unknown search option: %s", key)
                del user[key]

        merged = deep_merge(defaults, user)
        try:
            return cls(**merged)
        except TypeError as exc:
            msg = f"Invalid search options: {exc}"
            raise ConfigError(msg) from exc

    def to_index_config(self) -> dict[str, Any]:
        """Consumer-facing configuration embedded in the index document.

        Returns:
            Search engine options, index levels and the lazy load flag.
        """
        return {
            "fuseOptions": self.fuse_options,
            "indexLevels": list(self.index_levels),
            "lazyLoad": self.lazy_load,
        }

    def fields_for(self, section_type: str) -> list[str]:
        """Fields to resolve for sections of the given type.

        Args:
            section_type: Value of the section type field.

        Returns:
            Configured field names, or title, prose and leadIn.
        """
        return self.component_fields.get(section_type) or ["title", "prose", "leadIn"]


def _snake_case(name: str) -> str:
    """Convert a camelCase option name to snake_case.

    Args:
        name: Option name in either style.

    Returns:
        The snake_case name.
    """
    return re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", name).lower()


def _snake_keys(options: Mapping[str, Any]) -> dict[str, Any]:
    """Convert option keys, including nested anchor options, to snake_case.

    Args:
        options: User supplied options.

    Returns:
        A new dictionary with snake_case keys.
    """
    result = {}
    for key, value in options.items():
        name = _snake_case(key)
        if name == "anchor_options" and isinstance(value, Mapping):
            value = _snake_keys(value)
        result[name] = value
    return result


def deep_merge(target: Mapping[str, Any], source: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge ``source`` over ``target`` without mutating either.

    Args:
        target: Base mapping.
        source: Overriding mapping.

    Returns:
        A new merged dictionary.
    """
    merged = dict(target)
    for key, value in source.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config_file(path: Path) -> SearchConfig:
    """Load indexing options from a YAML or JSON file.

    Args:
        path: Options file.

    Returns:
        Configuration merged over the defaults.

    Raises:
        ConfigError: If the file cannot be read or does not hold a mapping.
    """
    try:
        with path.open(encoding="utf-8") as handle:
            data = json.load(handle) if path.suffix.lower() == ".json" else yaml.safe_load(handle)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as exc:
        msg = f"Cannot read options file: {exc}"
        raise ConfigError(msg, path=str(path)) from exc

    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        msg = "Options file must contain a mapping"
        raise ConfigError(msg, path=str(path))
    return SearchConfig.from_mapping(data)
