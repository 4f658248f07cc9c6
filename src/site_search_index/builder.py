"""Assembly of the final search index document."""

import logging
import re
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from typing import Any

from site_search_index.config import SearchConfig
from site_search_index.errors import IndexBuildError
from site_search_index.models import IndexStats, SearchEntry

logger = logging.getLogger(__name__)

INDEX_VERSION = "1.0.0"
GENERATOR = "site-search-index"
MAX_FIELD_LENGTH = 2000

TEXT_FIELDS = ("title", "content", "description", "excerpt", "leadIn", "prose", "pageName")

_WHITESPACE_RE = re.compile(r"\s+")
_UNSAFE_CHARS_RE = re.compile(r"[^\w\s\-.,!?;:'\"()]")


def clean_text(text: object) -> str:
    """Normalise a text field for the index.

    Args:
        text: Field value.

    Returns:
        Trimmed text with collapsed whitespace, restricted to word characters
        and common punctuation, at most 2000 characters long.
    """
    if not isinstance(text, str) or not text:
        return ""
    cleaned = _WHITESPACE_RE.sub(" ", text.strip())
    cleaned = _UNSAFE_CHARS_RE.sub("", cleaned)
    return cleaned[:MAX_FIELD_LENGTH]


def remove_empty_fields(data: Mapping[str, Any]) -> dict[str, Any]:
    """Drop ``None`` and empty string values, keeping lists even when empty.

    Args:
        data: Entry dictionary.

    Returns:
        A new dictionary without the empty values.
    """
    return {key: value for key, value in data.items() if value is not None and value != ""}


def optimize_entry(entry: SearchEntry | Mapping[str, Any], position: int) -> dict[str, Any]:
    """Clean one entry for inclusion in the index.

    Args:
        entry: Extracted entry, as a model or its wire dictionary.
        position: Position of the entry in the input list.

    Returns:
        Wire dictionary with cleaned text fields.

    Raises:
        IndexBuildError: If the entry is neither a SearchEntry nor a mapping.
    """
    if isinstance(entry, SearchEntry):
        data = entry.to_dict()
    elif isinstance(entry, Mapping):
        data = dict(entry)
    else:
        msg = f"Entry {position} is a {type(entry).__name__}, not a search entry"
        raise IndexBuildError(msg)

    data["id"] = data.get("id") or f"entry-{position}"
    data["type"] = data.get("type") or "page"
    data["url"] = data.get("url") or "/"
    data["title"] = clean_text(data.get("title"))
    data["content"] = clean_text(data.get("content"))
    for name in TEXT_FIELDS[2:]:
        if name in data:
            data[name] = clean_text(data[name])
    data["score"] = 0

    return remove_empty_fields(data)


def generate_index_stats(entries: Sequence[Mapping[str, Any]]) -> IndexStats:
    """Compute entry counts and content length statistics.

    Args:
        entries: Optimized entries.

    Returns:
        Index statistics.
    """
    stats = IndexStats(total_entries=len(entries))
    for entry in entries:
        entry_type = entry["type"]
        stats.entries_by_type[entry_type] = stats.entries_by_type.get(entry_type, 0) + 1
        section_type = entry.get("sectionType")
        if section_type:
            stats.entries_by_section_type[section_type] = stats.entries_by_section_type.get(section_type, 0) + 1
        stats.total_content_length += len(entry.get("content", ""))

    if entries:
        stats.average_content_length = int(stats.total_content_length / len(entries) + 0.5)
    return stats


def create_search_index(
    entries: Sequence[SearchEntry | Mapping[str, Any]] | None,
    config: SearchConfig | None,
) -> dict[str, Any]:
    """Build the search index document from all extracted entries.

    Entries keep their input order. An empty or missing entry list produces
    a valid index with no entries.

    Args:
        entries: Entries from every document, in document order.
        config: Indexing options; the consumer part is embedded in the index.

    Returns:
        JSON-serialisable index document.

    Raises:
        IndexBuildError: If the configuration is missing or an entry is malformed.
    """
    if config is None:
        msg = "Cannot build a search index without a configuration"
        raise IndexBuildError(msg)

    optimized = []
    for position, entry in enumerate(entries or []):
        try:
            optimized.append(optimize_entry(entry, position))
        except IndexBuildError:
            raise
        except Exception as exc:
            url = entry.url if isinstance(entry, SearchEntry) else None
            msg = f"Failed to prepare entry {position}: {exc}"
            raise IndexBuildError(msg, path=url) from exc

    index: dict[str, Any] = {
        "version": INDEX_VERSION,
        "generator": GENERATOR,
        "generated": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "totalEntries": len(optimized),
        "config": config.to_index_config(),
        "stats": generate_index_stats(optimized).to_dict(),
        "entries": optimized,
    }

    if config.lazy_load:
        index["lazyLoadUrl"] = re.sub(r"\.json$", "-lazy.json", config.index_path)

    logger.info("Built search index with %d entries", len(optimized))
    return index
