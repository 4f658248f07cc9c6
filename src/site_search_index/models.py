"""Data models for search index construction."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class SourceDocument:
    """A source page handed over by the host pipeline."""

    path: str
    contents: bytes
    metadata: dict[str, Any] = field(default_factory=dict)

    def text(self) -> str:
        """Decode the raw contents as UTF-8 text.

        Returns:
            Decoded contents, with undecodable bytes replaced.
        """
        return self.contents.decode("utf-8", errors="replace")


@dataclass
class Heading:
    """A heading discovered in a document, with its anchor id."""

    level: str
    id: str
    title: str

    def to_dict(self) -> dict[str, str]:
        """Serialise the heading for the index.

        Returns:
            Dictionary with level, id and title.
        """
        return {"level": self.level, "id": self.id, "title": self.title}


@dataclass
class Segment:
    """A block of long-form text bounded by headings and length."""

    heading: str | None
    content: str
    part: int | None = None

    @property
    def base_heading(self) -> str | None:
        """Heading title without the ``(Part N)`` label.

        Returns:
            The heading as it appears in the document, or None.
        """
        if self.heading is None or self.part is None:
            return self.heading
        return self.heading.removesuffix(f" (Part {self.part})")


@dataclass
class SearchEntry:
    """One independently linkable unit of the search index."""

    id: str
    type: str
    url: str
    title: str
    content: str
    word_count: int
    page_name: str | None = None
    excerpt: str | None = None
    description: str | None = None
    lead_in: str | None = None
    prose: str | None = None
    tags: list[str] | None = None
    date: str | None = None
    author: str | None = None
    section_type: str | None = None
    section_index: int | None = None
    headings: list[Heading] | None = None
    score: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Serialise the entry using the index wire field names.

        Returns:
            Dictionary with camelCase keys, ``None`` values omitted.
        """
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "url": self.url,
            "title": self.title,
            "pageName": self.page_name,
            "content": self.content,
            "excerpt": self.excerpt,
            "description": self.description,
            "leadIn": self.lead_in,
            "prose": self.prose,
            "tags": self.tags,
            "date": self.date,
            "author": self.author,
            "sectionType": self.section_type,
            "sectionIndex": self.section_index,
            "headings": [heading.to_dict() for heading in self.headings] if self.headings is not None else None,
            "wordCount": self.word_count,
            "score": self.score,
        }
        return {key: value for key, value in data.items() if value is not None}


@dataclass
class IndexStats:
    """Aggregate statistics describing a search index."""

    total_entries: int = 0
    entries_by_type: dict[str, int] = field(default_factory=dict)
    entries_by_section_type: dict[str, int] = field(default_factory=dict)
    average_content_length: int = 0
    total_content_length: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Serialise the statistics using the index wire field names.

        Returns:
            Dictionary with camelCase keys.
        """
        return {
            "totalEntries": self.total_entries,
            "entriesByType": dict(self.entries_by_type),
            "entriesBySectionType": dict(self.entries_by_section_type),
            "averageContentLength": self.average_content_length,
            "totalContentLength": self.total_content_length,
        }
