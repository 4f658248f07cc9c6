"""Per-document extraction of search entries."""

import datetime
import logging
import re
from collections.abc import Mapping, Sequence
from typing import Any

from site_search_index.anchors import generate_anchor_id
from site_search_index.config import SearchConfig
from site_search_index.headings import ensure_section_ids, explicit_section_ids, process_headings
from site_search_index.models import Heading, SearchEntry, SourceDocument
from site_search_index.normalizer import process_markdown_field, strip_html
from site_search_index.resolver import find_nested_field
from site_search_index.segmenter import split_content_by_sections

logger = logging.getLogger(__name__)

EXCERPT_THRESHOLD = 300
EXCERPT_LENGTH = 250

_SOURCE_SUFFIX_RE = re.compile(r"\.(md|markdown|html?|rst|rest)$", re.IGNORECASE)
_FRONTMATTER_FENCE_RE = re.compile(r"^---\s*$")


def compute_url(path: str) -> str:
    """Compute the canonical page URL for a document key.

    Args:
        path: Document key such as ``blog/post.html``.

    Returns:
        Root-relative URL; ``index`` documents map to their directory.
    """
    url = _SOURCE_SUFFIX_RE.sub("", path.replace("\\", "/"))
    if url == "index" or url.endswith("/index"):
        url = url[: -len("index")]
    url = url.strip("/")
    return f"/{url}" if url else "/"


def resolve_page_name(metadata: Mapping[str, Any]) -> str:
    """Display name shared by every entry of a page.

    Priority: ``pageTitle``, then ``seo.title``, then ``title``.

    Args:
        metadata: Document frontmatter.

    Returns:
        The first available name, or ``"Untitled Page"``.
    """
    seo = metadata.get("seo")
    candidates = (
        metadata.get("pageTitle"),
        seo.get("title") if isinstance(seo, Mapping) else None,
        metadata.get("title"),
    )
    for candidate in candidates:
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()
    return "Untitled Page"


def make_excerpt(text: str) -> str:
    """Shorten text to roughly 250 characters on a word boundary.

    Args:
        text: Combined page text.

    Returns:
        ``text`` itself when it is at most 300 characters, otherwise its
        truncated head followed by ``...``.
    """
    if len(text) <= EXCERPT_THRESHOLD:
        return text
    head = re.sub(r"\s+\S*$", "", text[:EXCERPT_LENGTH])
    return f"{head}..."


def _text_field(metadata: Mapping[str, Any], name: str) -> str | None:
    """Read a frontmatter field as cleaned text.

    Args:
        metadata: Document frontmatter.
        name: Field name.

    Returns:
        The value with markdown removed, or None when empty.
    """
    value = metadata.get(name)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        value = str(value)
    cleaned = process_markdown_field(value)
    return cleaned.strip() or None


def _tags_field(value: Any) -> list[str] | None:
    """Normalise a tags value into a list of strings.

    Args:
        value: Scalar or list frontmatter value.

    Returns:
        Tag list, or None when no tags are given.
    """
    if value is None or value == "":
        return None
    if isinstance(value, (list, tuple)):
        return [str(tag) for tag in value if tag is not None and str(tag).strip()]
    return [str(value)]


def _date_field(value: Any) -> str | None:
    """Render a frontmatter date as text.

    Args:
        value: Date, datetime or string.

    Returns:
        ISO date text, or None when missing.
    """
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    if value is None or value == "":
        return None
    return str(value)


def _word_count(text: str) -> int:
    """Number of whitespace separated words in ``text``."""
    return len(text.split())


def _has_body(raw: str) -> bool:
    """Whether the raw contents hold more than whitespace or a bare fence.

    Args:
        raw: Decoded document contents.

    Returns:
        True when there is body text to index.
    """
    stripped = raw.strip()
    return bool(stripped) and not _FRONTMATTER_FENCE_RE.match(stripped)


def _page_entry(
    metadata: Mapping[str, Any],
    html: str,
    url: str,
    headings: list[Heading],
    page_name: str,
    config: SearchConfig,
) -> SearchEntry | None:
    """Build the page level entry of a document.

    Args:
        metadata: Document frontmatter.
        html: Document markup with heading ids applied.
        url: Canonical page URL.
        headings: Headings found in the document.
        page_name: Display name shared by the page entries.
        config: Indexing options.

    Returns:
        The page entry, or None when there is nothing to index.
    """
    title = _text_field(metadata, "title")
    description = _text_field(metadata, "description")
    excerpt = _text_field(metadata, "excerpt")
    extras = [value for value in (_text_field(metadata, name) for name in config.content_fields) if value]

    body = ""
    if _has_body(html):
        body = strip_html(html, config.exclude_selectors) if config.strip_html else html.strip()

    if not (title or description or excerpt or extras) and not body:
        return None

    combined = " ".join(part for part in (body, description, excerpt, *extras) if part).strip()
    if not excerpt and combined:
        excerpt = make_excerpt(combined)

    if not title:
        title = next((heading.title for heading in headings if heading.level == "h1"), "Untitled")

    author = metadata.get("author")
    if isinstance(author, Mapping):
        author = author.get("name")

    return SearchEntry(
        id=f"page:{url}",
        type="page",
        url=url,
        title=title,
        page_name=page_name,
        content=combined,
        excerpt=excerpt,
        description=description,
        tags=_tags_field(metadata.get("tags")) or [],
        date=_date_field(metadata.get("date")),
        author=str(author) if author else None,
        headings=headings,
        word_count=_word_count(combined),
    )


def _section_entries(
    sections: Sequence[Any],
    url: str,
    page_name: str,
    config: SearchConfig,
) -> list[SearchEntry]:
    """Build one entry per enabled content section with indexable fields.

    Args:
        sections: Content sections from the frontmatter.
        url: Canonical page URL.
        page_name: Display name shared by the page entries.
        config: Indexing options.

    Returns:
        Section entries in section order.
    """
    entries = []
    for index, section in enumerate(sections):
        if not isinstance(section, Mapping) or section.get("isDisabled"):
            continue

        section_type = section.get(config.section_type_field)
        if not isinstance(section_type, str) or not section_type:
            section_type = "unknown"

        resolved: dict[str, str] = {}
        for field_name in config.fields_for(section_type):
            value = find_nested_field(section, field_name)
            if value is None:
                continue
            text = strip_html(value) if config.strip_html else value
            if text.strip():
                resolved[field_name] = text.strip()

        if not resolved:
            continue

        anchor = section.get("id") if config.generate_anchors else None
        title = resolved.get("title") or resolved.get("leadIn") or f"{section_type[0].upper()}{section_type[1:]} Section"
        content = " ".join(resolved.values())

        entries.append(
            SearchEntry(
                id=f"section:{url}:{index}",
                type="section",
                url=f"{url}#{anchor}" if anchor else url,
                title=title,
                page_name=page_name,
                content=content,
                lead_in=resolved.get("leadIn"),
                prose=resolved.get("prose"),
                section_type=section_type,
                section_index=index,
                word_count=_word_count(content),
            )
        )
    return entries


def _traditional_entries(
    html: str,
    url: str,
    headings: list[Heading],
    page_name: str,
    config: SearchConfig,
) -> list[SearchEntry]:
    """Build entries from long-form content split on headings and length.

    Args:
        html: Document markup with heading ids applied.
        url: Canonical page URL.
        headings: Headings found in the document.
        page_name: Display name shared by the page entries.
        config: Indexing options.

    Returns:
        One entry per surviving segment.
    """
    if config.strip_html:
        text = strip_html(html, config.exclude_selectors, mark_headings=True)
    else:
        text = html
    segments = split_content_by_sections(
        text,
        max_section_length=config.max_section_length,
        chunk_size=config.chunk_size,
        min_section_length=config.min_section_length,
    )

    entries = []
    cursor = -1
    anchor = None
    for index, segment in enumerate(segments):
        if not (config.generate_anchors and segment.heading):
            anchor = None
        elif segment.part is None or segment.part == 1:
            # Match blocks to extracted headings in document order so that
            # repeated titles link to their own disambiguated ids.
            base = segment.base_heading
            found = next((pos for pos in range(cursor + 1, len(headings)) if headings[pos].title == base), None)
            if found is None:
                anchor = generate_anchor_id(base, config.anchor_options)
            else:
                cursor = found
                anchor = headings[found].id

        content = segment.content.strip()
        entries.append(
            SearchEntry(
                id=f"section:{url}:{index}",
                type="section",
                url=f"{url}#{anchor}" if anchor else url,
                title=segment.heading or f"Section {index + 1}",
                page_name=page_name,
                content=content,
                section_type="traditional",
                section_index=index,
                word_count=_word_count(content),
            )
        )
    return entries


def _component_entries() -> list[SearchEntry]:
    """Component level entries; none are produced, sections cover components."""
    return []


def extract_searchable_content(path: str, document: SourceDocument | None, config: SearchConfig) -> list[SearchEntry]:
    """Produce the search entries for one source document.

    Headings found in the document get unique ids which are written back
    into its contents, and structured content sections get ``id`` keys,
    so the rendered page and the index share the same anchors. Failures
    are logged and produce no entries.

    Args:
        path: Document key.
        document: Source document.
        config: Indexing options.

    Returns:
        Entries in document order: page first, then sections.
    """
    if document is None or not isinstance(document.contents, bytes):
        logger.warning("Skipping %s: document has no byte contents", path)
        return []

    try:
        metadata = document.metadata or {}
        url = compute_url(path)
        page_name = resolve_page_name(metadata)
        levels = config.index_levels
        sections = metadata.get(config.sections_field)
        structured = "section" in levels and isinstance(sections, list) and bool(sections)

        used: set[str] = set()
        if structured and config.generate_anchors:
            used.update(explicit_section_ids(sections))

        raw = document.text()
        html, headings = raw, []
        if _has_body(raw):
            html, headings = process_headings(raw, used, config.anchor_options, generate=config.generate_anchors)
            if html != raw:
                document.contents = html.encode("utf-8")

        entries: list[SearchEntry] = []

        if "page" in levels:
            page = _page_entry(metadata, html, url, headings, page_name, config)
            if page is not None:
                entries.append(page)

        if "section" in levels:
            if structured:
                if config.generate_anchors:
                    ensure_section_ids(sections, used, config.anchor_options)
                entries.extend(_section_entries(sections, url, page_name, config))
            elif _has_body(raw):
                entries.extend(_traditional_entries(html, url, headings, page_name, config))

        if "component" in levels:
            entries.extend(_component_entries())

        logger.debug("Extracted %d entries from %s", len(entries), path)
        return entries
    except Exception:
        logger.warning("Failed to extract content from %s", path, exc_info=True)
        return []
