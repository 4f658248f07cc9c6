"""Heading discovery and per-document anchor assignment."""

import logging
from collections.abc import MutableMapping, Sequence
from typing import Any

from bs4 import BeautifulSoup, Tag

from site_search_index.anchors import AnchorOptions, generate_anchor_id
from site_search_index.models import Heading
from site_search_index.normalizer import HEADING_TAGS, decode_entities, parse_markup, render_markup
from site_search_index.resolver import find_nested_field

logger = logging.getLogger(__name__)


def unique_anchor(candidate: str, used: set[str]) -> str:
    """Return ``candidate`` or the first free ``candidate-N`` and reserve it.

    Args:
        candidate: Preferred anchor id.
        used: Ids already taken in the current document. Updated in place.

    Returns:
        An id not previously in ``used``.
    """
    anchor = candidate
    counter = 1
    while anchor in used:
        anchor = f"{candidate}-{counter}"
        counter += 1
    used.add(anchor)
    return anchor


def _explicit_id(element: Tag | MutableMapping[str, Any]) -> str | None:
    """Author supplied id of a heading element or content section.

    Args:
        element: Heading element or section mapping.

    Returns:
        The id, or None when it is missing or blank.
    """
    existing = element.get("id")
    if isinstance(existing, str) and existing.strip():
        return existing
    return None


class HeadingCollector:
    """Walks a parsed document and assigns unique ids to its headings."""

    def __init__(
        self,
        used: set[str] | None = None,
        options: AnchorOptions | None = None,
        generate: bool = True,
    ) -> None:
        """Initialise the collector.

        Args:
            used: Ids already taken in this document. A fresh set per document.
            options: Anchor generation policy.
            generate: Whether headings without an id get a generated one.
                When False only headings with an explicit id are collected.
        """
        self.used = used if used is not None else set()
        self.options = options or AnchorOptions()
        self.generate = generate
        self.headings: list[Heading] = []
        self.modified = False

    def reserve(self, element: Tag) -> None:
        """Record the explicit id of a heading before any id is generated.

        Args:
            element: ``h1``..``h6`` element.
        """
        anchor = _explicit_id(element)
        if anchor is None:
            return
        if anchor in self.used:
            logger.warning("Duplicate anchor id in document: %s", anchor)
        self.used.add(anchor)

    def visit_heading(self, element: Tag) -> None:
        """Record one heading element, generating its id when missing.

        Args:
            element: ``h1``..``h6`` element.
        """
        title = decode_entities(" ".join(element.get_text().split()))
        if not title:
            return

        anchor = _explicit_id(element)
        if anchor is not None:
            self.used.add(anchor)
        elif not self.generate:
            return
        else:
            anchor = unique_anchor(generate_anchor_id(title, self.options), self.used)
            element["id"] = anchor
            self.modified = True

        self.headings.append(Heading(level=element.name, id=anchor, title=title))

    def collect(self, soup: BeautifulSoup) -> list[Heading]:
        """Visit every heading of the document in order.

        Explicit ids are reserved in a first pass so generated ids never
        take a value an author assigned further down the document.

        Args:
            soup: Parsed document, mutated with generated ids.

        Returns:
            Ordered list of headings.
        """
        elements = soup.find_all(HEADING_TAGS)
        for element in elements:
            self.reserve(element)
        for element in elements:
            self.visit_heading(element)
        return self.headings


def process_headings(
    html: str,
    used: set[str] | None = None,
    options: AnchorOptions | None = None,
    generate: bool = True,
) -> tuple[str, list[Heading]]:
    """Extract headings from markup and write generated ids back into it.

    Args:
        html: Document markup.
        used: Ids already taken in this document.
        options: Anchor generation policy.
        generate: Whether to generate ids for headings lacking one.

    Returns:
        The markup (rewritten only when ids were added) and the heading list.
    """
    if not html:
        return html, []

    soup = parse_markup(html)
    collector = HeadingCollector(used, options, generate)
    headings = collector.collect(soup)
    if collector.modified:
        html = render_markup(soup)
    logger.debug("Found %d headings", len(headings))
    return html, headings


def explicit_section_ids(sections: Sequence[Any]) -> set[str]:
    """Ids that content sections already carry.

    Args:
        sections: Content section mappings from the document frontmatter.

    Returns:
        The set of non-blank section ids.
    """
    found = set()
    for section in sections:
        if isinstance(section, MutableMapping):
            anchor = _explicit_id(section)
            if anchor is not None:
                found.add(anchor)
    return found


def ensure_section_ids(
    sections: Sequence[Any],
    used: set[str] | None = None,
    options: AnchorOptions | None = None,
) -> None:
    """Give every content section a unique ``id``, in place.

    Sections that already carry a non-blank id keep it. Others get an id
    derived from their nested title, lead-in or section type, falling back
    to ``section-<index>``.

    Args:
        sections: Content section mappings from the document frontmatter.
        used: Ids already taken in this document.
        options: Anchor generation policy.
    """
    used = used if used is not None else set()
    used.update(explicit_section_ids(sections))

    for index, section in enumerate(sections):
        if not isinstance(section, MutableMapping) or _explicit_id(section) is not None:
            continue
        source = (
            find_nested_field(section, "title")
            or find_nested_field(section, "leadIn")
            or section.get("sectionType")
            or f"section-{index}"
        )
        section["id"] = unique_anchor(generate_anchor_id(source, options), used)
