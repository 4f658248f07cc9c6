"""Plain text extraction from HTML and markdown-flavoured fields."""

import logging
import re
from collections.abc import Iterable

from bs4 import BeautifulSoup
from soupsieve import SelectorSyntaxError

logger = logging.getLogger(__name__)

ALWAYS_REMOVED = ["script", "style"]
HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]

ENTITIES = {
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&#39;": "'",
    "&apos;": "'",
    "&nbsp;": " ",
    "&mdash;": "—",
    "&ndash;": "–",
    "&hellip;": "…",
    "&copy;": "©",
    "&reg;": "®",
    "&trade;": "™",
}

_BLOCK_END_RE = re.compile(
    r"</(div|p|h[1-6]|li|tr|section|article|header|footer|main|blockquote|pre|dd|dt)[^>]*>",
    re.IGNORECASE,
)
_BREAK_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_RULE_RE = re.compile(r"<hr\s*/?>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_ENTITY_RE = re.compile(r"&[a-zA-Z0-9#]+;")
_INLINE_SPACE_RE = re.compile(r"[^\S\n]+")
_NEWLINE_RUN_RE = re.compile(r"\s*\n\s*")
_MARKDOWN_HINT_RE = re.compile(r"[*_`#\[\]]")


def decode_entities(text: str) -> str:
    """Decode the common named entities, leaving unknown ones untouched.

    Args:
        text: Text that may contain HTML entities.

    Returns:
        Text with known entities replaced by their characters.
    """
    return _ENTITY_RE.sub(lambda match: ENTITIES.get(match.group(0), match.group(0)), text)


def collapse_whitespace(text: str) -> str:
    """Collapse runs of spaces while keeping single line breaks.

    Args:
        text: Text to clean.

    Returns:
        Text with single spaces between words and single newlines between blocks.
    """
    text = _INLINE_SPACE_RE.sub(" ", text)
    text = _NEWLINE_RUN_RE.sub("\n", text)
    return text.strip()


def parse_markup(html: str) -> BeautifulSoup:
    """Parse markup without letting the parser decode entities.

    Every ``&`` is escaped first, so entity references survive as literal
    text and are only decoded by :func:`decode_entities`.

    Args:
        html: Markup to parse.

    Returns:
        Parsed tree.
    """
    return BeautifulSoup(html.replace("&", "&amp;"), "html.parser")


def render_markup(soup: BeautifulSoup) -> str:
    """Serialise a tree produced by :func:`parse_markup`.

    Args:
        soup: Parsed tree, possibly modified.

    Returns:
        Markup with the original entity references restored.
    """
    return soup.decode(formatter="minimal").replace("&amp;", "&")


def _prune_tree(
    html: str,
    exclude_selectors: Iterable[str],
    mark_headings: bool,
) -> str:
    """Remove scripts, styles and excluded regions from markup.

    Args:
        html: Markup to prune.
        exclude_selectors: CSS selectors of regions to drop.
        mark_headings: Prefix heading text with ``#`` markers.

    Returns:
        The pruned markup.
    """
    soup = parse_markup(html)

    for element in soup.find_all(ALWAYS_REMOVED):
        element.decompose()

    for selector in exclude_selectors:
        try:
            matches = soup.select(selector)
        except SelectorSyntaxError:
            logger.warning("Ignoring invalid exclude selector: %s", selector)
            continue
        for element in matches:
            element.decompose()

    if mark_headings:
        for element in soup.find_all(HEADING_TAGS):
            if not element.get_text().strip():
                continue
            marker = "#" * int(element.name[1])
            element.insert(0, f"\n{marker} ")

    return render_markup(soup)


def strip_html(
    html: object,
    exclude_selectors: Iterable[str] | None = None,
    *,
    decode: bool = True,
    preserve_line_breaks: bool = True,
    mark_headings: bool = False,
) -> str:
    """Convert an HTML fragment or page into plain text.

    Script and style elements are always dropped. Elements matching
    ``exclude_selectors`` are removed before any text is extracted. Block
    level boundaries become single newlines so later segmentation can see
    the coarse structure of the page.

    Args:
        html: Markup to convert. Anything that is not a non-empty string
            yields an empty result.
        exclude_selectors: CSS selectors of regions to drop.
        decode: Whether to decode the common named entities.
        preserve_line_breaks: Whether block boundaries become newlines.
        mark_headings: Prefix heading text with ``#`` markers, one per level.

    Returns:
        Plain text, or an empty string when the markup cannot be processed.
    """
    if not isinstance(html, str) or not html:
        return ""

    try:
        text = _prune_tree(html, exclude_selectors or (), mark_headings)
    except Exception:
        logger.warning("Failed to parse markup, treating it as empty", exc_info=True)
        return ""

    if preserve_line_breaks:
        text = _BLOCK_END_RE.sub("\n", text)
        text = _BREAK_RE.sub("\n", text)
        text = _RULE_RE.sub("\n", text)
    text = _TAG_RE.sub(" " if not preserve_line_breaks else "", text)

    if decode:
        text = decode_entities(text)

    return collapse_whitespace(text)


def process_markdown_field(value: object) -> object:
    """Remove inline markdown syntax from a frontmatter value.

    Non-string values are returned unchanged, as are strings without any
    markdown markers.

    Args:
        value: Frontmatter field value.

    Returns:
        The value with links, emphasis, inline code and heading hashes removed.
    """
    if not isinstance(value, str) or not value:
        return value
    if not _MARKDOWN_HINT_RE.search(value):
        return value

    processed = re.sub(r"\[([^\]]+)\]\([^)]+\)", r"\1", value)
    processed = re.sub(r"\*\*([^*]+)\*\*", r"\1", processed)
    processed = re.sub(r"\*([^*]+)\*", r"\1", processed)
    processed = re.sub(r"__([^_]+)__", r"\1", processed)
    processed = re.sub(r"_([^_]+)_", r"\1", processed)
    processed = re.sub(r"`([^`]+)`", r"\1", processed)
    processed = re.sub(r"^#+\s*(.+)", r"\1", processed, flags=re.MULTILINE)
    return re.sub(r"\s+", " ", processed).strip()
