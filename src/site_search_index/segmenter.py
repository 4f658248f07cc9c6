"""Splitting of long-form text into heading and length bounded segments."""

import re

from site_search_index.models import Segment

DEFAULT_MAX_SECTION_LENGTH = 2000
DEFAULT_CHUNK_SIZE = 1500
DEFAULT_MIN_SECTION_LENGTH = 50

_HEADING_RE = re.compile(r"^(#{1,6}[ \t]+.+|<h[1-6][^>]*>.*?</h[1-6]>)", re.IGNORECASE | re.MULTILINE)
_SENTENCE_END_RE = re.compile(r"(?<=[.!?])\s+")


def _heading_title(marker: str) -> str:
    """Title text of a ``#`` or ``<hN>`` heading marker.

    Args:
        marker: Heading marker as matched in the text.

    Returns:
        The bare, trimmed title.
    """
    title = re.sub(r"^#+\s*", "", marker)
    title = re.sub(r"</?h[1-6][^>]*>", "", title, flags=re.IGNORECASE)
    return title.strip()


def split_long_content(content: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> list[str]:
    """Split text into chunks made of whole sentences.

    Sentences are accumulated until adding the next one would exceed
    ``chunk_size``. A single sentence longer than ``chunk_size`` becomes a
    chunk of its own rather than being cut.

    Args:
        content: Text to split.
        chunk_size: Target maximum chunk length in characters.

    Returns:
        Ordered list of non-empty chunks.
    """
    chunks: list[str] = []
    current = ""

    for sentence in _SENTENCE_END_RE.split(content.strip()):
        if not sentence:
            continue
        if current and len(current) + 1 + len(sentence) > chunk_size:
            chunks.append(current.strip())
            current = sentence
        else:
            current = f"{current} {sentence}" if current else sentence

    if current.strip():
        chunks.append(current.strip())
    return chunks


def split_content_by_sections(
    content: str,
    *,
    max_section_length: int = DEFAULT_MAX_SECTION_LENGTH,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    min_section_length: int = DEFAULT_MIN_SECTION_LENGTH,
) -> list[Segment]:
    """Segment long-form text on headings, then on length.

    Text following a ``#``-style or ``<hN>`` heading marker is attached to
    that heading; leading text has no heading. Blocks longer than
    ``max_section_length`` are split into sentence-aligned chunks labelled
    ``"<heading> (Part N)"``. Blocks shorter than ``min_section_length``
    once trimmed are dropped.

    Args:
        content: Normalized text.
        max_section_length: Length above which a block is chunked.
        chunk_size: Target chunk length for over-long blocks.
        min_section_length: Minimum trimmed length of a kept block.

    Returns:
        Ordered list of segments.
    """
    if not content:
        return []

    # re.split with one capturing group alternates text, heading, text, ...
    parts = _HEADING_RE.split(content)
    segments: list[Segment] = []

    for position in range(0, len(parts), 2):
        block = parts[position].strip()
        if not block:
            continue
        heading = (_heading_title(parts[position - 1]) or None) if position > 0 else None

        if len(block) > max_section_length:
            for number, chunk in enumerate(split_long_content(block, chunk_size), start=1):
                label = f"{heading} (Part {number})" if heading else None
                segments.append(Segment(heading=label, content=chunk, part=number if heading else None))
        else:
            segments.append(Segment(heading=heading, content=block))

    return [segment for segment in segments if len(segment.content.strip()) >= min_section_length]
