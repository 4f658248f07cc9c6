"""Tests for content segmentation."""

import re

from site_search_index.models import Segment
from site_search_index.segmenter import split_content_by_sections, split_long_content

PARAGRAPH = "This paragraph is long enough to survive the minimum length filter easily."


def _sentences(count: int) -> str:
    return " ".join(f"Sentence number {index} talks about search indexes." for index in range(count))


def test_split_on_markdown_headings() -> None:
    """Test blocks are attached to the preceding heading."""
    text = f"{PARAGRAPH}\n# First\n{PARAGRAPH}\n## Second\n{PARAGRAPH}"
    segments = split_content_by_sections(text)
    assert [segment.heading for segment in segments] == [None, "First", "Second"]
    assert all(segment.content == PARAGRAPH for segment in segments)


def test_split_on_heading_tags() -> None:
    """Test HTML heading markers."""
    text = f'<h2 class="x">Tagged</h2>\n{PARAGRAPH}'
    segments = split_content_by_sections(text)
    assert segments == [Segment(heading="Tagged", content=PARAGRAPH)]


def test_short_blocks_are_dropped() -> None:
    """Test the minimum section length filter."""
    text = f"# Tiny\nToo short.\n# Big\n{PARAGRAPH}"
    segments = split_content_by_sections(text, min_section_length=50)
    assert [segment.heading for segment in segments] == ["Big"]


def test_long_blocks_are_chunked_with_part_labels() -> None:
    """Test over-long blocks become numbered parts."""
    text = f"# Guide\n{_sentences(30)}"
    segments = split_content_by_sections(text, max_section_length=500, chunk_size=300, min_section_length=10)
    assert len(segments) > 1
    assert [segment.heading for segment in segments] == [f"Guide (Part {n})" for n in range(1, len(segments) + 1)]
    assert all(segment.base_heading == "Guide" for segment in segments)


def test_chunks_respect_size_and_sentence_boundaries() -> None:
    """Test chunk size bound and that no sentence is cut."""
    text = _sentences(40)
    chunks = split_long_content(text, chunk_size=300)
    assert all(len(chunk) <= 300 for chunk in chunks)
    assert all(chunk.endswith(".") for chunk in chunks)
    assert " ".join(chunks) == text


def test_oversized_sentence_is_kept_whole() -> None:
    """Test a sentence longer than the chunk size is not split."""
    long_sentence = "word " * 100 + "end."
    chunks = split_long_content(f"Short one. {long_sentence} Another one.", chunk_size=50)
    assert chunks[1] == long_sentence.strip()
    assert len(chunks) == 3


def test_leading_content_chunks_have_no_heading() -> None:
    """Test chunks from content before any heading stay unlabelled."""
    segments = split_content_by_sections(_sentences(30), max_section_length=500, chunk_size=300)
    assert len(segments) > 1
    assert all(segment.heading is None for segment in segments)


def test_empty_input() -> None:
    """Test empty text."""
    assert split_content_by_sections("") == []
    assert split_long_content("") == []


def test_heading_without_content_is_ignored() -> None:
    """Test that a heading followed directly by another heading yields nothing."""
    segments = split_content_by_sections(f"# Empty\n# Full\n{PARAGRAPH}")
    assert [segment.heading for segment in segments] == ["Full"]
    assert not any(re.match(r"#", segment.content) for segment in segments)
