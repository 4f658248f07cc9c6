"""Tests for document selection and screening."""

from site_search_index.filters import (
    document_priority,
    has_structured_content,
    is_binary,
    match_patterns,
    screen_document,
    select_documents,
)
from site_search_index.models import SourceDocument


def _doc(path: str, contents: bytes = b"<p>Hello</p>", **metadata: object) -> SourceDocument:
    return SourceDocument(path=path, contents=contents, metadata=dict(metadata))


def test_match_patterns_globstar() -> None:
    """Test that **/ also matches top-level files."""
    paths = ["index.html", "blog/post.html", "blog/2024/deep.html", "style.css"]
    assert match_patterns(["**/*.html"], paths) == ["index.html", "blog/post.html", "blog/2024/deep.html"]


def test_match_patterns_single_star_stays_in_directory() -> None:
    """Test that * does not cross directory separators."""
    paths = ["index.html", "blog/post.html"]
    assert match_patterns(["*.html"], paths) == ["index.html"]
    assert match_patterns(["blog/*"], paths) == ["blog/post.html"]
    assert match_patterns(["blog/po?t.html"], paths) == ["blog/post.html"]


def test_select_documents_with_ignore() -> None:
    """Test ignore patterns and input order."""
    documents = {path: _doc(path) for path in ["b.html", "drafts/x.html", "a.html", "a.md"]}
    assert select_documents(documents, ["**/*.html"], ["drafts/**"]) == ["b.html", "a.html"]


def test_is_binary() -> None:
    """Test extension and NUL byte detection."""
    assert is_binary(b"text", "image.PNG")
    assert is_binary(b"ab\x00cd", "page.html")
    assert not is_binary(b"<p>text</p>", "page.html")


def test_has_structured_content() -> None:
    """Test frontmatter detection."""
    assert has_structured_content(_doc("a.html", b"", title="Hi"))
    assert has_structured_content(_doc("a.html", b"", sections=[{"sectionType": "hero"}]))
    assert has_structured_content(_doc("a.md", b"---\ntitle: x\n---\n"))
    assert not has_structured_content(_doc("a.html", b"", sections=[]))


def test_screen_document() -> None:
    """Test reasons for skipping documents."""
    assert screen_document(None, "a.html") == ["document is missing"]
    assert screen_document(SourceDocument(path="a.html", contents="text"), "a.html") == ["contents are not bytes"]  # type: ignore[arg-type]
    assert screen_document(_doc("a.pdf"), "a.pdf") == ["document appears to be binary"]
    assert screen_document(_doc("a.html", b"   \n"), "a.html") == ["document is empty and has no structured content"]
    assert screen_document(_doc("a.html", b"", title="Only frontmatter"), "a.html") == []
    assert screen_document(_doc("a.html"), "a.html") == []


def test_document_priority() -> None:
    """Test priority ordering inputs."""
    structured = _doc("a.md", b"x" * 2000, title="T")
    plain = _doc("b.html", b"x" * 50)
    assert document_priority(structured, "a.md") == 10 + 5 + 2
    assert document_priority(plain, "b.html") == 3
