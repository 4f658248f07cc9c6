"""Selection and screening of source documents before extraction."""

import re
from collections.abc import Iterable, Mapping, Sequence
from functools import lru_cache
from pathlib import PurePosixPath

from site_search_index.models import SourceDocument

BINARY_EXTENSIONS = frozenset(
    {
        ".jpg", ".jpeg", ".png", ".gif", ".webp", ".ico", ".svg",
        ".pdf", ".zip", ".tar", ".gz", ".rar", ".7z",
        ".mp3", ".mp4", ".avi", ".mov", ".wmv", ".flv",
        ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
        ".exe", ".dll", ".so", ".dylib", ".app",
    }
)

STRUCTURED_FIELDS = ("title", "description", "summary", "excerpt", "content")

EXTENSION_PRIORITY = {".md": 5, ".markdown": 5, ".html": 3, ".htm": 3, ".rst": 3, ".rest": 3, ".txt": 1}


@lru_cache(maxsize=256)
def _compile_glob(pattern: str) -> re.Pattern[str]:
    """Translate a glob pattern into an anchored regular expression.

    Args:
        pattern: Glob pattern using ``**``, ``*`` and ``?``.

    Returns:
        Compiled expression matching whole document keys.
    """
    regex = ""
    index = 0
    while index < len(pattern):
        char = pattern[index]
        if pattern.startswith("**/", index):
            regex += "(?:.*/)?"
            index += 3
            continue
        if pattern.startswith("**", index):
            regex += ".*"
            index += 2
            continue
        if char == "*":
            regex += "[^/]*"
        elif char == "?":
            regex += "[^/]"
        else:
            regex += re.escape(char)
        index += 1
    return re.compile(f"{regex}\\Z")


def match_patterns(patterns: Sequence[str], paths: Iterable[str]) -> list[str]:
    """Return the paths matching any of the glob patterns, in input order.

    ``*`` and ``?`` stop at ``/``; ``**`` crosses directories and ``**/``
    also matches the top level.

    Args:
        patterns: Glob patterns.
        paths: Slash separated document keys.

    Returns:
        Matching paths.
    """
    compiled = [_compile_glob(pattern) for pattern in patterns]
    return [path for path in paths if any(regex.match(path) for regex in compiled)]


def select_documents(documents: Mapping[str, SourceDocument], pattern: Sequence[str], ignore: Sequence[str]) -> list[str]:
    """Keys of documents matching ``pattern`` and not matching ``ignore``.

    Args:
        documents: Source documents keyed by path.
        pattern: Glob patterns of documents to index.
        ignore: Glob patterns of documents to skip.

    Returns:
        Selected keys in input order.
    """
    matched = match_patterns(pattern, documents.keys())
    if not ignore:
        return matched
    ignored = set(match_patterns(ignore, matched))
    return [path for path in matched if path not in ignored]


def has_structured_content(document: SourceDocument, sections_field: str = "sections") -> bool:
    """Whether the document carries indexable frontmatter.

    Args:
        document: Source document.
        sections_field: Metadata key holding content sections.

    Returns:
        True for documents with content fields, a non-empty sections list or
        a leading frontmatter fence.
    """
    metadata = document.metadata or {}
    if any(metadata.get(name) for name in STRUCTURED_FIELDS):
        return True
    sections = metadata.get(sections_field)
    if isinstance(sections, list) and sections:
        return True
    if isinstance(document.contents, bytes):
        head = document.contents[:100]
        return head.startswith(b"---\n") or head.startswith(b"---\r\n")
    return False


def is_binary(contents: bytes, path: str) -> bool:
    """Guess whether a document is binary from its extension and first bytes.

    Args:
        contents: Raw document contents.
        path: Document key.

    Returns:
        True for known binary extensions or a NUL byte in the first 512 bytes.
    """
    if PurePosixPath(path).suffix.lower() in BINARY_EXTENSIONS:
        return True
    return b"\x00" in contents[:512]


def screen_document(document: SourceDocument | None, path: str, sections_field: str = "sections") -> list[str]:
    """List the reasons a document cannot be indexed.

    Args:
        document: Source document, possibly missing.
        path: Document key.
        sections_field: Metadata key holding content sections.

    Returns:
        Empty list when the document can be processed.
    """
    if document is None:
        return ["document is missing"]
    if not isinstance(document.contents, bytes):
        return ["contents are not bytes"]
    if is_binary(document.contents, path):
        return ["document appears to be binary"]
    if not document.contents.strip() and not has_structured_content(document, sections_field):
        return ["document is empty and has no structured content"]
    return []


def document_priority(document: SourceDocument, path: str, sections_field: str = "sections") -> int:
    """Processing priority, higher first.

    Args:
        document: Source document.
        path: Document key.
        sections_field: Metadata key holding content sections.

    Returns:
        Priority score.
    """
    priority = 10 if has_structured_content(document, sections_field) else 0
    priority += EXTENSION_PRIORITY.get(PurePosixPath(path).suffix.lower(), 0)

    size = len(document.contents)
    if size > 5000:
        priority += 3
    elif size > 1000:
        priority += 2
    elif size > 100:
        priority += 1
    return priority
