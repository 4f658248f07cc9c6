"""Loading of HTML, Markdown and reStructuredText files as source documents."""

import logging
import re
from pathlib import Path
from typing import Any

import docutils.core  # type: ignore[import-untyped]
import docutils.nodes  # type: ignore[import-untyped]
import yaml

from site_search_index.errors import DocumentError
from site_search_index.models import SourceDocument

logger = logging.getLogger(__name__)

RST_SUFFIXES = (".rst", ".rest")

_FRONTMATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)

_DOCUTILS_SETTINGS = {
    "report_level": 5,
    "halt_level": 5,
    "warning_stream": False,
    "file_insertion_enabled": False,
    "raw_enabled": False,
}


class MetadataVisitor(docutils.nodes.GenericNodeVisitor):  # type: ignore[misc]
    """Visitor to extract page metadata from an RST document tree."""

    def __init__(self, document: docutils.nodes.document) -> None:
        """Initialise metadata visitor.

        Args:
            document: Docutils document tree.
        """
        super().__init__(document)
        self.metadata: dict[str, Any] = {}
        self._in_docinfo = False

    def visit_title(self, node: docutils.nodes.title) -> None:
        """Use the first section title as the page title.

        Args:
            node: Title node.
        """
        self.metadata.setdefault("title", node.astext())

    def visit_paragraph(self, node: docutils.nodes.paragraph) -> None:
        """Use the first paragraph outside docinfo as the description.

        Args:
            node: Paragraph node.
        """
        if not self._in_docinfo:
            self.metadata.setdefault("description", node.astext())

    def visit_docinfo(self, node: docutils.nodes.docinfo) -> None:
        """Visit docinfo node.

        Args:
            node: Docinfo node.
        """
        self._in_docinfo = True

    def depart_docinfo(self, node: docutils.nodes.docinfo) -> None:
        """Depart docinfo node.

        Args:
            node: Docinfo node.
        """
        self._in_docinfo = False

    def visit_author(self, node: docutils.nodes.author) -> None:
        """Record the document author.

        Args:
            node: Author node.
        """
        self.metadata.setdefault("author", node.astext())

    def visit_date(self, node: docutils.nodes.date) -> None:
        """Record the document date.

        Args:
            node: Date node.
        """
        self.metadata.setdefault("date", node.astext())

    def visit_field(self, node: docutils.nodes.field) -> None:
        """Collect generic docinfo fields such as ``:tags:``.

        Args:
            node: Field node.

        Raises:
            docutils.nodes.SkipNode: Always, field bodies are not descriptions.
        """
        if self._in_docinfo and len(node.children) == 2:
            name = node.children[0].astext().strip().lower()
            value = node.children[1].astext().strip()
            if name == "tags":
                self.metadata.setdefault("tags", [tag.strip() for tag in value.split(",") if tag.strip()])
            elif name:
                self.metadata.setdefault(name, value)
        raise docutils.nodes.SkipNode

    def default_visit(self, node: docutils.nodes.Node) -> None:
        """Default visit handler (no-op).

        Args:
            node: Any node.
        """

    def default_departure(self, node: docutils.nodes.Node) -> None:
        """Default departure handler (no-op).

        Args:
            node: Any node.
        """


def split_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Separate a leading ``---`` fenced YAML block from the body.

    Args:
        text: File contents.

    Returns:
        The frontmatter mapping (empty when absent) and the remaining body.

    Raises:
        yaml.YAMLError: If the frontmatter is not valid YAML.
    """
    match = _FRONTMATTER_RE.match(text)
    if not match:
        return {}, text

    data = yaml.safe_load(match.group(1))
    if not isinstance(data, dict):
        logger.debug("Frontmatter is not a mapping, ignoring it")
        data = {}
    return data, text[match.end() :]


class DocumentParser:
    """Parses site source files into SourceDocument instances."""

    def parse_file(self, file_path: Path, base_path: Path) -> SourceDocument | None:
        """Read a file, split its frontmatter and render RST to HTML.

        Args:
            file_path: Path to the source file.
            base_path: Root of the site sources.

        Returns:
            SourceDocument keyed by the POSIX path relative to ``base_path``,
            or None if the file cannot be read.
        """
        relative_path = file_path.relative_to(base_path).as_posix()
        try:
            return self.load(file_path, relative_path)
        except DocumentError as exc:
            logger.warning("Skipping source file: %s", exc)
            return None

    def load(self, file_path: Path, relative_path: str) -> SourceDocument:
        """Read one source file.

        Args:
            file_path: Path to the source file.
            relative_path: Document key.

        Returns:
            The parsed document.

        Raises:
            DocumentError: If the file cannot be read, is not UTF-8 or has
                invalid frontmatter.
        """
        try:
            text = file_path.read_bytes().decode("utf-8")
            metadata, body = split_frontmatter(text)
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
            msg = f"Cannot parse source file: {exc}"
            raise DocumentError(msg, path=relative_path) from exc

        if file_path.suffix.lower() in RST_SUFFIXES:
            body, rst_metadata = self._render_rst(body, file_path)
            metadata = {**rst_metadata, **metadata}

        return SourceDocument(path=relative_path, contents=body.encode("utf-8"), metadata=metadata)

    def _render_rst(self, source: str, file_path: Path) -> tuple[str, dict[str, Any]]:
        """Render RST source to an HTML body and collect its metadata.

        Args:
            source: RST source text.
            file_path: Path to the file (for error reporting).

        Returns:
            HTML body markup and the metadata found in the document.
        """
        if not source.strip():
            return "", {"title": self._fallback_title(file_path)}

        doctree = docutils.core.publish_doctree(
            source,
            source_path=str(file_path),
            settings_overrides=_DOCUTILS_SETTINGS,
        )
        visitor = MetadataVisitor(doctree)
        doctree.walk(visitor)
        metadata = visitor.metadata
        if not metadata.get("title"):
            metadata["title"] = self._fallback_title(file_path)

        parts = docutils.core.publish_parts(
            source,
            source_path=str(file_path),
            writer_name="html5",
            settings_overrides=_DOCUTILS_SETTINGS,
        )
        return parts["html_body"], metadata

    @staticmethod
    def _fallback_title(file_path: Path) -> str:
        """Derive a title from the file name.

        Args:
            file_path: Path to the source file.

        Returns:
            Title-cased stem with dashes and underscores as spaces.
        """
        return file_path.stem.replace("-", " ").replace("_", " ").title()
