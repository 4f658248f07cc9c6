"""Build pipeline turning a set of source documents into a search index."""

import dataclasses
import json
import logging
from collections.abc import Mapping, MutableMapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

from site_search_index.builder import create_search_index
from site_search_index.config import SearchConfig
from site_search_index.errors import SearchIndexError
from site_search_index.extractor import extract_searchable_content
from site_search_index.filters import document_priority, screen_document, select_documents
from site_search_index.models import SearchEntry, SourceDocument
from site_search_index.parser import DocumentParser

logger = logging.getLogger(__name__)

DEFAULT_SECTION_FIELDS = ["title", "subTitle", "leadIn", "prose", "caption", "altText"]


def discover_section_types(
    documents: Mapping[str, SourceDocument],
    paths: Sequence[str],
    config: SearchConfig,
) -> set[str]:
    """Collect the section types used by the given documents.

    Args:
        documents: All source documents.
        paths: Keys of the documents to inspect.
        config: Indexing options naming the sections and type fields.

    Returns:
        Section types found, always including ``traditional``.
    """
    discovered = {"traditional"}
    for path in paths:
        sections = (documents[path].metadata or {}).get(config.sections_field)
        if not isinstance(sections, list):
            continue
        for section in sections:
            if isinstance(section, Mapping):
                section_type = section.get(config.section_type_field)
                if isinstance(section_type, str) and section_type:
                    discovered.add(section_type)
    return discovered


def generate_component_fields(section_types: set[str], configured: Mapping[str, list[str]]) -> dict[str, list[str]]:
    """Field maps for discovered section types, keeping configured ones.

    Args:
        section_types: Section types found in the documents.
        configured: Field maps given by the user.

    Returns:
        Field names to resolve per section type.
    """
    fields = {}
    for section_type in sorted(section_types):
        if section_type in configured:
            fields[section_type] = list(configured[section_type])
        elif section_type == "traditional":
            fields[section_type] = ["content"]
        else:
            fields[section_type] = list(DEFAULT_SECTION_FIELDS)
    return fields


class SearchIndexer:
    """Selects, extracts and aggregates documents into a search index."""

    def __init__(self, config: SearchConfig | None = None) -> None:
        """Initialise indexer with the given options.

        Args:
            config: Indexing options, defaults to ``SearchConfig()``.
        """
        self.config = config or SearchConfig()
        self.parser = DocumentParser()

    def load_documents(self, source_path: Path) -> dict[str, SourceDocument]:
        """Read every file below a directory.

        Args:
            source_path: Root of the site sources.

        Returns:
            Documents keyed by POSIX path relative to ``source_path``.

        Raises:
            SearchIndexError: If the source path does not exist.
        """
        if not source_path.is_dir():
            msg = "Source path does not exist or is not a directory"
            raise SearchIndexError(msg, path=str(source_path))

        documents = {}
        for file_path in sorted(source_path.rglob("*")):
            if not file_path.is_file():
                continue
            document = self.parser.parse_file(file_path, source_path)
            if document is not None:
                documents[document.path] = document

        logger.info("Loaded %d source files from %s", len(documents), source_path)
        return documents

    def index_from_path(self, source_path: Path) -> dict[str, Any]:
        """Build a search index from a directory of sources.

        Args:
            source_path: Root of the site sources.

        Returns:
            Search index document.
        """
        return self.build(self.load_documents(source_path))

    def build(self, documents: Mapping[str, SourceDocument]) -> dict[str, Any]:
        """Build a search index from a keyed collection of documents.

        Documents may be processed in any order, in parallel when
        ``max_workers`` is above one, but entries are aggregated in input
        document order.

        Args:
            documents: Source documents keyed by path.

        Returns:
            Search index document.
        """
        config = self.config
        selected = select_documents(documents, config.pattern, config.ignore)

        candidates = []
        for path in selected:
            issues = screen_document(documents[path], path, config.sections_field)
            if issues:
                logger.debug("Skipping %s: %s", path, ", ".join(issues))
                continue
            candidates.append(path)

        if not candidates:
            logger.info("No documents to index")
            return create_search_index([], config)

        if config.auto_detect_section_types:
            section_types = discover_section_types(documents, candidates, config)
            config = dataclasses.replace(
                config, component_fields=generate_component_fields(section_types, config.component_fields)
            )
            logger.debug("Auto-detected section types: %s", ", ".join(sorted(section_types)))

        order = sorted(
            candidates,
            key=lambda path: document_priority(documents[path], path, config.sections_field),
            reverse=True,
        )
        logger.info("Processing %d documents (%d matched)", len(order), len(selected))

        results: dict[str, list[SearchEntry]] = {}
        for start in range(0, len(order), config.batch_size):
            batch = order[start : start + config.batch_size]
            for path, batch_entries in zip(batch, self._process_batch(batch, documents, config)):
                results[path] = batch_entries

        entries = [entry for path in candidates for entry in results.get(path, [])]
        logger.info("Extracted %d search entries", len(entries))
        return create_search_index(entries, config)

    def _process_batch(
        self,
        batch: list[str],
        documents: Mapping[str, SourceDocument],
        config: SearchConfig,
    ) -> list[list[SearchEntry]]:
        """Extract entries for one batch of documents.

        Args:
            batch: Document keys.
            documents: All source documents.
            config: Indexing options in effect for this build.

        Returns:
            Entries per document, in batch order.
        """
        if config.max_workers == 1 or len(batch) == 1:
            return [extract_searchable_content(path, documents[path], config) for path in batch]

        with ThreadPoolExecutor(max_workers=config.max_workers) as executor:
            return list(executor.map(lambda path: extract_searchable_content(path, documents[path], config), batch))

    def apply(self, documents: MutableMapping[str, SourceDocument]) -> dict[str, Any]:
        """Build the index and add it to the document collection.

        Args:
            documents: Source documents, receiving the index at ``index_path``.

        Returns:
            Search index document.
        """
        index = self.build(documents)
        path = self.config.index_path
        documents[path] = SourceDocument(path=path, contents=serialize_index(index))
        logger.info("Added search index at %s", path)
        return index

    def write_index(self, index: Mapping[str, Any], output_dir: Path) -> Path:
        """Write the index as JSON below ``output_dir``.

        Args:
            index: Search index document.
            output_dir: Destination directory.

        Returns:
            Path of the written file.
        """
        target = output_dir / self.config.index_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(serialize_index(index))
        logger.info("Wrote search index to %s", target)
        return target


def serialize_index(index: Mapping[str, Any]) -> bytes:
    """Encode the index document as indented UTF-8 JSON.

    Args:
        index: Search index document.

    Returns:
        JSON bytes.
    """
    return json.dumps(index, indent=2, ensure_ascii=False).encode("utf-8")
