"""Exceptions raised while building search indexes."""


class SearchIndexError(Exception):
    """Base class for all search index errors."""

    def __init__(self, message: str, path: str | None = None) -> None:
        """Initialise the error.

        Args:
            message: Human readable description.
            path: Source document or entry the error relates to, if known.
        """
        self.message = message
        self.path = path
        super().__init__(message)

    def __str__(self) -> str:
        if self.path:
            return f"{self.message} (path: {self.path})"
        return self.message


class ConfigError(SearchIndexError):
    """Invalid indexing options."""


class DocumentError(SearchIndexError):
    """A single source document cannot be processed."""


class IndexBuildError(SearchIndexError):
    """The final index document cannot be assembled."""
