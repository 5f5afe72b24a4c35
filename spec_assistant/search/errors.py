from __future__ import annotations


class SearchSubsystemError(Exception):
    """Base class for all search subsystem failures."""


class IndexOpenError(SearchSubsystemError):
    """The index exists but could not be opened or created."""


class IndexNotFoundError(SearchSubsystemError):
    def __init__(self, path):
        super().__init__(f"No index found at {path}. Run indexing first.")
        self.path = path


class IncompatibleIndexError(IndexOpenError):
    """The stored schema does not match the configured mapping."""


class DocumentBuildError(SearchSubsystemError):
    pass


class DocumentRejectedError(SearchSubsystemError):
    """A document was refused before reaching the index writer."""


class SearchError(SearchSubsystemError):
    pass


class ConfigurationError(SearchSubsystemError):
    pass
