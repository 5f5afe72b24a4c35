"""
Search subsystem exports.
"""

from .config import SearchConfig
from .documents import build_scenario_document, build_spec_document, scenario_identifier, spec_identifier
from .errors import (
    ConfigurationError,
    DocumentBuildError,
    DocumentRejectedError,
    IncompatibleIndexError,
    IndexNotFoundError,
    IndexOpenError,
    SearchError,
    SearchSubsystemError,
)
from .indexer import ConcurrentIndexer
from .mapping import DEFAULT_MAPPING, DocumentMapping, IndexMapping
from .models import (
    Comment,
    DocumentType,
    Heading,
    IndexStats,
    Scenario,
    ScenarioDocument,
    SearchHit,
    SearchResult,
    SpecCollection,
    SpecDocument,
    Specification,
    Step,
    load_collection,
)
from .query import QueryEngine
from .service import initialize, search
from .store import IndexHandle, open_existing, open_or_create

__all__ = [
    "Comment",
    "ConfigurationError",
    "ConcurrentIndexer",
    "DEFAULT_MAPPING",
    "DocumentBuildError",
    "DocumentMapping",
    "DocumentRejectedError",
    "DocumentType",
    "Heading",
    "IncompatibleIndexError",
    "IndexHandle",
    "IndexMapping",
    "IndexNotFoundError",
    "IndexOpenError",
    "IndexStats",
    "QueryEngine",
    "Scenario",
    "ScenarioDocument",
    "SearchConfig",
    "SearchError",
    "SearchHit",
    "SearchResult",
    "SearchSubsystemError",
    "SpecCollection",
    "SpecDocument",
    "Specification",
    "Step",
    "build_scenario_document",
    "build_spec_document",
    "initialize",
    "load_collection",
    "open_existing",
    "open_or_create",
    "scenario_identifier",
    "search",
    "spec_identifier",
]
