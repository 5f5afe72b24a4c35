from __future__ import annotations

import logging
from typing import Optional

from .config import SearchConfig
from .indexer import ConcurrentIndexer
from .models import IndexStats, SearchResult, SpecCollection
from .query import QueryEngine
from .store import open_existing, open_or_create

logger = logging.getLogger(__name__)


def initialize(specs: SpecCollection, config: SearchConfig) -> IndexStats:
    """
    Build or refresh the on-disk index for `specs`. Open/create failures
    propagate; per-document failures are logged and counted as skipped.
    """
    handle = open_or_create(config.index_path, config.mapping)
    indexer = ConcurrentIndexer(config.project_root, max_workers=config.max_workers)
    return indexer.index(handle, specs)


def search(
    text: str,
    config: SearchConfig,
    tag: Optional[str] = None,
    limit: Optional[int] = None,
) -> SearchResult:
    with open_existing(config.index_path, config.mapping) as handle:
        engine = QueryEngine(handle, facet_size=config.facet_size, limit=config.result_limit)
        result = engine.search(text, tag=tag, limit=limit)
    logger.debug("Query %r matched %d documents in %.4fs", text, result.total, result.runtime)
    return result
