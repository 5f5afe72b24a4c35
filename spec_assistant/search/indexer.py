from __future__ import annotations

import json
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import asdict
from pathlib import Path
from typing import List, Set

from .documents import build_scenario_document, build_spec_document, spec_identifier
from .errors import DocumentRejectedError
from .models import IndexStats, Scenario, SpecCollection, Specification
from .store import IndexHandle

logger = logging.getLogger(__name__)


class ConcurrentIndexer:
    """
    Fans document construction out over a thread pool: one task per
    specification and one per scenario. Tasks hand their documents to the
    index handle, whose single writer thread applies the inserts.

    A failing document is logged and skipped; the rest of the pass carries on.
    The handle is committed and closed once every task has finished.
    Ids are claimed per pass: the writer only replaces committed documents,
    so a second document with an already claimed id is skipped.
    """

    def __init__(self, project_root: Path, max_workers: int = 8):
        self.project_root = Path(project_root)
        self.max_workers = max_workers
        self._claimed: Set[str] = set()
        self._claim_lock = threading.Lock()

    def index(self, handle: IndexHandle, specs: SpecCollection) -> IndexStats:
        try:
            total = specs.size() + specs.scenario_count()
            logger.info("Indexing %d specs (%d documents)", specs.size(), total)
            handle.start_writer()
            with self._claim_lock:
                self._claimed = set()

            with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="indexer") as pool:
                futures = []
                for spec in specs:
                    logger.info("Indexing %s", spec.file_name)
                    futures.append(pool.submit(self._index_spec, handle, spec))
                    for scenario in spec.scenarios:
                        futures.append(pool.submit(self._index_scenario, handle, spec, scenario))
                wait(futures)

            outcomes: List[bool] = [f.result() for f in futures]
            indexed = sum(1 for ok in outcomes if ok)
            handle.flush()

            stats = IndexStats(
                total=total,
                indexed=indexed,
                skipped=total - indexed,
                doc_count=handle.doc_count(),
                index_path=str(handle.path),
            )
            logger.info(json.dumps({**asdict(stats), **handle.stats()}))
            if stats.skipped:
                logger.warning("Skipped %d of %d documents, see errors above", stats.skipped, total)
            return stats
        finally:
            handle.close()

    def _index_spec(self, handle: IndexHandle, spec: Specification) -> bool:
        try:
            document = build_spec_document(spec, self.project_root)
            self._claim(document.id)
            handle.add_document(document).result()
        except Exception as exc:  # noqa: BLE001
            logger.error("Unable to index %s. %s", spec.file_name, exc)
            return False
        return True

    def _index_scenario(self, handle: IndexHandle, spec: Specification, scenario: Scenario) -> bool:
        scenario_ref = f"{spec.file_name}:{scenario.heading.line_no}"
        try:
            document = build_scenario_document(scenario, spec_identifier(spec, self.project_root))
            self._claim(document.id)
            logger.debug("Indexing scenario %s", document.id)
            handle.add_document(document).result()
        except Exception as exc:  # noqa: BLE001
            logger.error("Unable to index %s. %s", scenario_ref, exc)
            return False
        return True

    def _claim(self, doc_id: str) -> None:
        with self._claim_lock:
            if doc_id in self._claimed:
                raise DocumentRejectedError(f"Duplicate document id {doc_id} in this pass")
            self._claimed.add(doc_id)
