from __future__ import annotations

import logging
import queue
import threading
from concurrent.futures import Future
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from whoosh import index

from .errors import IndexNotFoundError, IndexOpenError
from .mapping import DEFAULT_MAPPING, Document, IndexMapping

logger = logging.getLogger(__name__)


def _has_no_index(index_path: Path) -> bool:
    """
    True only for "nothing there yet": a missing path or an empty directory.
    A directory with files but no readable index is left alone.
    """
    if not index_path.exists():
        return True
    return index_path.is_dir() and not any(index_path.iterdir())


def open_or_create(index_path: Path, mapping: IndexMapping = DEFAULT_MAPPING) -> "IndexHandle":
    index_path = Path(index_path)
    if _has_no_index(index_path):
        logger.info("Creating index at %s", index_path)
        try:
            index_path.mkdir(parents=True, exist_ok=True)
            ix = index.create_in(str(index_path), mapping.build_schema())
        except Exception as exc:  # noqa: BLE001
            raise IndexOpenError(f"Unable to create index at {index_path}: {exc}") from exc
        return IndexHandle(ix, index_path, mapping)
    return _open(index_path, mapping)


def open_existing(index_path: Path, mapping: IndexMapping = DEFAULT_MAPPING) -> "IndexHandle":
    index_path = Path(index_path)
    if _has_no_index(index_path):
        raise IndexNotFoundError(index_path)
    return _open(index_path, mapping)


def _open(index_path: Path, mapping: IndexMapping) -> "IndexHandle":
    try:
        ix = index.open_dir(str(index_path))
    except Exception as exc:  # noqa: BLE001
        raise IndexOpenError(f"Unable to open index {index_path}: {exc}") from exc
    try:
        mapping.check_compatible(ix.schema)
    except IndexOpenError:
        ix.close()
        raise
    return IndexHandle(ix, index_path, mapping)


class _WriterThread(threading.Thread):
    """
    Single consumer that owns every call into the Whoosh writer.
    Whoosh only allows one writer per index, so producers queue their
    documents here and wait on the returned future.
    """

    _STOP = None

    def __init__(self, writer):
        super().__init__(name="index-writer", daemon=True)
        self._writer = writer
        self._queue: "queue.Queue[Optional[Tuple[Dict[str, Any], Future]]]" = queue.Queue()

    def submit(self, fields: Dict[str, Any]) -> Future:
        future: Future = Future()
        self._queue.put((fields, future))
        return future

    def run(self) -> None:
        while True:
            item = self._queue.get()
            if item is self._STOP:
                return
            fields, future = item
            if not future.set_running_or_notify_cancel():
                continue
            try:
                self._writer.update_document(**fields)
            except Exception as exc:  # noqa: BLE001
                future.set_exception(exc)
            else:
                future.set_result(fields["id"])

    def stop(self) -> None:
        self._queue.put(self._STOP)
        self.join()


class IndexHandle:
    """
    An open Whoosh index. Inserts from any thread are upserts keyed by
    document id and are applied by one writer thread; `flush` commits them.
    """

    def __init__(self, ix, path: Path, mapping: IndexMapping):
        self.ix = ix
        self.path = Path(path)
        self.mapping = mapping
        self._lock = threading.Lock()
        self._writer = None
        self._writer_thread: Optional[_WriterThread] = None
        self._closed = False

    @property
    def schema(self):
        return self.ix.schema

    def start_writer(self) -> None:
        with self._lock:
            if self._closed:
                raise IndexOpenError(f"Index {self.path} is closed")
            if self._writer_thread is not None:
                return
            try:
                self._writer = self.ix.writer()
            except Exception as exc:  # noqa: BLE001
                raise IndexOpenError(f"Unable to acquire writer for {self.path}: {exc}") from exc
            self._writer_thread = _WriterThread(self._writer)
            self._writer_thread.start()

    def add_document(self, document: Document) -> Future:
        fields = self.mapping.encode(document)
        self.start_writer()
        return self._writer_thread.submit(fields)

    def flush(self) -> None:
        with self._lock:
            thread, writer = self._writer_thread, self._writer
            self._writer_thread, self._writer = None, None
        if thread is None:
            return
        thread.stop()
        try:
            writer.commit()
        except Exception:  # noqa: BLE001
            # Release the lock and drop the pending segment.
            if not writer.is_closed:
                writer.cancel()
            raise
        logger.debug("Committed pending documents to %s", self.path)

    def doc_count(self) -> int:
        return self.ix.doc_count()

    def stats(self) -> Dict[str, Any]:
        with self.ix.reader() as reader:
            segments = len(reader.leaf_readers())
        return {
            "path": str(self.path),
            "doc_count": self.ix.doc_count(),
            "segments": segments,
            "optimized": segments <= 1,
            "last_modified": self.ix.last_modified(),
        }

    def close(self) -> None:
        if self._closed:
            return
        try:
            self.flush()
        finally:
            self._closed = True
            self.ix.close()

    def __enter__(self) -> "IndexHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
