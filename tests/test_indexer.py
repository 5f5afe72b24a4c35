import logging
from concurrent.futures import Future

from spec_assistant.search import (
    ConcurrentIndexer,
    Heading,
    IndexHandle,
    Scenario,
    SpecCollection,
    Specification,
    Step,
    initialize,
    open_existing,
    open_or_create,
)


def _stored_ids(index_path):
    with open_existing(index_path) as handle:
        with handle.ix.searcher() as searcher:
            return sorted(fields["id"] for fields in searcher.all_stored_fields())


def test_initialize_indexes_specs_and_scenarios(specs, config):
    stats = initialize(specs, config)

    assert stats.total == 5
    assert stats.indexed == 5
    assert stats.skipped == 0
    assert stats.doc_count == 5
    assert _stored_ids(config.index_path) == [
        "specs/checkout.spec",
        "specs/login.spec",
        "specs/login.spec:12",
        "specs/login.spec:20",
        "specs/login.spec:5",
    ]


def test_reindex_is_idempotent(specs, config):
    initialize(specs, config)
    before = _stored_ids(config.index_path)

    stats = initialize(specs, config)

    assert stats.doc_count == 5
    assert _stored_ids(config.index_path) == before


def test_spec_outside_root_is_skipped(specs, config, tmp_path, caplog):
    stray = Specification(
        heading=Heading("Stray spec"),
        file_name=str(tmp_path / "elsewhere" / "stray.spec"),
        scenarios=[
            Scenario(heading=Heading("One", line_no=3), steps=[Step("a")]),
            Scenario(heading=Heading("Two", line_no=8), steps=[Step("b")]),
        ],
    )
    collection = SpecCollection(specs.specs() + [stray])

    with caplog.at_level(logging.ERROR):
        stats = initialize(collection, config)

    assert stats.total == 8
    assert stats.indexed == 5
    assert stats.skipped == 3
    assert stats.doc_count == 5
    assert "stray.spec" in caplog.text


class FlakyHandle(IndexHandle):
    def add_document(self, document):
        if document.id.endswith(":12"):
            future = Future()
            future.set_exception(RuntimeError("disk hiccup"))
            return future
        return super().add_document(document)


def test_insert_failure_does_not_abort_pass(specs, config):
    base = open_or_create(config.index_path)
    handle = FlakyHandle(base.ix, base.path, base.mapping)

    stats = ConcurrentIndexer(config.project_root, max_workers=4).index(handle, specs)

    assert stats.indexed == 4
    assert stats.skipped == 1
    assert "specs/login.spec:12" not in _stored_ids(config.index_path)


def test_handle_closed_after_pass(specs, config):
    handle = open_or_create(config.index_path)
    ConcurrentIndexer(config.project_root).index(handle, specs)

    assert handle._closed


def test_many_documents_concurrently(config):
    specs = SpecCollection(
        [
            Specification(
                heading=Heading(f"Feature {n}"),
                file_name=f"specs/feature_{n}.spec",
                tags=[f"area-{n % 3}"],
                scenarios=[
                    Scenario(heading=Heading(f"Case {n}.{m}", line_no=10 + m), steps=[Step(f"step {m}")])
                    for m in range(5)
                ],
            )
            for n in range(20)
        ]
    )
    config.max_workers = 8

    stats = initialize(specs, config)

    assert stats.total == 120
    assert stats.indexed == 120
    assert stats.doc_count == 120


def test_empty_collection(config):
    stats = initialize(SpecCollection(), config)

    assert stats.total == 0
    assert stats.doc_count == 0


def test_duplicate_ids_in_one_pass_are_skipped(config, caplog):
    spec = Specification(
        heading=Heading("Duplicates"),
        file_name="specs/dup.spec",
        scenarios=[
            Scenario(heading=Heading("First", line_no=4), steps=[Step("a")]),
            Scenario(heading=Heading("Second", line_no=4), steps=[Step("b")]),
        ],
    )

    with caplog.at_level(logging.ERROR):
        stats = initialize(SpecCollection([spec]), config)

    ids = _stored_ids(config.index_path)
    assert ids == ["specs/dup.spec", "specs/dup.spec:4"]
    assert stats.indexed == 2
    assert stats.skipped == 1
    assert "Duplicate document id specs/dup.spec:4" in caplog.text
