import pytest
from whoosh import query

from spec_assistant.search import (
    Heading,
    IndexNotFoundError,
    QueryEngine,
    Scenario,
    SpecCollection,
    Specification,
    initialize,
    open_existing,
    search,
)


@pytest.fixture
def indexed(specs, config):
    initialize(specs, config)
    return config


def test_match_on_heading(indexed):
    result = search("login", indexed)

    ids = {hit.id for hit in result.hits}
    assert ids == {"specs/login.spec", "specs/login.spec:5", "specs/login.spec:12"}
    assert result.total == 3
    assert all(hit.score > 0 for hit in result.hits)
    for hit in result.hits:
        assert "<mark" in hit.highlights["heading"]


def test_hits_carry_type_and_tags(indexed):
    result = search("successful", indexed)

    assert len(result.hits) == 1
    hit = result.hits[0]
    assert hit.id == "specs/login.spec:5"
    assert hit.doc_type == "scenario"
    assert hit.tags == ["smoke-test"]


def test_stemmed_match(indexed):
    ids = {hit.id for hit in search("passwords", indexed).hits}

    assert ids == {"specs/login.spec:12", "specs/login.spec:20"}


def test_tag_facets_top_values(indexed):
    result = search("login", indexed)

    assert result.tag_facets == {"auth": 2, "smoke-test": 2, "negative": 1}
    assert list(result.tag_facets) == ["auth", "smoke-test", "negative"]


def test_tags_are_not_free_text(indexed):
    result = search("smoke", indexed)

    assert result.hits == []
    assert result.tag_facets == {}


def test_exact_tag_filter(indexed):
    result = search("login", indexed, tag="smoke-test")

    assert {hit.id for hit in result.hits} == {"specs/login.spec", "specs/login.spec:5"}
    assert result.tag_facets["smoke-test"] == 2
    assert search("login", indexed, tag="smoke").hits == []


def test_no_match_is_empty_result(indexed):
    result = search("zebra", indexed)

    assert result.total == 0
    assert result.hits == []
    assert result.tag_facets == {}


def test_facet_limited_to_five(config):
    spec = Specification(
        heading=Heading("Inventory report"),
        file_name="specs/inventory.spec",
        tags=[f"tag-{n}" for n in range(8)],
    )
    initialize(SpecCollection([spec]), config)

    result = search("inventory", config)

    assert len(result.tag_facets) == 5
    assert list(result.tag_facets) == ["tag-0", "tag-1", "tag-2", "tag-3", "tag-4"]


def test_result_limit(indexed):
    assert len(search("login", indexed, limit=1).hits) == 1


def test_search_without_index(config):
    with pytest.raises(IndexNotFoundError):
        search("login", config)
    assert not config.index_path.exists()


def test_stop_words_only_builds_null_query(indexed):
    with open_existing(indexed.index_path) as handle:
        engine = QueryEngine(handle)
        assert engine.build_query("the") == query.NullQuery
        assert engine.search("the").hits == []


def test_untagged_match_does_not_break_facets(indexed):
    # "Password reset email" has no tags and ties with the tags of the other match.
    result = search("passwords", indexed)

    assert result.total == 2
    assert result.tag_facets == {"auth": 1, "negative": 1}


def test_untagged_spec_alongside_tagged_scenario(config):
    spec = Specification(
        heading=Heading("Billing overview"),
        file_name="specs/billing.spec",
        scenarios=[Scenario(heading=Heading("Billing refund", line_no=4), tags=["finance"])],
    )
    initialize(SpecCollection([spec]), config)

    result = search("billing", config)

    assert {hit.id for hit in result.hits} == {"specs/billing.spec", "specs/billing.spec:4"}
    assert result.tag_facets == {"finance": 1}


def test_limit_keeps_facets_over_all_matches(indexed):
    result = search("login", indexed, limit=2)

    assert len(result.hits) == 2
    assert result.total == 3
    assert result.tag_facets == {"auth": 2, "smoke-test": 2, "negative": 1}
