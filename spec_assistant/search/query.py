from __future__ import annotations

import logging
from typing import Dict, List, Optional

from whoosh import highlight, query, sorting

from .errors import SearchError
from .mapping import TYPE_FIELD, split_keywords
from .models import SearchHit, SearchResult
from .store import IndexHandle

logger = logging.getLogger(__name__)


class QueryEngine:
    """
    Runs a plain match query over the free-text fields of an open index and
    collects highlighted fragments plus the most frequent tags among matches.
    The query text is analyzed, never parsed: there is no query syntax.
    """

    def __init__(self, handle: IndexHandle, facet_size: int = 5, limit: int = 10):
        self.handle = handle
        self.facet_size = facet_size
        self.limit = limit
        self.text_fields = handle.mapping.text_fields()
        keyword_fields = handle.mapping.keyword_fields()
        self.facet_field = "tags" if "tags" in keyword_fields else (keyword_fields[0] if keyword_fields else None)

    def build_query(self, text: str) -> query.Query:
        schema = self.handle.schema
        terms = []
        for fieldname in self.text_fields:
            for token in schema[fieldname].process_text(text, mode="query"):
                terms.append(query.Term(fieldname, token))
        if not terms:
            return query.NullQuery
        return query.Or(terms)

    def search(self, text: str, tag: Optional[str] = None, limit: Optional[int] = None) -> SearchResult:
        q = self.build_query(text)
        tag_filter = query.Term(self.facet_field, tag) if tag and self.facet_field else None
        groupedby = None
        if self.facet_field:
            groupedby = {
                self.facet_field: sorting.FieldFacet(self.facet_field, allow_overlap=True, maptype=sorting.Count)
            }
        limit = limit or self.limit
        try:
            with self.handle.ix.searcher() as searcher:
                results = searcher.search(
                    q,
                    limit=limit,
                    filter=tag_filter,
                    groupedby=groupedby,
                    terms=True,
                )
                results.formatter = highlight.HtmlFormatter(tagname="mark")
                # Iterating grouped results yields every match, so slice to the limit.
                hits = [self._to_hit(hit) for hit in results[:limit]]
                facets = self._top_facets(results)
                return SearchResult(
                    query=text,
                    total=len(results),
                    hits=hits,
                    tag_facets=facets,
                    runtime=results.runtime,
                )
        except Exception as exc:  # noqa: BLE001
            raise SearchError(f"Error searching {text!r}: {exc}") from exc

    def _to_hit(self, hit) -> SearchHit:
        fields = hit.fields()
        highlights: Dict[str, str] = {}
        for fieldname in self.text_fields:
            fragment = hit.highlights(fieldname)
            if fragment:
                highlights[fieldname] = fragment
        return SearchHit(
            id=fields.get("id"),
            doc_type=fields.get(TYPE_FIELD),
            score=hit.score,
            heading=fields.get("heading", ""),
            tags=split_keywords(fields.get(self.facet_field)) if self.facet_field else [],
            highlights=highlights,
        )

    def _top_facets(self, results) -> Dict[str, int]:
        if not self.facet_field or self.facet_field not in results.facet_names():
            return {}
        # Untagged matches land in a None bucket.
        counts = {tag: count for tag, count in results.groups(self.facet_field).items() if tag}
        ranked: List = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
        return dict(ranked[: self.facet_size])
