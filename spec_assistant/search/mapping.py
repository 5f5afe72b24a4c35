from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple, Union

from whoosh.analysis import StemmingAnalyzer
from whoosh.fields import ID, KEYWORD, STORED, TEXT, FieldType, Schema

from .errors import DocumentRejectedError, IncompatibleIndexError
from .models import DocumentType, ScenarioDocument, SpecDocument

Document = Union[SpecDocument, ScenarioDocument]

ID_FIELD = "id"
TYPE_FIELD = "doc_type"

TEXT_KIND = "text"
KEYWORD_KIND = "keyword"
STORED_KIND = "stored"
ID_KIND = "id"

_KIND_TYPES = {
    TEXT_KIND: TEXT,
    KEYWORD_KIND: KEYWORD,
    STORED_KIND: STORED,
    ID_KIND: ID,
}


@dataclass(frozen=True)
class DocumentMapping:
    text_fields: Tuple[str, ...] = ("heading",)
    keyword_fields: Tuple[str, ...] = ("tags",)
    stored_fields: Tuple[str, ...] = ()

    def kinds(self) -> Dict[str, str]:
        out = {name: TEXT_KIND for name in self.text_fields}
        out.update({name: KEYWORD_KIND for name in self.keyword_fields})
        out.update({name: STORED_KIND for name in self.stored_fields})
        return out


def _default_documents() -> Dict[str, DocumentMapping]:
    return {
        DocumentType.SPEC.value: DocumentMapping(stored_fields=("context_steps", "comments")),
        DocumentType.SCENARIO.value: DocumentMapping(stored_fields=("steps", "comments")),
    }


@dataclass(frozen=True)
class IndexMapping:
    """
    Per document type field policy. Free-text fields are tokenized and stemmed,
    keyword fields are matched exactly, stored fields are kept for display only.
    """

    documents: Dict[str, DocumentMapping] = field(default_factory=_default_documents)

    def field_kinds(self) -> Dict[str, str]:
        kinds: Dict[str, str] = {ID_FIELD: ID_KIND, TYPE_FIELD: ID_KIND}
        for doc_type, doc_mapping in self.documents.items():
            for name, kind in doc_mapping.kinds().items():
                existing = kinds.get(name)
                if existing and existing != kind:
                    raise ValueError(
                        f"Field {name!r} of {doc_type!r} is mapped as {kind} but already declared as {existing}"
                    )
                kinds[name] = kind
        return kinds

    def text_fields(self) -> List[str]:
        return [name for name, kind in self.field_kinds().items() if kind == TEXT_KIND]

    def keyword_fields(self) -> List[str]:
        return [name for name, kind in self.field_kinds().items() if kind == KEYWORD_KIND]

    def build_schema(self) -> Schema:
        schema = Schema(
            id=ID(stored=True, unique=True),
            doc_type=ID(stored=True),
        )
        for name, kind in self.field_kinds().items():
            if name in (ID_FIELD, TYPE_FIELD):
                continue
            schema.add(name, _field_for(kind))
        return schema

    def check_compatible(self, schema: Schema) -> None:
        problems = []
        for name, kind in self.field_kinds().items():
            if name not in schema:
                problems.append(f"missing field {name!r}")
                continue
            expected = _KIND_TYPES[kind]
            if not isinstance(schema[name], expected):
                problems.append(f"field {name!r} is {type(schema[name]).__name__}, expected {expected.__name__}")
        if problems:
            raise IncompatibleIndexError("Index mapping mismatch: " + "; ".join(problems))

    def encode(self, document: Document) -> Dict[str, Any]:
        """
        Turn a document into the keyword arguments for `update_document`.
        Values are validated here so a bad document never reaches the writer.
        """
        doc_type = DocumentType(document.doc_type).value
        doc_mapping = self.documents.get(doc_type)
        if doc_mapping is None:
            raise DocumentRejectedError(f"No mapping declared for document type {doc_type!r}")
        if not isinstance(document.id, str) or not document.id:
            raise DocumentRejectedError(f"Document of type {doc_type!r} has no id")

        fields: Dict[str, Any] = {ID_FIELD: document.id, TYPE_FIELD: doc_type}
        for name in doc_mapping.text_fields:
            value = getattr(document, name, "")
            if not isinstance(value, str):
                raise DocumentRejectedError(f"{document.id}: field {name!r} must be text")
            fields[name] = value
        for name in doc_mapping.keyword_fields:
            values = getattr(document, name, None) or set()
            if any(not isinstance(v, str) or "," in v for v in values):
                raise DocumentRejectedError(f"{document.id}: field {name!r} holds an invalid keyword")
            fields[name] = ",".join(sorted(values))
        for name in doc_mapping.stored_fields:
            fields[name] = list(getattr(document, name, None) or [])
        return fields


def _field_for(kind: str) -> FieldType:
    if kind == TEXT_KIND:
        return TEXT(analyzer=StemmingAnalyzer(), stored=True)
    if kind == KEYWORD_KIND:
        return KEYWORD(stored=True, commas=True, lowercase=False, scorable=True)
    if kind == STORED_KIND:
        return STORED()
    return ID(stored=True)


DEFAULT_MAPPING = IndexMapping()


def split_keywords(value: Any) -> List[str]:
    if not value:
        return []
    return [part for part in str(value).split(",") if part]
