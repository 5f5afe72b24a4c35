from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Set


class DocumentType(str, Enum):
    SPEC = "spec"
    SCENARIO = "scenario"


@dataclass
class Heading:
    value: str
    line_no: int = 0


@dataclass
class Step:
    line_text: str
    line_no: int = 0


@dataclass
class Comment:
    value: str
    line_no: int = 0


@dataclass
class Scenario:
    heading: Heading
    steps: List[Step] = field(default_factory=list)
    comments: List[Comment] = field(default_factory=list)
    tags: Optional[List[str]] = None


@dataclass
class Specification:
    heading: Heading
    file_name: str
    contexts: List[Step] = field(default_factory=list)
    comments: List[Comment] = field(default_factory=list)
    tags: Optional[List[str]] = None
    scenarios: List[Scenario] = field(default_factory=list)


class SpecCollection:
    """
    Read-only view over a set of parsed specifications.
    """

    def __init__(self, specs: Optional[List[Specification]] = None):
        self._specs = list(specs or [])

    def size(self) -> int:
        return len(self._specs)

    def specs(self) -> List[Specification]:
        return list(self._specs)

    def scenario_count(self) -> int:
        return sum(len(spec.scenarios) for spec in self._specs)

    def __len__(self) -> int:
        return len(self._specs)

    def __iter__(self) -> Iterator[Specification]:
        return iter(self._specs)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "SpecCollection":
        """
        Build a collection from an already-parsed JSON dump:
        {"specs": [{"heading": {...}, "file_name": ..., "scenarios": [...]}, ...]}

        Raises ValueError when the payload does not have that shape.
        """
        if not isinstance(payload, dict):
            raise ValueError("Spec collection must be a JSON object")
        items = _list_of_dicts(payload.get("specs", []), "specs")
        return cls([_spec_from_dict(item) for item in items])


def _list_of_dicts(value: Any, name: str) -> List[Dict[str, Any]]:
    if not isinstance(value, list) or not all(isinstance(item, dict) for item in value):
        raise ValueError(f"{name!r} must be a list of objects")
    return value


def _scenario_heading_from(value: Any) -> Heading:
    # Scenario ids are keyed on the heading line, so it cannot be defaulted.
    if not isinstance(value, dict) or "line_no" not in value:
        raise ValueError(f"Scenario heading {value!r} has no line_no")
    return Heading(value=value.get("value", ""), line_no=int(value["line_no"]))


def _tags_from(value: Any) -> Optional[List[str]]:
    if value is None:
        return None
    if not isinstance(value, list):
        raise ValueError(f"Tags must be a list, got {value!r}")
    return [str(tag) for tag in value]


def _heading_from(value: Any) -> Heading:
    if isinstance(value, dict):
        return Heading(value=value.get("value", ""), line_no=int(value.get("line_no", 0)))
    return Heading(value=str(value or ""))


def _steps_from(items: List[Any]) -> List[Step]:
    steps: List[Step] = []
    for item in items or []:
        if isinstance(item, dict):
            steps.append(Step(line_text=item.get("line_text", ""), line_no=int(item.get("line_no", 0))))
        else:
            steps.append(Step(line_text=str(item)))
    return steps


def _comments_from(items: List[Any]) -> List[Comment]:
    comments: List[Comment] = []
    for item in items or []:
        if isinstance(item, dict):
            comments.append(Comment(value=item.get("value", ""), line_no=int(item.get("line_no", 0))))
        else:
            comments.append(Comment(value=str(item)))
    return comments


def _spec_from_dict(item: Dict[str, Any]) -> Specification:
    if not isinstance(item.get("file_name"), str):
        raise ValueError(f"Spec {item.get('heading')!r} has no file_name")
    scenarios = [
        Scenario(
            heading=_scenario_heading_from(scn.get("heading")),
            steps=_steps_from(scn.get("steps", [])),
            comments=_comments_from(scn.get("comments", [])),
            tags=_tags_from(scn.get("tags")),
        )
        for scn in _list_of_dicts(item.get("scenarios", []), "scenarios")
    ]
    return Specification(
        heading=_heading_from(item.get("heading")),
        file_name=item["file_name"],
        contexts=_steps_from(item.get("contexts", [])),
        comments=_comments_from(item.get("comments", [])),
        tags=_tags_from(item.get("tags")),
        scenarios=scenarios,
    )


@dataclass
class SpecDocument:
    id: str
    heading: str
    context_steps: List[str] = field(default_factory=list)
    comments: List[str] = field(default_factory=list)
    tags: Set[str] = field(default_factory=set)
    doc_type: DocumentType = DocumentType.SPEC


@dataclass
class ScenarioDocument:
    id: str
    heading: str
    steps: List[str] = field(default_factory=list)
    comments: List[str] = field(default_factory=list)
    tags: Set[str] = field(default_factory=set)
    doc_type: DocumentType = DocumentType.SCENARIO


@dataclass
class IndexStats:
    total: int
    indexed: int
    skipped: int
    doc_count: int
    index_path: str


@dataclass
class SearchHit:
    id: str
    doc_type: str
    score: float
    heading: str
    tags: List[str] = field(default_factory=list)
    highlights: Dict[str, str] = field(default_factory=dict)


@dataclass
class SearchResult:
    query: str
    total: int
    hits: List[SearchHit] = field(default_factory=list)
    tag_facets: Dict[str, int] = field(default_factory=dict)
    runtime: float = 0.0


def load_collection(path: Path) -> SpecCollection:
    with Path(path).open("r", encoding="utf-8") as f:
        return SpecCollection.from_dict(json.load(f))
