"""
Flattens the specification -> scenario tree into independent documents.

Every function here is a pure transform of its inputs: nothing is cached and
the source objects are never mutated, so the builders can be called from any
number of worker threads at once.
"""

from __future__ import annotations

from pathlib import Path, PurePath
from typing import Iterable, Optional, Set

from .errors import DocumentBuildError
from .models import Scenario, ScenarioDocument, SpecDocument, Specification


def spec_identifier(spec: Specification, project_root: Path) -> str:
    """
    Path of the spec file relative to the project root, in posix form so the
    id is stable across platforms.
    """
    spec_path = Path(spec.file_name)
    root = Path(project_root)
    if not spec_path.is_absolute():
        spec_path = root / spec_path
    try:
        relative = spec_path.resolve().relative_to(root.resolve())
    except ValueError as exc:
        raise DocumentBuildError(
            f"Unable to get relative path for {spec.file_name} under {project_root}"
        ) from exc
    return PurePath(relative).as_posix()


def scenario_identifier(spec_id: str, scenario: Scenario) -> str:
    return f"{spec_id}:{scenario.heading.line_no}"


def _tag_set(tags: Optional[Iterable[str]]) -> Set[str]:
    # Tags end up in a comma separated keyword field.
    cleaned = set()
    for tag in tags or []:
        value = str(tag).strip()
        if not value:
            continue
        if "," in value:
            raise DocumentBuildError(f"Tag {value!r} must not contain a comma")
        cleaned.add(value)
    return cleaned


def build_spec_document(spec: Specification, project_root: Path) -> SpecDocument:
    return SpecDocument(
        id=spec_identifier(spec, project_root),
        heading=spec.heading.value,
        context_steps=[step.line_text for step in spec.contexts],
        comments=[comment.value for comment in spec.comments],
        tags=_tag_set(spec.tags),
    )


def build_scenario_document(scenario: Scenario, spec_id: str) -> ScenarioDocument:
    return ScenarioDocument(
        id=scenario_identifier(spec_id, scenario),
        heading=scenario.heading.value,
        steps=[step.line_text for step in scenario.steps],
        comments=[comment.value for comment in scenario.comments],
        tags=_tag_set(scenario.tags),
    )
