from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ConfigurationError
from .mapping import DEFAULT_MAPPING, IndexMapping

DOT_GAUGE = ".gauge"
INDEX_FILE = "gauge.idx"


@dataclass
class SearchConfig:
    project_root: Path
    max_workers: int = 8
    facet_size: int = 5
    result_limit: int = 10
    mapping: IndexMapping = field(default_factory=lambda: DEFAULT_MAPPING)

    def __post_init__(self):
        self.project_root = Path(self.project_root)

    @property
    def index_path(self) -> Path:
        return self.project_root / DOT_GAUGE / INDEX_FILE

    @classmethod
    def from_env(cls) -> "SearchConfig":
        return cls(
            project_root=Path(os.getenv("GAUGE_PROJECT_ROOT", os.getcwd())),
            max_workers=_positive_int_env("GAUGE_SEARCH_WORKERS", 8),
            result_limit=_positive_int_env("GAUGE_SEARCH_LIMIT", 10),
        )


def _positive_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc
    if value < 1:
        raise ConfigurationError(f"{name} must be at least 1, got {value}")
    return value
