from __future__ import annotations

from functools import lru_cache

from spec_assistant.search import SearchConfig


@lru_cache(maxsize=1)
def get_config() -> SearchConfig:
    return SearchConfig.from_env()
