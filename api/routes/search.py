from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Body, Depends, HTTPException, Query

from spec_assistant.search import (
    IndexNotFoundError,
    SearchConfig,
    SearchError,
    SearchSubsystemError,
    SpecCollection,
    initialize,
    search,
)
from api.dependencies import get_config

logger = logging.getLogger(__name__)

router = APIRouter(tags=["search"])


def _run_index(specs: SpecCollection, config: SearchConfig) -> None:
    try:
        stats = initialize(specs, config)
    except SearchSubsystemError as exc:
        logger.error("Unable to open index : %s. %s", config.index_path, exc)
        return
    logger.info("Indexed %d/%d documents", stats.indexed, stats.total)


@router.get("/search")
def search_specs(
    q: str = Query(..., min_length=1),
    tag: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1, le=100),
    config: SearchConfig = Depends(get_config),
):
    try:
        result = search(q, config, tag=tag, limit=limit)
    except IndexNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except SearchError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    except SearchSubsystemError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    return asdict(result)


@router.post("/index", status_code=202)
def index_specs(
    background_tasks: BackgroundTasks,
    payload: Dict[str, Any] = Body(...),
    config: SearchConfig = Depends(get_config),
):
    try:
        specs = SpecCollection.from_dict(payload)
    except (KeyError, TypeError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=f"Invalid spec collection: {exc}")
    background_tasks.add_task(_run_index, specs, config)
    return {
        "status": "queued",
        "specs": specs.size(),
        "documents": specs.size() + specs.scenario_count(),
        "index_path": str(config.index_path),
    }
