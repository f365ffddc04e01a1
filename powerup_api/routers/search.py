# powerup_api/routers/search.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query

from powerup_api.core.search import parse_query, search
from powerup_api.dependencies import AppSettings, Cache, Preferences
from powerup_api.schemas.records import EntityKind
from powerup_api.schemas.search import SearchResponse

router = APIRouter(prefix="/projects", tags=["search"])


@router.get("/{project_id}/search", response_model=SearchResponse)
async def search_project(
    project_id: str,
    cache: Cache,
    preferences: Preferences,
    settings: AppSettings,
    q: Optional[str] = Query("", description="Palette query; ? RFIs, * favorites, @ discipline"),
):
    """
    Command palette search. Empty q returns the recent drawings, or all drawings when there are none.
    """
    drawings = await cache.get_models(project_id, EntityKind.DRAWING)
    rfis = await cache.get_models(project_id, EntityKind.RFI)
    discipline_map = await cache.get_taxonomy(project_id, "discipline")
    favorites = await preferences.favorite_drawings(project_id)
    recents = await preferences.get_recents(project_id)

    results = search(
        q,
        drawings,
        discipline_map,
        favorites,
        recents,
        rfis,
        limit=settings.search_result_limit,
    )
    return SearchResponse(
        query=q or "",
        mode=parse_query(q, has_recents=bool(recents)).mode,
        count=len(results),
        results=results,
    )
