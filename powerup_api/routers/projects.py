# powerup_api/routers/projects.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query, status

from powerup_api.core.search import group_specifications
from powerup_api.dependencies import Cache, Preferences, resolve_kind
from powerup_api.schemas.records import EntityKind, Project, ProjectCache
from powerup_api.schemas.search import SpecificationGroup

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=List[Project])
async def list_projects(preferences: Preferences):
    """Known projects, most recently accessed first."""
    return await preferences.list_projects()


# ========== Taxonomy / snapshots ==========
# Registered before /{project_id}/{kind} so these paths are not read as kinds.


@router.get("/{project_id}/disciplines")
async def get_disciplines(project_id: str, cache: Cache) -> Dict[str, Any]:
    return await cache.get_taxonomy(project_id, "discipline")


@router.get("/{project_id}/divisions")
async def get_divisions(project_id: str, cache: Cache) -> Dict[str, Any]:
    return await cache.get_taxonomy(project_id, "division")


@router.get("/{project_id}/cache", response_model=ProjectCache)
async def get_project_cache(project_id: str, cache: Cache, preferences: Preferences):
    """Drawings + discipline map in one round trip (command palette warm-up)."""
    project = await preferences.get_project(project_id)
    snapshot = await cache.project_cache(project_id, project)
    if snapshot is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No drawings cached for project {project_id}",
        )
    return snapshot


@router.get("/{project_id}/specifications/grouped", response_model=List[SpecificationGroup])
async def get_grouped_specifications(
    project_id: str,
    cache: Cache,
    q: Optional[str] = Query(None, description="Substring filter on number/title"),
):
    specifications = await cache.get_models(project_id, EntityKind.SPECIFICATION)
    division_map = await cache.get_taxonomy(project_id, "division")
    return group_specifications(specifications, division_map, q or "")


@router.get("/{project_id}/{kind}")
async def get_records(project_id: str, kind: str, cache: Cache) -> List[Dict[str, Any]]:
    """Stored records of one type, in capture order."""
    return await cache.get(project_id, resolve_kind(kind))


# ========== Housekeeping ==========


@router.delete("/{project_id}/data", status_code=status.HTTP_204_NO_CONTENT)
async def clear_project_data(project_id: str, cache: Cache):
    """Drop cached records and taxonomy; preferences and the project row stay."""
    await cache.clear_project(project_id)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(project_id: str, cache: Cache, preferences: Preferences):
    await preferences.delete_project(project_id, cache)
