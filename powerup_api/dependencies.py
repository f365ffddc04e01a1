# powerup_api/dependencies.py
"""
DI helpers shared by routers/*. Everything hangs off app.state, built once
in create_app().
"""
from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from powerup_api.core.cache import MergeCache
from powerup_api.core.preferences import ProjectPreferences
from powerup_api.schemas.records import RECORD_MODELS, EntityKind
from powerup_api.settings import Settings


def get_cache(request: Request) -> MergeCache:
    return request.app.state.cache


def get_preferences(request: Request) -> ProjectPreferences:
    return request.app.state.preferences


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def resolve_kind(kind: str) -> EntityKind:
    """Path segment (drawings/rfis/...) -> EntityKind, 404 for anything else."""
    try:
        entity = EntityKind.from_namespace(kind)
    except ValueError:
        entity = None
    if entity not in RECORD_MODELS:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown record type '{kind}'",
        )
    return entity


Cache = Annotated[MergeCache, Depends(get_cache)]
Preferences = Annotated[ProjectPreferences, Depends(get_preferences)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
