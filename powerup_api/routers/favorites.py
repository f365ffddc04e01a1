# powerup_api/routers/favorites.py
"""
Recents, favorite folders and status colors. All keyed by drawing number.
"""
from __future__ import annotations

from typing import Dict, List

from fastapi import APIRouter, HTTPException, status

from powerup_api.dependencies import Preferences
from powerup_api.schemas.favorites import FavoriteFolder, FavoritesData, FolderCreate, FolderDrawing
from powerup_api.schemas.search import RecentAdd, StatusColorUpdate

router = APIRouter(prefix="/projects", tags=["favorites"])


def _folder_not_found(folder_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Folder {folder_id} not found",
    )


# ========== Recents ==========


@router.get("/{project_id}/recents", response_model=List[str])
async def get_recents(project_id: str, preferences: Preferences):
    return await preferences.get_recents(project_id)


@router.post("/{project_id}/recents", response_model=List[str])
async def add_recent(project_id: str, body: RecentAdd, preferences: Preferences):
    return await preferences.add_recent(project_id, body.num)


# ========== Favorites ==========


@router.get("/{project_id}/favorites", response_model=FavoritesData)
async def get_favorites(project_id: str, preferences: Preferences):
    return await preferences.get_favorites(project_id)


@router.post("/{project_id}/favorites/folders", response_model=FavoriteFolder, status_code=status.HTTP_201_CREATED)
async def create_folder(project_id: str, body: FolderCreate, preferences: Preferences):
    return await preferences.add_folder(project_id, body.name)


@router.delete("/{project_id}/favorites/folders/{folder_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_folder(project_id: str, folder_id: int, preferences: Preferences):
    if not await preferences.remove_folder(project_id, folder_id):
        raise _folder_not_found(folder_id)


@router.post("/{project_id}/favorites/folders/{folder_id}/drawings", response_model=FavoritesData)
async def add_drawing_to_folder(project_id: str, folder_id: int, body: FolderDrawing, preferences: Preferences):
    """Idempotent: adding a drawing already in the folder is not an error."""
    favorites = await preferences.get_favorites(project_id)
    if not any(f.id == folder_id for f in favorites.folders):
        raise _folder_not_found(folder_id)
    await preferences.add_drawing_to_folder(project_id, folder_id, body.num)
    return await preferences.get_favorites(project_id)


@router.delete("/{project_id}/favorites/folders/{folder_id}/drawings/{num}", response_model=FavoritesData)
async def remove_drawing_from_folder(project_id: str, folder_id: int, num: str, preferences: Preferences):
    if not await preferences.remove_drawing_from_folder(project_id, folder_id, num):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Drawing {num} is not in folder {folder_id}",
        )
    return await preferences.get_favorites(project_id)


# ========== Status colors ==========


@router.get("/{project_id}/status-colors", response_model=Dict[str, str])
async def get_status_colors(project_id: str, preferences: Preferences):
    return await preferences.get_status_colors(project_id)


@router.put("/{project_id}/status-colors/{num}", response_model=Dict[str, str])
async def set_status_color(project_id: str, num: str, body: StatusColorUpdate, preferences: Preferences):
    try:
        return await preferences.set_status_color(project_id, num, body.color)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid status color '{body.color}'",
        )
