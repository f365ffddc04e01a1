"""
Per-project user state that lives next to the record cache: project rows,
recents, favorite folders and drawing status colors.

All of it is keyed by drawing `num`, not by drawing id.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional, Set

from powerup_api.adapters.base import RecordStore
from powerup_api.core.cache import MergeCache
from powerup_api.core.sorting import natural_key
from powerup_api.schemas.favorites import FavoriteFolder, FavoritesData
from powerup_api.schemas.records import StatusColor

logger = logging.getLogger(__name__)

DEFAULT_RECENTS_LIMIT = 5


def _now_ms() -> int:
    return int(time.time() * 1000)


class ProjectPreferences:
    def __init__(self, store: RecordStore, recents_limit: int = DEFAULT_RECENTS_LIMIT):
        self.store = store
        self.recents_limit = recents_limit

    # ========== Projects ==========

    async def get_project(self, project_id: str) -> Optional[Dict[str, Any]]:
        if not project_id:
            return None
        return await self.store.get("projects", project_id)

    async def list_projects(self) -> List[Dict[str, Any]]:
        """All known projects, most recently accessed first."""
        projects = []
        for key in await self.store.keys("projects"):
            project = await self.store.get("projects", key)
            if project:
                projects.append(project)
        return sorted(projects, key=lambda p: p.get("lastAccessed") or 0, reverse=True)

    async def touch_project(self, project_id: str, **updates: Optional[str]) -> Dict[str, Any]:
        """
        Bump lastAccessed and record ids seen on the host page.

        Only non-empty values overwrite what is stored.
        """
        existing = await self.get_project(project_id) or {"id": project_id}
        for field, value in updates.items():
            if value:
                existing[field] = value
        existing["lastAccessed"] = _now_ms()
        await self.store.set("projects", project_id, existing)
        return existing

    # ========== Recents ==========

    async def get_recents(self, project_id: str) -> List[str]:
        if not project_id:
            return []
        return list(await self.store.get("recents", project_id) or [])

    async def add_recent(self, project_id: str, drawing_num: str) -> List[str]:
        """Move/insert `drawing_num` at the front, deduplicated, capped."""
        if not project_id or not drawing_num:
            return await self.get_recents(project_id)
        recents = [n for n in await self.get_recents(project_id) if n != drawing_num]
        updated = [drawing_num, *recents][: self.recents_limit]
        await self.store.set("recents", project_id, updated)
        return updated

    # ========== Favorites ==========

    async def get_favorites(self, project_id: str) -> FavoritesData:
        if not project_id:
            return FavoritesData()
        data = await self.store.get("favorites", project_id)
        if not data:
            return FavoritesData()
        favorites = FavoritesData.model_validate(data)
        for folder in favorites.folders:
            folder.drawings.sort(key=natural_key)
        return favorites

    async def save_favorites(self, project_id: str, favorites: FavoritesData) -> None:
        if not project_id:
            return
        await self.store.set("favorites", project_id, favorites.model_dump())

    async def add_folder(self, project_id: str, name: str) -> FavoriteFolder:
        if not project_id:
            raise ValueError("No project selected")
        favorites = await self.get_favorites(project_id)
        folder_id = _now_ms()
        # two folders created within the same millisecond
        while any(f.id == folder_id for f in favorites.folders):
            folder_id += 1
        folder = FavoriteFolder(id=folder_id, name=name.strip(), drawings=[])
        favorites.folders.append(folder)
        await self.save_favorites(project_id, favorites)
        return folder

    async def remove_folder(self, project_id: str, folder_id: int) -> bool:
        favorites = await self.get_favorites(project_id)
        remaining = [f for f in favorites.folders if f.id != folder_id]
        if len(remaining) == len(favorites.folders):
            return False
        favorites.folders = remaining
        await self.save_favorites(project_id, favorites)
        return True

    async def add_drawing_to_folder(self, project_id: str, folder_id: int, drawing_num: str) -> bool:
        """False when the folder is missing or already holds the drawing."""
        if not project_id:
            return False
        favorites = await self.get_favorites(project_id)
        folder = next((f for f in favorites.folders if f.id == folder_id), None)
        if folder is None or drawing_num in folder.drawings:
            return False
        folder.drawings.append(drawing_num)
        folder.drawings.sort(key=natural_key)
        await self.save_favorites(project_id, favorites)
        return True

    async def remove_drawing_from_folder(self, project_id: str, folder_id: int, drawing_num: str) -> bool:
        favorites = await self.get_favorites(project_id)
        folder = next((f for f in favorites.folders if f.id == folder_id), None)
        if folder is None or drawing_num not in folder.drawings:
            return False
        folder.drawings = [n for n in folder.drawings if n != drawing_num]
        await self.save_favorites(project_id, favorites)
        return True

    async def favorite_drawings(self, project_id: str) -> Set[str]:
        favorites = await self.get_favorites(project_id)
        return {num for folder in favorites.folders for num in folder.drawings}

    # ========== Status colors ==========

    async def get_status_colors(self, project_id: str) -> Dict[str, str]:
        if not project_id:
            return {}
        return dict(await self.store.get("status_colors", project_id) or {})

    async def set_status_color(self, project_id: str, drawing_num: str, color: Optional[str]) -> Dict[str, str]:
        """Set or clear (color=None) the status color of a drawing."""
        colors = await self.get_status_colors(project_id)
        if color:
            colors[drawing_num] = StatusColor(color).value
        else:
            colors.pop(drawing_num, None)
        await self.store.set("status_colors", project_id, colors)
        return colors

    # ========== Housekeeping ==========

    async def delete_project(self, project_id: str, cache: MergeCache) -> None:
        """Remove cached records, preferences and the project row itself."""
        if not project_id:
            return
        await cache.clear_project(project_id)
        for namespace in ("status_colors", "recents", "favorites", "projects"):
            await self.store.delete(namespace, project_id)
        logger.info(f"Deleted project {project_id}")
