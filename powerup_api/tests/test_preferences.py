"""
Tests for projects, recents, favorites and status colors.

Run with: pytest powerup_api/tests/test_preferences.py -v
"""
import asyncio

import pytest

from powerup_api.schemas.records import Drawing, EntityKind

PROJECT = "42"


class TestProjects:
    def test_touch_project_keeps_known_ids(self, preferences):
        async def run():
            await preferences.touch_project(PROJECT, companyId="8", drawingAreaId="7")
            return await preferences.touch_project(PROJECT, companyId=None, drawingAreaId="")

        project = asyncio.run(run())
        assert project["id"] == PROJECT
        assert project["companyId"] == "8"
        assert project["drawingAreaId"] == "7"
        assert project["lastAccessed"] > 0

    def test_list_projects_most_recent_first(self, preferences, store):
        async def run():
            await store.set("projects", "1", {"id": "1", "lastAccessed": 100})
            await store.set("projects", "2", {"id": "2", "lastAccessed": 300})
            await store.set("projects", "3", {"id": "3", "lastAccessed": 200})
            return await preferences.list_projects()

        assert [p["id"] for p in asyncio.run(run())] == ["2", "3", "1"]


class TestRecents:
    """Most-recent-first, deduplicated, capped at 5."""

    def test_add_moves_to_front(self, preferences):
        async def run():
            for num in ("A-1", "A-2", "A-3", "A-1"):
                await preferences.add_recent(PROJECT, num)
            return await preferences.get_recents(PROJECT)

        assert asyncio.run(run()) == ["A-1", "A-3", "A-2"]

    def test_capped(self, preferences):
        async def run():
            for i in range(8):
                await preferences.add_recent(PROJECT, f"A-{i}")
            return await preferences.get_recents(PROJECT)

        assert asyncio.run(run()) == ["A-7", "A-6", "A-5", "A-4", "A-3"]

    def test_empty_num_ignored(self, preferences):
        assert asyncio.run(preferences.add_recent(PROJECT, "")) == []


class TestFavorites:
    def test_folder_lifecycle(self, preferences):
        async def run():
            folder = await preferences.add_folder(PROJECT, "  Level 1  ")
            added = [
                await preferences.add_drawing_to_folder(PROJECT, folder.id, num)
                for num in ("A-10", "A-2", "A-2", "a-1")
            ]
            favorites = await preferences.get_favorites(PROJECT)
            return folder, added, favorites

        folder, added, favorites = asyncio.run(run())
        assert folder.name == "Level 1"
        assert added == [True, True, False, True]
        assert favorites.folders[0].drawings == ["a-1", "A-2", "A-10"]

    def test_folder_ids_are_unique(self, preferences):
        async def run():
            first = await preferences.add_folder(PROJECT, "One")
            second = await preferences.add_folder(PROJECT, "Two")
            return first.id, second.id

        first, second = asyncio.run(run())
        assert first != second

    def test_remove(self, preferences):
        async def run():
            folder = await preferences.add_folder(PROJECT, "One")
            await preferences.add_drawing_to_folder(PROJECT, folder.id, "A-1")
            removed_drawing = await preferences.remove_drawing_from_folder(PROJECT, folder.id, "A-1")
            missing_drawing = await preferences.remove_drawing_from_folder(PROJECT, folder.id, "A-1")
            removed_folder = await preferences.remove_folder(PROJECT, folder.id)
            missing_folder = await preferences.remove_folder(PROJECT, folder.id)
            return removed_drawing, missing_drawing, removed_folder, missing_folder

        assert asyncio.run(run()) == (True, False, True, False)

    def test_favorite_drawings_across_folders(self, preferences):
        async def run():
            one = await preferences.add_folder(PROJECT, "One")
            two = await preferences.add_folder(PROJECT, "Two")
            await preferences.add_drawing_to_folder(PROJECT, one.id, "A-1")
            await preferences.add_drawing_to_folder(PROJECT, two.id, "M-1")
            await preferences.add_drawing_to_folder(PROJECT, two.id, "A-1")
            return await preferences.favorite_drawings(PROJECT)

        assert asyncio.run(run()) == {"A-1", "M-1"}

    def test_no_project(self, preferences):
        with pytest.raises(ValueError):
            asyncio.run(preferences.add_folder("", "One"))


class TestStatusColors:
    def test_set_and_clear(self, preferences):
        async def run():
            await preferences.set_status_color(PROJECT, "A-1", "green")
            await preferences.set_status_color(PROJECT, "A-2", "red")
            return await preferences.set_status_color(PROJECT, "A-1", None)

        assert asyncio.run(run()) == {"A-2": "red"}

    def test_invalid_color(self, preferences):
        with pytest.raises(ValueError):
            asyncio.run(preferences.set_status_color(PROJECT, "A-1", "purple"))


class TestDeleteProject:
    def test_removes_everything(self, preferences, cache, store):
        async def run():
            await preferences.touch_project(PROJECT, companyId="8")
            await preferences.add_recent(PROJECT, "A-1")
            await preferences.set_status_color(PROJECT, "A-1", "blue")
            await cache.merge(PROJECT, EntityKind.DRAWING, [Drawing(id=1, num="A-1")])
            await preferences.delete_project(PROJECT, cache)
            return [await store.keys(ns) for ns in ("projects", "recents", "status_colors", "drawings")]

        assert asyncio.run(run()) == [[], [], [], []]
