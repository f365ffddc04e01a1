"""
Background scans: pull a whole register through ProcoreScanner and merge it
into the cache exactly like captured records.
"""
from __future__ import annotations

import logging
from typing import Optional

import httpx

from powerup_api.core.cache import MergeCache
from powerup_api.core.preferences import ProjectPreferences
from powerup_api.core.scanner import ProcoreScanner
from powerup_api.schemas.capture import ScanResult
from powerup_api.schemas.records import EntityKind

logger = logging.getLogger(__name__)


async def _resolve_drawing_area(
    preferences: ProjectPreferences,
    scanner: ProcoreScanner,
    project_id: str,
) -> Optional[str]:
    project = await preferences.get_project(project_id) or {}
    if project.get("drawingAreaId"):
        return str(project["drawingAreaId"])

    areas = await scanner.fetch_drawing_areas(project_id)
    if not areas:
        return None
    area_id = str(areas[0]["id"])
    await preferences.touch_project(project_id, drawingAreaId=area_id)
    logger.info(f"Using drawing area {area_id} for project {project_id}")
    return area_id


async def scan_drawings(
    cache: MergeCache,
    preferences: ProjectPreferences,
    scanner: ProcoreScanner,
    project_id: str,
    drawing_area_id: Optional[str] = None,
    disciplines_only: bool = False,
) -> ScanResult:
    """
    Disciplines are always refreshed; drawings unless `disciplines_only`.
    Count is the number of drawings (or disciplines) fetched.
    """
    try:
        area_id = drawing_area_id or await _resolve_drawing_area(preferences, scanner, project_id)
        if not area_id:
            return ScanResult(success=False, error="No drawing area found")

        disciplines = await scanner.fetch_disciplines(project_id, area_id)
        if disciplines:
            await cache.merge_taxonomy(project_id, "discipline", disciplines)

        if disciplines_only:
            return ScanResult(success=True, count=len(disciplines))

        drawings = await scanner.fetch_drawings(project_id, area_id)
        await cache.merge(project_id, EntityKind.DRAWING, drawings)
        return ScanResult(success=True, count=len(drawings))
    except httpx.HTTPError as e:
        logger.error(f"Drawing scan failed for project {project_id}: {e}")
        return ScanResult(success=False, error=str(e))


async def scan_rfis(cache: MergeCache, scanner: ProcoreScanner, project_id: str) -> ScanResult:
    try:
        rfis = await scanner.fetch_rfis(project_id)
        await cache.merge(project_id, EntityKind.RFI, rfis)
        return ScanResult(success=True, count=len(rfis))
    except httpx.HTTPError as e:
        logger.error(f"RFI scan failed for project {project_id}: {e}")
        return ScanResult(success=False, error=str(e))


async def scan_commitments(cache: MergeCache, scanner: ProcoreScanner, project_id: str) -> ScanResult:
    try:
        commitments = await scanner.fetch_commitments(project_id)
        await cache.merge(project_id, EntityKind.COMMITMENT, commitments)
        return ScanResult(success=True, count=len(commitments))
    except httpx.HTTPError as e:
        logger.error(f"Commitment scan failed for project {project_id}: {e}")
        return ScanResult(success=False, error=str(e))
