"""
Wiretap capture handler: one observed network response in, cache updates out.
"""
from __future__ import annotations

import logging

from powerup_api.core.cache import MergeCache
from powerup_api.core.preferences import ProjectPreferences
from powerup_api.core.routing import route_payload
from powerup_api.core.taxonomy import MAX_DEPTH
from powerup_api.schemas.capture import CaptureRequest, CaptureResult
from powerup_api.schemas.records import EntityKind

logger = logging.getLogger(__name__)


async def handle_capture(
    cache: MergeCache,
    preferences: ProjectPreferences,
    capture: CaptureRequest,
    max_depth: int = MAX_DEPTH,
) -> CaptureResult:
    """
    Route a captured payload and merge what it contains.

    Unrecognised or empty payloads return saved=False; storage failures
    propagate to the caller.
    """
    ids = capture.ids
    project_id = ids.project_id
    if not project_id:
        logger.debug("No project ID on capture, skipping")
        return CaptureResult(saved=False)

    if ids.company_id or ids.drawing_area_id:
        await preferences.touch_project(
            project_id,
            companyId=ids.company_id,
            drawingAreaId=ids.drawing_area_id,
        )

    routed = route_payload(capture.payload, capture.source, max_depth=max_depth)
    if routed.is_empty:
        return CaptureResult(saved=False)

    if routed.kind is EntityKind.UNKNOWN:
        # discipline listing endpoint
        await cache.merge_taxonomy(project_id, "discipline", routed.disciplines)
        count = len(routed.disciplines)
        logger.info(f"Saved {count} disciplines for project {project_id}")
        return CaptureResult(saved=True, type="disciplines", count=count)

    await cache.merge(project_id, routed.kind, routed.records)
    if routed.disciplines:
        await cache.merge_taxonomy(project_id, "discipline", routed.disciplines)
    if routed.divisions:
        await cache.merge_taxonomy(project_id, "division", routed.divisions)

    count = len(routed.records)
    logger.info(f"Saved {count} {routed.kind.value}s from {capture.source[:100]} to project {project_id}")
    return CaptureResult(saved=True, type=routed.kind.namespace, count=count)
