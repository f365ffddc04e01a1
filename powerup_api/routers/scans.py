# powerup_api/routers/scans.py
from __future__ import annotations

import logging
from typing import Annotated, AsyncIterator, Optional

import httpx
from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status

from powerup_api.core.scanner import ProcoreScanner
from powerup_api.core.scans import scan_commitments, scan_drawings, scan_rfis
from powerup_api.dependencies import AppSettings, Cache, Preferences
from powerup_api.schemas.capture import ScanResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["scans"])


async def get_http_client(
    request: Request,
    x_procore_cookie: Optional[str] = Header(None, description="Session cookie for the host application"),
) -> AsyncIterator[httpx.AsyncClient]:
    """One client per scan request; auth is the caller's cookie, else SCAN_COOKIE."""
    settings = request.app.state.settings
    cookie = x_procore_cookie or settings.scan_cookie
    headers = {"Cookie": cookie} if cookie else {}
    async with httpx.AsyncClient(headers=headers, timeout=settings.scan_timeout_seconds) as client:
        yield client


HttpClient = Annotated[httpx.AsyncClient, Depends(get_http_client)]


def _scanner(client: httpx.AsyncClient, settings) -> ProcoreScanner:
    return ProcoreScanner(
        client,
        base_url=settings.procore_base_url,
        page_limit=settings.scan_page_limit,
        max_consecutive_errors=settings.scan_max_consecutive_errors,
    )


@router.post("/{project_id}/scan/{kind}", response_model=ScanResult)
async def run_scan(
    project_id: str,
    kind: str,
    cache: Cache,
    preferences: Preferences,
    settings: AppSettings,
    client: HttpClient,
    drawing_area_id: Optional[str] = Query(None, alias="drawingAreaId"),
    disciplines_only: bool = Query(False, alias="disciplinesOnly"),
):
    """
    Pull a whole register from the host API and merge it into the cache.
    Upstream failures are reported as success=false, not as HTTP errors.
    """
    scanner = _scanner(client, settings)
    logger.info(f"📝 Scanning {kind} for project {project_id}")

    if kind == "drawings":
        return await scan_drawings(
            cache,
            preferences,
            scanner,
            project_id,
            drawing_area_id=drawing_area_id,
            disciplines_only=disciplines_only,
        )
    if kind == "rfis":
        return await scan_rfis(cache, scanner, project_id)
    if kind == "commitments":
        return await scan_commitments(cache, scanner, project_id)

    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"No scan available for '{kind}'",
    )
