"""
Headless scanning of the host application's REST API.

The wiretap only sees what the user scrolls through; a scan walks the
paginated endpoints directly. Authentication is whatever cookie/header the
caller put on the httpx client.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx

from powerup_api.core.normalize import normalize_many
from powerup_api.core.routing import find_record_array
from powerup_api.core.taxonomy import disciplines_from_list
from powerup_api.schemas.records import RFI, Commitment, DisciplineMap, Drawing, EntityKind

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://app.procore.com"
DRAWINGS_PER_PAGE = 500
RFIS_PER_PAGE = 100
COMMITMENTS_PER_PAGE = 100
COMMITMENT_PAGE_LIMIT = 50

ProgressCallback = Callable[[int, Optional[int]], None]

_PROJECT_RE = (re.compile(r"projects/(\d+)"), re.compile(r"/(\d+)/project"))
_AREA_RE = (re.compile(r"areas/(\d+)"), re.compile(r"drawing_areas/(\d+)"))
_COMPANY_RE = (re.compile(r"companies/(\d+)"),)


def _first_match(patterns, url: str) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(url or "")
        if match:
            return match.group(1)
    return None


def parse_project_url(url: str) -> Dict[str, Optional[str]]:
    """Company / project / drawing-area ids embedded in a host page URL."""
    return {
        "companyId": _first_match(_COMPANY_RE, url),
        "projectId": _first_match(_PROJECT_RE, url),
        "drawingAreaId": _first_match(_AREA_RE, url),
    }


def _header_int(headers: httpx.Headers, *names: str) -> Optional[int]:
    for name in names:
        value = headers.get(name)
        if value:
            try:
                return int(value)
            except ValueError:
                return None
    return None


class ProcoreScanner:
    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str = DEFAULT_BASE_URL,
        page_limit: int = 100,
        max_consecutive_errors: int = 3,
    ):
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.page_limit = page_limit
        self.max_consecutive_errors = max_consecutive_errors

    async def fetch_json(self, url: str) -> Any:
        logger.debug(f"Fetching {url}")
        response = await self.client.get(url, headers={"Accept": "application/json"})
        response.raise_for_status()
        return response.json()

    async def fetch_paginated(self, url: str) -> Tuple[List[Any], Optional[int], Optional[int]]:
        """(records, total, per_page) for one page; totals come from response headers."""
        response = await self.client.get(url, headers={"Accept": "application/json"})
        response.raise_for_status()
        # httpx headers are case-insensitive
        total = _header_int(response.headers, "total")
        per_page = _header_int(response.headers, "per-page")
        return find_record_array(response.json()), total, per_page

    async def _walk_pages(
        self,
        url_for_page: Callable[[int], str],
        kind: EntityKind,
        per_page: int,
        page_limit: int,
        on_progress: Optional[ProgressCallback] = None,
        stop_on_error: bool = False,
    ) -> List[Any]:
        """
        Page until a short/empty page, the page limit, or too many
        consecutive errors (or the first error with stop_on_error).
        """
        collected: List[Any] = []
        page = 1
        consecutive_errors = 0

        while page <= page_limit:
            try:
                items, total, _ = await self.fetch_paginated(url_for_page(page))
            except (httpx.HTTPError, ValueError) as e:
                consecutive_errors += 1
                logger.warning(f"Error on {kind.value} page {page}: {e}")
                if stop_on_error or consecutive_errors >= self.max_consecutive_errors:
                    logger.error(f"Stopping {kind.value} scan after {consecutive_errors} consecutive errors")
                    break
                continue

            consecutive_errors = 0
            records = normalize_many(kind, items)
            collected.extend(records)
            if on_progress:
                on_progress(len(collected), total)

            if len(records) < per_page:
                break
            page += 1
        else:
            logger.warning(f"Hit page limit ({page_limit}) scanning {kind.value}s")

        return collected

    # ============ Drawings ============

    async def fetch_drawings(
        self,
        project_id: str,
        drawing_area_id: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[Drawing]:
        base = f"{self.base_url}/rest/v1.1/projects/{project_id}/drawing_areas/{drawing_area_id}/drawing_log"
        drawings = await self._walk_pages(
            lambda page: f"{base}?page={page}&per_page={DRAWINGS_PER_PAGE}",
            EntityKind.DRAWING,
            DRAWINGS_PER_PAGE,
            self.page_limit,
            on_progress,
        )
        logger.info(f"Scanned {len(drawings)} drawings for project {project_id}")
        return drawings

    async def fetch_disciplines(self, project_id: str, drawing_area_id: str) -> DisciplineMap:
        url = f"{self.base_url}/rest/v1.1/projects/{project_id}/drawing_areas/{drawing_area_id}/drawing_disciplines"
        try:
            data = await self.fetch_json(url)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error fetching disciplines: {e}")
            return {}
        return disciplines_from_list(find_record_array(data))

    async def fetch_drawing_areas(self, project_id: str) -> List[Dict[str, Any]]:
        url = f"{self.base_url}/rest/v1.1/projects/{project_id}/drawing_areas"
        try:
            data = await self.fetch_json(url)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error fetching drawing areas: {e}")
            return []
        return [a for a in find_record_array(data) if isinstance(a, dict) and a.get("id")]

    # ============ RFIs ============

    async def fetch_rfis(self, project_id: str, on_progress: Optional[ProgressCallback] = None) -> List[RFI]:
        base = f"{self.base_url}/rest/v1.0/projects/{project_id}/rfis"
        return await self._walk_pages(
            lambda page: f"{base}?page={page}&per_page={RFIS_PER_PAGE}",
            EntityKind.RFI,
            RFIS_PER_PAGE,
            self.page_limit,
            on_progress,
        )

    # ============ Commitments ============

    async def fetch_commitments(self, project_id: str) -> List[Commitment]:
        endpoints = [
            f"/rest/v1.0/projects/{project_id}/commitments",
            f"/rest/v1.0/projects/{project_id}/purchase_order_contracts",
            f"/rest/v1.0/projects/{project_id}/work_order_contracts",
        ]
        collected: List[Commitment] = []
        for endpoint in endpoints:
            base = f"{self.base_url}{endpoint}"
            collected.extend(
                await self._walk_pages(
                    lambda page, base=base: f"{base}?page={page}&per_page={COMMITMENTS_PER_PAGE}",
                    EntityKind.COMMITMENT,
                    COMMITMENTS_PER_PAGE,
                    COMMITMENT_PAGE_LIMIT,
                    stop_on_error=True,
                )
            )

        # same contract shows up under /commitments and its typed endpoint
        seen = set()
        unique = []
        for commitment in collected:
            if commitment.id in seen:
                continue
            seen.add(commitment.id)
            unique.append(commitment)
        return unique
