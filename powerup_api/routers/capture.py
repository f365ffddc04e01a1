# powerup_api/routers/capture.py
from __future__ import annotations

import logging

from fastapi import APIRouter, status

from powerup_api.core.capture import handle_capture
from powerup_api.dependencies import AppSettings, Cache, Preferences
from powerup_api.schemas.capture import CaptureRequest, CaptureResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/capture", tags=["capture"])


@router.post("", response_model=CaptureResult, status_code=status.HTTP_200_OK)
async def capture(body: CaptureRequest, cache: Cache, preferences: Preferences, settings: AppSettings):
    """
    Wiretap entry point: the content script forwards every JSON response it
    observes on the host page. Unrecognised payloads come back saved=false.
    """
    return await handle_capture(cache, preferences, body, max_depth=settings.taxonomy_max_depth)
