# powerup_api/schemas/capture.py
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class CaptureIds(BaseModel):
    """Ids the wiretap parsed out of the host page URL."""
    model_config = ConfigDict(populate_by_name=True)

    company_id: Optional[str] = Field(None, alias="companyId")
    project_id: Optional[str] = Field(None, alias="projectId")
    drawing_area_id: Optional[str] = Field(None, alias="drawingAreaId")


class CaptureHeaders(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: Optional[str] = None
    per_page: Optional[str] = Field(None, alias="perPage")


class CaptureRequest(BaseModel):
    """
    One passively observed network response.

    `payload` is whatever JSON the host application returned; no envelope
    schema is imposed on it.
    """
    model_config = ConfigDict(populate_by_name=True)

    payload: Any = None
    source: str = Field("", description="URL that produced the payload")
    ids: CaptureIds = Field(default_factory=CaptureIds)
    headers: CaptureHeaders = Field(default_factory=CaptureHeaders)


class CaptureResult(BaseModel):
    saved: bool
    type: Optional[str] = Field(None, description="drawings / rfis / commitments / specifications / disciplines")
    count: Optional[int] = None


class ScanResult(BaseModel):
    success: bool
    count: Optional[int] = None
    error: Optional[str] = None
