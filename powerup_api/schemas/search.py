# powerup_api/schemas/search.py
from __future__ import annotations

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

from .records import RFI, Drawing, Specification


class DrawingHit(BaseModel):
    type: Literal["drawing"] = "drawing"
    group: str
    data: Drawing
    discipline: str
    is_favorite: bool = False
    is_recent: bool = False


class RFIHit(BaseModel):
    type: Literal["rfi"] = "rfi"
    group: str
    data: RFI


SearchItem = Union[DrawingHit, RFIHit]


class SearchResponse(BaseModel):
    query: str
    mode: str
    count: int
    results: List[SearchItem] = Field(default_factory=list)


class SpecificationGroup(BaseModel):
    division_id: str
    display_name: str
    sort_index: int
    specifications: List[Specification]


class RecentAdd(BaseModel):
    num: str = Field(..., min_length=1, description="Drawing number opened by the user")


class StatusColorUpdate(BaseModel):
    color: Optional[str] = Field(None, description="green/red/yellow/blue/orange/pink, or null to clear")
