# powerup_api/schemas/records.py
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class EntityKind(str, Enum):
    """Business record types the capture pipeline knows how to store."""
    DRAWING = "drawing"
    RFI = "rfi"
    COMMITMENT = "commitment"
    SPECIFICATION = "specification"
    UNKNOWN = "unknown"

    @property
    def namespace(self) -> str:
        """Storage namespace holding the per-project list for this kind."""
        if self is EntityKind.UNKNOWN:
            raise ValueError("unknown records are never stored")
        return f"{self.value}s"

    @classmethod
    def from_namespace(cls, name: str) -> "EntityKind":
        """Accept 'drawings' / 'drawing' style names (used by the routers)."""
        value = (name or "").strip().lower()
        if value.endswith("s"):
            value = value[:-1]
        kind = cls(value)
        if kind is cls.UNKNOWN:
            raise ValueError(name)
        return kind


UNKNOWN_SORT_INDEX = 9999


class CapturedRecord(BaseModel):
    """Base for normalized records. Stored form drops undefined fields."""

    model_config = ConfigDict(populate_by_name=True)

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Drawing(CapturedRecord):
    id: int
    num: str = Field(..., description="Human-facing drawing number; secondary key for favorites/recents")
    title: str = ""
    discipline: Optional[int] = Field(None, description="Discipline taxonomy id")
    discipline_name: Optional[str] = None


class RFI(CapturedRecord):
    id: int
    number: str = ""
    subject: str = ""
    status: str = "unknown"
    created_at: str = ""
    due_date: Optional[str] = None
    assignee: Optional[str] = None
    ball_in_court: Optional[str] = None


class Commitment(CapturedRecord):
    id: int
    number: str = ""
    title: str = ""
    vendor: Optional[str] = None
    vendor_name: Optional[str] = None
    status: Optional[str] = None
    contract_date: Optional[str] = None
    type: Optional[str] = None
    # None means "unknown"; 0.0 is a real "no cost" value
    approved_amount: Optional[float] = None
    pending_amount: Optional[float] = None
    draft_amount: Optional[float] = None


class Specification(CapturedRecord):
    id: int
    number: str = ""
    title: str = ""
    division_id: Optional[str] = Field(None, alias="divisionId")


RECORD_MODELS = {
    EntityKind.DRAWING: Drawing,
    EntityKind.RFI: RFI,
    EntityKind.COMMITMENT: Commitment,
    EntityKind.SPECIFICATION: Specification,
}


# ============ Taxonomy ============


class DisciplineEntry(BaseModel):
    name: str
    index: int = UNKNOWN_SORT_INDEX


class DivisionEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    display_name: str = Field(..., alias="displayName")
    index: int = UNKNOWN_SORT_INDEX


# Stored / wire form: {"<taxonomy id>": {"name": ..., "index": ...}}
DisciplineMap = Dict[str, Dict[str, Any]]
# {"<taxonomy id>": {"displayName": ..., "index": ...}}
DivisionMap = Dict[str, Dict[str, Any]]


# ============ Projects ============


class StatusColor(str, Enum):
    GREEN = "green"
    RED = "red"
    YELLOW = "yellow"
    BLUE = "blue"
    ORANGE = "orange"
    PINK = "pink"


class Project(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    company_id: Optional[str] = Field(None, alias="companyId")
    name: Optional[str] = None
    drawing_area_id: Optional[str] = Field(None, alias="drawingAreaId")
    last_accessed: int = Field(0, alias="lastAccessed", description="Epoch milliseconds")


class ProjectCache(BaseModel):
    """Drawings + discipline map snapshot handed to the command palette."""
    model_config = ConfigDict(populate_by_name=True)

    project_id: str = Field(..., alias="projectId")
    company_id: Optional[str] = Field(None, alias="companyId")
    drawing_area_id: Optional[str] = Field(None, alias="drawingAreaId")
    timestamp: int
    drawings: List[Drawing]
    discipline_map: DisciplineMap = Field(default_factory=dict, alias="disciplineMap")
