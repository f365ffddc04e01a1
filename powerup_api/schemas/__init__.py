"""
Pydantic schemas for normalized records and API request/response validation.
"""
from .records import (
    RECORD_MODELS,
    RFI,
    UNKNOWN_SORT_INDEX,
    CapturedRecord,
    Commitment,
    DisciplineEntry,
    DisciplineMap,
    DivisionEntry,
    DivisionMap,
    Drawing,
    EntityKind,
    Project,
    ProjectCache,
    Specification,
    StatusColor,
)
from .capture import CaptureHeaders, CaptureIds, CaptureRequest, CaptureResult, ScanResult
from .favorites import FavoriteFolder, FavoritesData, FolderCreate, FolderDrawing
from .search import (
    DrawingHit,
    RecentAdd,
    RFIHit,
    SearchItem,
    SearchResponse,
    SpecificationGroup,
    StatusColorUpdate,
)

__all__ = [
    "RECORD_MODELS",
    "RFI",
    "UNKNOWN_SORT_INDEX",
    "CapturedRecord",
    "CaptureHeaders",
    "CaptureIds",
    "CaptureRequest",
    "CaptureResult",
    "Commitment",
    "DisciplineEntry",
    "DisciplineMap",
    "DivisionEntry",
    "DivisionMap",
    "Drawing",
    "DrawingHit",
    "EntityKind",
    "FavoriteFolder",
    "FavoritesData",
    "FolderCreate",
    "FolderDrawing",
    "Project",
    "ProjectCache",
    "RecentAdd",
    "RFIHit",
    "ScanResult",
    "SearchItem",
    "SearchResponse",
    "Specification",
    "SpecificationGroup",
    "StatusColor",
    "StatusColorUpdate",
]
