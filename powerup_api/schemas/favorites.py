# powerup_api/schemas/favorites.py
from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field, field_validator


class FavoriteFolder(BaseModel):
    id: int = Field(..., description="Creation timestamp in milliseconds")
    name: str
    drawings: List[str] = Field(default_factory=list, description="Drawing numbers")


class FavoritesData(BaseModel):
    folders: List[FavoriteFolder] = Field(default_factory=list)


class FolderCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("folder name must not be blank")
        return v


class FolderDrawing(BaseModel):
    num: str = Field(..., min_length=1)
