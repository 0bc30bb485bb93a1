"""Pydantic schemas for floorplan and placement CRUD operations."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


# ─── Request Schemas ───


class FloorplanCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    project_id: int | None = None
    image_path: str | None = Field(None, max_length=500)
    sort_order: int = 0


class PlacementCreate(BaseModel):
    floorplan_id: int = Field(..., gt=0)
    variant_id: int = Field(..., gt=0)
    x: float
    y: float
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)


class PlacementUpdate(BaseModel):
    """Move or resize. Never touches the BOM."""

    x: float | None = None
    y: float | None = None
    width: float | None = Field(None, gt=0)
    height: float | None = Field(None, gt=0)


class PlacementBulkResize(BaseModel):
    floorplan_id: int = Field(..., gt=0)
    item_id: int = Field(..., gt=0)
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)


# ─── Response Schemas ───


class FloorplanResponse(BaseModel):
    id: int
    project_id: int | None
    name: str
    image_path: str | None
    sort_order: int
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class PlacementResponse(BaseModel):
    id: int
    floorplan_id: int
    variant_id: int
    bom_entry_id: int | None
    x: float
    y: float
    width: float
    height: float
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class PlacementListResponse(BaseModel):
    placements: list[PlacementResponse]
    total: int
