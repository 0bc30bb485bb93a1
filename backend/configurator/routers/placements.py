"""Placement router — items placed on floorplans."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from configurator.db.session import get_db
from configurator.services.placement_service import PlacementService
from configurator.schemas.floorplan import (
    PlacementBulkResize,
    PlacementCreate,
    PlacementListResponse,
    PlacementResponse,
    PlacementUpdate,
)

router = APIRouter()


def _get_service(db: AsyncSession = Depends(get_db)) -> PlacementService:
    return PlacementService(db)


@router.post("/", response_model=PlacementResponse, status_code=201)
async def create_placement(
    data: PlacementCreate,
    service: PlacementService = Depends(_get_service),
):
    """Place a catalog variant. Creates the BOM entry on first use."""
    placement = await service.create(data)
    return PlacementResponse.model_validate(placement)


@router.get("/", response_model=PlacementListResponse)
async def list_placements(
    floorplan_id: int = Query(..., gt=0),
    service: PlacementService = Depends(_get_service),
):
    placements = await service.list_by_floorplan(floorplan_id)
    return PlacementListResponse(
        placements=[PlacementResponse.model_validate(p) for p in placements],
        total=len(placements),
    )


@router.post("/bulk-resize")
async def bulk_resize_placements(
    data: PlacementBulkResize,
    service: PlacementService = Depends(_get_service),
):
    """Resize every placement of an item on a floorplan."""
    updated = await service.bulk_resize(data)
    return {"updated": updated}


@router.get("/{placement_id}", response_model=PlacementResponse)
async def get_placement(
    placement_id: int,
    service: PlacementService = Depends(_get_service),
):
    placement = await service.get_by_id(placement_id)
    return PlacementResponse.model_validate(placement)


@router.patch("/{placement_id}", response_model=PlacementResponse)
async def update_placement(
    placement_id: int,
    data: PlacementUpdate,
    service: PlacementService = Depends(_get_service),
):
    """Move or resize a placement."""
    placement = await service.update(placement_id, data)
    return PlacementResponse.model_validate(placement)


@router.delete("/{placement_id}", status_code=204)
async def delete_placement(
    placement_id: int,
    service: PlacementService = Depends(_get_service),
):
    """Remove a placement. Its BOM entry is kept unless pruning is enabled."""
    await service.delete(placement_id)
