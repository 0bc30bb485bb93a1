"""Floorplan router — CRUD endpoints for floorplans."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from configurator.db.session import get_db
from configurator.services.floorplan_service import FloorplanService
from configurator.schemas.floorplan import FloorplanCreate, FloorplanResponse

router = APIRouter()


def _get_service(db: AsyncSession = Depends(get_db)) -> FloorplanService:
    return FloorplanService(db)


@router.post("/", response_model=FloorplanResponse, status_code=201)
async def create_floorplan(
    data: FloorplanCreate,
    service: FloorplanService = Depends(_get_service),
):
    """Register a floorplan image."""
    floorplan = await service.create(data)
    return FloorplanResponse.model_validate(floorplan)


@router.get("/", response_model=list[FloorplanResponse])
async def list_floorplans(
    project_id: int | None = Query(None),
    offset: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    service: FloorplanService = Depends(_get_service),
):
    """List floorplans, optionally for one project."""
    floorplans, _ = await service.list_all(
        project_id=project_id, offset=offset, limit=limit
    )
    return [FloorplanResponse.model_validate(f) for f in floorplans]


@router.get("/{floorplan_id}", response_model=FloorplanResponse)
async def get_floorplan(
    floorplan_id: int,
    service: FloorplanService = Depends(_get_service),
):
    floorplan = await service.get_by_id(floorplan_id)
    return FloorplanResponse.model_validate(floorplan)


@router.delete("/{floorplan_id}", status_code=204)
async def delete_floorplan(
    floorplan_id: int,
    service: FloorplanService = Depends(_get_service),
):
    """Delete a floorplan, its placements and its BOM."""
    await service.delete(floorplan_id)
