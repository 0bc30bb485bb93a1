"""Floorplan service — business logic for floorplan CRUD."""

from __future__ import annotations

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from configurator.bom.repository import BomEntryRepository
from configurator.models.floorplan import Floorplan
from configurator.placements.store import PlacementStore
from configurator.schemas.floorplan import FloorplanCreate


class FloorplanService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, data: FloorplanCreate) -> Floorplan:
        floorplan = Floorplan(
            name=data.name,
            project_id=data.project_id,
            image_path=data.image_path,
            sort_order=data.sort_order,
        )
        self.db.add(floorplan)
        await self.db.flush()
        return floorplan

    async def get_by_id(self, floorplan_id: int) -> Floorplan:
        floorplan = await self.db.get(Floorplan, floorplan_id)
        if not floorplan:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Floorplan {floorplan_id} not found",
            )
        return floorplan

    async def list_all(
        self, project_id: int | None = None, offset: int = 0, limit: int = 50
    ) -> tuple[list[Floorplan], int]:
        filters = []
        if project_id is not None:
            filters.append(Floorplan.project_id == project_id)

        count_stmt = select(func.count()).select_from(Floorplan).where(*filters)
        total = (await self.db.execute(count_stmt)).scalar() or 0

        stmt = (
            select(Floorplan)
            .where(*filters)
            .order_by(Floorplan.sort_order, Floorplan.id)
            .offset(offset)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total

    async def delete(self, floorplan_id: int) -> None:
        """Delete a floorplan with its placements and BOM."""
        floorplan = await self.get_by_id(floorplan_id)
        await PlacementStore(self.db).delete_by_floorplan(floorplan_id)
        await BomEntryRepository(self.db).delete_by_floorplan(floorplan_id)
        await self.db.delete(floorplan)
        await self.db.flush()
