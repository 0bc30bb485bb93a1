"""Placement service — placing, moving and removing items on floorplans."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from configurator.bom.builder import BomBuilder
from configurator.config import Settings, get_settings
from configurator.models.floorplan import Placement
from configurator.placements.store import PlacementStore
from configurator.schemas.floorplan import (
    PlacementBulkResize,
    PlacementCreate,
    PlacementUpdate,
)
from configurator.services.floorplan_service import FloorplanService

logger = logging.getLogger(__name__)


class PlacementService:
    def __init__(self, db: AsyncSession, settings: Settings | None = None):
        self.db = db
        self.settings = settings or get_settings()
        self.store = PlacementStore(db)
        self.builder = BomBuilder(db, placements=self.store)

    async def create(self, data: PlacementCreate) -> Placement:
        """Place a variant and link it to its (possibly new) BOM entry."""
        await FloorplanService(self.db).get_by_id(data.floorplan_id)

        entry_id = await self.builder.materialize_for_placement(
            data.floorplan_id, data.variant_id
        )
        return await self.store.create(
            floorplan_id=data.floorplan_id,
            variant_id=data.variant_id,
            bom_entry_id=entry_id,
            x=data.x,
            y=data.y,
            width=data.width,
            height=data.height,
        )

    async def get_by_id(self, placement_id: int) -> Placement:
        placement = await self.store.get(placement_id)
        if not placement:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Placement {placement_id} not found",
            )
        return placement

    async def list_by_floorplan(self, floorplan_id: int) -> list[Placement]:
        return await self.store.list_placements(floorplan_id)

    async def update(self, placement_id: int, data: PlacementUpdate) -> Placement:
        placement = await self.get_by_id(placement_id)
        update_data = data.model_dump(exclude_unset=True, exclude_none=True)
        for field, value in update_data.items():
            setattr(placement, field, value)
        await self.db.flush()
        return placement

    async def bulk_resize(self, data: PlacementBulkResize) -> int:
        await FloorplanService(self.db).get_by_id(data.floorplan_id)
        return await self.store.resize_for_item(
            data.floorplan_id, data.item_id, data.width, data.height
        )

    async def delete(self, placement_id: int) -> None:
        placement = await self.get_by_id(placement_id)
        floorplan_id, variant_id = placement.floorplan_id, placement.variant_id
        await self.store.delete(placement)

        if not self.settings.prune_orphaned_bom_entries:
            return
        if await self.store.count_for_variant(floorplan_id, variant_id) > 0:
            return

        entry = await self.builder.entries.find_main(floorplan_id, variant_id)
        if entry is not None:
            logger.info(
                "Pruning BOM entry %s: last placement of variant %s removed",
                entry.id, variant_id,
            )
            await self.builder.entries.delete(entry)
