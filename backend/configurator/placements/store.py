"""Placement Store — spatial placements on floorplans."""

from __future__ import annotations

from sqlalchemy import select, update, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from configurator.errors import upstream
from configurator.models.catalog import ItemVariant
from configurator.models.floorplan import Placement


class PlacementStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_placements(self, floorplan_id: int) -> list[Placement]:
        stmt = (
            select(Placement)
            .where(Placement.floorplan_id == floorplan_id)
            .order_by(Placement.id)
        )
        with upstream("placement store"):
            result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get(self, placement_id: int) -> Placement | None:
        with upstream("placement store"):
            return await self.db.get(Placement, placement_id)

    async def count_for_variant(self, floorplan_id: int, variant_id: int) -> int:
        stmt = select(func.count()).where(
            Placement.floorplan_id == floorplan_id,
            Placement.variant_id == variant_id,
        )
        with upstream("placement store"):
            return (await self.db.execute(stmt)).scalar() or 0

    async def create(
        self,
        floorplan_id: int,
        variant_id: int,
        bom_entry_id: int,
        x: float,
        y: float,
        width: float,
        height: float,
    ) -> Placement:
        placement = Placement(
            floorplan_id=floorplan_id,
            variant_id=variant_id,
            bom_entry_id=bom_entry_id,
            x=x,
            y=y,
            width=width,
            height=height,
        )
        self.db.add(placement)
        with upstream("placement store"):
            await self.db.flush()
        return placement

    async def delete(self, placement: Placement) -> None:
        await self.db.delete(placement)
        with upstream("placement store"):
            await self.db.flush()

    async def reassign_variant(
        self,
        floorplan_id: int,
        old_variant_id: int,
        new_variant_id: int,
        bom_entry_id: int,
    ) -> None:
        stmt = (
            update(Placement)
            .where(
                Placement.floorplan_id == floorplan_id,
                Placement.variant_id == old_variant_id,
            )
            .values(variant_id=new_variant_id, bom_entry_id=bom_entry_id)
        )
        with upstream("placement store"):
            await self.db.execute(stmt)

    async def delete_for_variant(self, floorplan_id: int, variant_id: int) -> int:
        stmt = delete(Placement).where(
            Placement.floorplan_id == floorplan_id,
            Placement.variant_id == variant_id,
        )
        with upstream("placement store"):
            result = await self.db.execute(stmt)
        return result.rowcount or 0

    async def delete_by_floorplan(self, floorplan_id: int) -> None:
        with upstream("placement store"):
            await self.db.execute(
                delete(Placement).where(Placement.floorplan_id == floorplan_id)
            )

    async def resize_for_item(
        self, floorplan_id: int, item_id: int, width: float, height: float
    ) -> int:
        """Give every placement of an item's variants the same size."""
        variant_ids = select(ItemVariant.id).where(ItemVariant.item_id == item_id)
        stmt = (
            update(Placement)
            .where(
                Placement.floorplan_id == floorplan_id,
                Placement.variant_id.in_(variant_ids),
            )
            .values(width=width, height=height)
            .execution_options(synchronize_session="fetch")
        )
        with upstream("placement store"):
            result = await self.db.execute(stmt)
        return result.rowcount or 0
