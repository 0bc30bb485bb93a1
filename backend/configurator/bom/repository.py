"""BOM Entry Repository — persistence for main and child BOM entries."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from configurator.models.bom import BomEntry

SNAPSHOT_FIELDS = (
    "name_snapshot",
    "model_number_snapshot",
    "style_name_snapshot",
    "price_snapshot",
    "picture_path",
)


class BomEntryRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_floorplan(self, floorplan_id: int) -> list[BomEntry]:
        """All entries of a floorplan, main and child, in creation order."""
        stmt = (
            select(BomEntry)
            .where(BomEntry.floorplan_id == floorplan_id)
            .order_by(BomEntry.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def find_by_id(self, entry_id: int) -> BomEntry | None:
        return await self.db.get(BomEntry, entry_id)

    async def find_main(self, floorplan_id: int, variant_id: int) -> BomEntry | None:
        stmt = select(BomEntry).where(
            BomEntry.floorplan_id == floorplan_id,
            BomEntry.variant_id == variant_id,
            BomEntry.parent_entry_id.is_(None),
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def find_children(self, parent_id: int) -> list[BomEntry]:
        stmt = (
            select(BomEntry)
            .where(BomEntry.parent_entry_id == parent_id)
            .order_by(BomEntry.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def create(
        self,
        *,
        floorplan_id: int,
        item_id: int,
        variant_id: int,
        name_snapshot: str,
        price_snapshot: Decimal,
        model_number_snapshot: str | None = None,
        style_name_snapshot: str | None = None,
        picture_path: str | None = None,
        parent_entry_id: int | None = None,
    ) -> BomEntry:
        entry = BomEntry(
            floorplan_id=floorplan_id,
            item_id=item_id,
            variant_id=variant_id,
            parent_entry_id=parent_entry_id,
            name_snapshot=name_snapshot,
            model_number_snapshot=model_number_snapshot,
            style_name_snapshot=style_name_snapshot,
            price_snapshot=price_snapshot,
            picture_path=picture_path,
        )
        self.db.add(entry)
        await self.db.flush()
        return entry

    async def apply_snapshot(self, entry: BomEntry, snapshot: dict) -> BomEntry:
        for field in SNAPSHOT_FIELDS:
            if field in snapshot:
                setattr(entry, field, snapshot[field])
        await self.db.flush()
        return entry

    async def delete_children(self, parent_id: int) -> None:
        await self.db.execute(
            delete(BomEntry).where(BomEntry.parent_entry_id == parent_id)
        )

    async def delete(self, entry: BomEntry) -> None:
        """Delete an entry together with its children."""
        await self.delete_children(entry.id)
        await self.db.delete(entry)
        await self.db.flush()

    async def delete_by_floorplan(self, floorplan_id: int) -> None:
        await self.db.execute(
            delete(BomEntry).where(
                BomEntry.floorplan_id == floorplan_id,
                BomEntry.parent_entry_id.is_not(None),
            )
        )
        await self.db.execute(
            delete(BomEntry).where(BomEntry.floorplan_id == floorplan_id)
        )
