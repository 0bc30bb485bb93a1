"""BOM Builder — turns placements into persisted BOM entries.

Every (floorplan, variant) pair owns at most one main entry. The first
placement of a pair creates it, copying name, model number, price and
picture from the catalog, and expands the item's required add-ons into
child entries. Later placements of the same pair reuse the entry as-is.

Concurrent first placements are serialized by the partial unique index on
``bom_entries(floorplan_id, variant_id) WHERE parent_entry_id IS NULL``:
the loser's insert fails inside a SAVEPOINT and it rereads the winner's row.
If the winner has rolled back in the meantime, the insert is tried once more.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from configurator.bom.repository import BomEntryRepository
from configurator.catalog.store import CatalogStore
from configurator.errors import Conflict, InvalidOperation, ReferenceNotFound
from configurator.models.bom import BomEntry
from configurator.placements.store import PlacementStore
from configurator.schemas.catalog import ResolvedVariant

logger = logging.getLogger(__name__)

CREATE_ATTEMPTS = 2


def catalog_snapshot(resolved: ResolvedVariant) -> dict:
    """Snapshot column values for a variant as the catalog has it now.

    The item's base model number wins over the variant's style name.
    """
    item, variant = resolved.item, resolved.variant
    return {
        "name_snapshot": item.name,
        "model_number_snapshot": item.base_model_number or variant.style_name,
        "style_name_snapshot": variant.style_name,
        "price_snapshot": variant.price,
        "picture_path": variant.image_path,
    }


class BomBuilder:
    def __init__(
        self,
        db: AsyncSession,
        catalog: CatalogStore | None = None,
        entries: BomEntryRepository | None = None,
        placements: PlacementStore | None = None,
    ):
        self.db = db
        self.catalog = catalog or CatalogStore(db)
        self.entries = entries or BomEntryRepository(db)
        self.placements = placements or PlacementStore(db)

    async def materialize_for_placement(self, floorplan_id: int, variant_id: int) -> int:
        """Return the id of the main entry a new placement should link to.

        Raises ReferenceNotFound if the variant or its item is gone; nothing
        is written in that case.
        """
        resolved = await self.catalog.resolve_variant(variant_id)

        existing = await self.entries.find_main(floorplan_id, variant_id)
        if existing is not None:
            logger.debug(
                "Reusing BOM entry %s for variant %s on floorplan %s",
                existing.id, variant_id, floorplan_id,
            )
            return existing.id

        for attempt in range(1, CREATE_ATTEMPTS + 1):
            try:
                main = await self._create_main_entry(floorplan_id, resolved)
                break
            except Conflict:
                winner = await self.entries.find_main(floorplan_id, variant_id)
                if winner is not None:
                    logger.info(
                        "Lost creation race for variant %s on floorplan %s; reusing %s",
                        variant_id, floorplan_id, winner.id,
                    )
                    return winner.id
                if attempt == CREATE_ATTEMPTS:
                    raise
                # The winner rolled back after blocking our insert
                logger.warning(
                    "Conflicting BOM entry for variant %s on floorplan %s is gone; "
                    "retrying insert",
                    variant_id, floorplan_id,
                )

        await self._expand_required_addons(main, resolved.item.id)
        logger.info(
            "Created BOM entry %s (%s) for variant %s on floorplan %s",
            main.id, main.name_snapshot, variant_id, floorplan_id,
        )
        return main.id

    async def switch_variant(self, entry_id: int, new_variant_id: int) -> BomEntry:
        """Point a main entry at another variant.

        Snapshots are refreshed from the catalog, the add-on children are
        rebuilt for the new variant's item, and the floorplan's placements of
        the old variant follow the entry.
        """
        entry = await self.entries.find_by_id(entry_id)
        if entry is None:
            raise ReferenceNotFound("bom_entry", entry_id)
        if not entry.is_main:
            raise InvalidOperation(
                f"BOM entry {entry_id} is an add-on; switch its main entry instead",
                details={"entry_id": entry_id, "parent_entry_id": entry.parent_entry_id},
            )
        if entry.variant_id == new_variant_id:
            return entry

        resolved = await self.catalog.resolve_variant(new_variant_id)
        if await self.entries.find_main(entry.floorplan_id, new_variant_id) is not None:
            raise Conflict(entry.floorplan_id, new_variant_id)

        old_variant_id = entry.variant_id
        try:
            async with self.db.begin_nested():
                entry.variant_id = new_variant_id
                entry.item_id = resolved.item.id
                await self.entries.apply_snapshot(entry, catalog_snapshot(resolved))
        except IntegrityError as exc:
            raise Conflict(entry.floorplan_id, new_variant_id) from exc

        await self.entries.delete_children(entry.id)
        await self._expand_required_addons(entry, resolved.item.id)
        await self.placements.reassign_variant(
            entry.floorplan_id, old_variant_id, new_variant_id, entry.id
        )
        logger.info(
            "Switched BOM entry %s from variant %s to %s",
            entry.id, old_variant_id, new_variant_id,
        )
        return entry

    # ─── Internal Helpers ───

    async def _create_main_entry(
        self, floorplan_id: int, resolved: ResolvedVariant
    ) -> BomEntry:
        try:
            async with self.db.begin_nested():
                return await self.entries.create(
                    floorplan_id=floorplan_id,
                    item_id=resolved.item.id,
                    variant_id=resolved.variant.id,
                    **catalog_snapshot(resolved),
                )
        except IntegrityError as exc:
            raise Conflict(floorplan_id, resolved.variant.id) from exc

    async def _expand_required_addons(self, main: BomEntry, item_id: int) -> None:
        """Create one child entry per required add-on of the item.

        An add-on that cannot be resolved is skipped; the main entry stays.
        """
        for addon in await self.catalog.get_required_addons(item_id):
            if addon.addon_variant_id is None:
                logger.warning(
                    "Skipping required add-on item %s of item %s: no active variant",
                    addon.addon_item_id, item_id,
                )
                continue
            try:
                resolved = await self.catalog.resolve_variant(addon.addon_variant_id)
            except ReferenceNotFound as exc:
                logger.warning(
                    "Skipping required add-on item %s of item %s: %s",
                    addon.addon_item_id, item_id, exc.message,
                )
                continue

            child = await self.entries.create(
                floorplan_id=main.floorplan_id,
                item_id=resolved.item.id,
                variant_id=resolved.variant.id,
                parent_entry_id=main.id,
                **catalog_snapshot(resolved),
            )
            logger.debug(
                "Added add-on %s (slot %s) under BOM entry %s",
                child.name_snapshot, addon.slot_number, main.id,
            )
