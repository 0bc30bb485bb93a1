"""BOM service — entry point for the BOM engine used by the API layer.

Wires builder, aggregator and reconciler onto one session so a request is a
single unit of work.
"""

from __future__ import annotations

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from configurator.bom.aggregator import BomAggregator
from configurator.bom.builder import BomBuilder
from configurator.bom.export import bom_to_csv
from configurator.bom.reconciler import CatalogReconciler
from configurator.bom.repository import BomEntryRepository
from configurator.catalog.store import CatalogStore
from configurator.config import Settings, get_settings
from configurator.errors import ReferenceNotFound
from configurator.models.bom import BomEntry
from configurator.placements.store import PlacementStore
from configurator.schemas.bom import ChangeReport, FloorplanBom

logger = logging.getLogger(__name__)


class BomService:
    def __init__(self, db: AsyncSession, settings: Settings | None = None):
        self.db = db
        self.settings = settings or get_settings()
        self.entries = BomEntryRepository(db)
        self.placements = PlacementStore(db)
        catalog = CatalogStore(db)

        self.builder = BomBuilder(db, catalog, self.entries, self.placements)
        self.aggregator = BomAggregator(db, self.entries, self.placements)
        self.reconciler = CatalogReconciler(
            db, catalog, self.entries, self.placements
        )

    async def get_view(
        self, floorplan_id: int, include_empty: bool = False
    ) -> FloorplanBom:
        return await self.aggregator.build_view(floorplan_id, include_empty)

    async def export_csv(self, floorplan_id: int) -> str:
        view = await self.aggregator.build_view(floorplan_id)
        return bom_to_csv(view, currency=self.settings.bom_csv_currency_symbol)

    async def update_from_catalog(
        self, floorplan_id: int, cancel_event: asyncio.Event | None = None
    ) -> ChangeReport:
        return await self.reconciler.update_from_catalog(floorplan_id, cancel_event)

    async def get_entry(self, entry_id: int) -> BomEntry:
        entry = await self.entries.find_by_id(entry_id)
        if entry is None:
            raise ReferenceNotFound("bom_entry", entry_id)
        return entry

    async def delete_entry(self, floorplan_id: int, entry_id: int) -> None:
        """Drop a line item regardless of remaining placements.

        A main entry takes its add-ons and the placements that used it along.
        """
        entry = await self.entries.find_by_id(entry_id)
        if entry is None or entry.floorplan_id != floorplan_id:
            raise ReferenceNotFound("bom_entry", entry_id)

        if entry.is_main:
            removed = await self.placements.delete_for_variant(
                floorplan_id, entry.variant_id
            )
            logger.info(
                "Deleting BOM entry %s with %s placements", entry.id, removed
            )
        await self.entries.delete(entry)

    async def switch_variant(self, entry_id: int, variant_id: int) -> BomEntry:
        return await self.builder.switch_variant(entry_id, variant_id)
