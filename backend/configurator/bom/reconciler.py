"""Catalog Reconciler — "Update from Catalog" for a floorplan's BOM.

Walks every entry of the floorplan (main and child) in id order and
compares its quoted price with the live catalog:

  * price changed      → snapshot refreshed in place, reported as updated
  * price unchanged    → untouched, not reported
  * reference broken   → reported as invalid, snapshot kept as the last
                         known good quote; entries are never auto-deleted

Totals before and after are priced with the aggregator's arithmetic,
holding placement quantities fixed at the values read at the start.
"""

from __future__ import annotations

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from configurator.bom.aggregator import group_entries, quantities_by_variant
from configurator.bom.builder import catalog_snapshot
from configurator.bom.repository import BomEntryRepository
from configurator.catalog.store import CatalogStore
from configurator.errors import ReferenceNotFound
from configurator.models.bom import BomEntry
from configurator.placements.store import PlacementStore
from configurator.schemas.bom import (
    BomEntryResponse,
    ChangeReport,
    InvalidReason,
    InvalidReference,
    PriceUpdate,
)
from configurator.schemas.catalog import ResolvedVariant

logger = logging.getLogger(__name__)


class CatalogReconciler:
    def __init__(
        self,
        db: AsyncSession,
        catalog: CatalogStore | None = None,
        entries: BomEntryRepository | None = None,
        placements: PlacementStore | None = None,
    ):
        self.catalog = catalog or CatalogStore(db)
        self.entries = entries or BomEntryRepository(db)
        self.placements = placements or PlacementStore(db)

    async def update_from_catalog(
        self,
        floorplan_id: int,
        cancel_event: asyncio.Event | None = None,
    ) -> ChangeReport:
        """Re-sync snapshots with the catalog and report what changed.

        Entries created after the initial read are left for the next run.
        If ``cancel_event`` is set mid-run, no further catalog lookups are
        made; updates already applied stay and the report is flagged
        ``cancelled``.
        """
        entries = await self.entries.find_by_floorplan(floorplan_id)
        placements = await self.placements.list_placements(floorplan_id)
        quantities = quantities_by_variant(p.variant_id for p in placements)
        before = [BomEntryResponse.model_validate(e) for e in entries]

        report = ChangeReport(floorplan_id=floorplan_id)

        for entry in entries:
            if cancel_event is not None and cancel_event.is_set():
                report.cancelled = True
                logger.info(
                    "Catalog update of floorplan %s cancelled after %s updates",
                    floorplan_id, len(report.updated),
                )
                break

            resolved, reason = await self._resolve(entry)
            if reason is not None:
                report.invalid.append(
                    InvalidReference(
                        entry_id=entry.id,
                        name=entry.name_snapshot,
                        reason=reason,
                    )
                )
                continue

            new_price = resolved.variant.price
            if new_price == entry.price_snapshot:
                continue

            old_price = entry.price_snapshot
            name = entry.name_snapshot
            await self.entries.apply_snapshot(entry, catalog_snapshot(resolved))
            report.updated.append(
                PriceUpdate(
                    entry_id=entry.id,
                    name=name,
                    old_price=old_price,
                    new_price=new_price,
                )
            )

        after = [BomEntryResponse.model_validate(e) for e in entries]
        report.total_before = group_entries(floorplan_id, before, quantities).total_price
        report.total_after = group_entries(floorplan_id, after, quantities).total_price

        if report.invalid:
            logger.warning(
                "Floorplan %s has %s BOM entries with broken catalog references",
                floorplan_id, len(report.invalid),
            )
        logger.info(
            "Catalog update of floorplan %s: %s updated, total %s -> %s",
            floorplan_id, len(report.updated), report.total_before, report.total_after,
        )
        return report

    async def _resolve(
        self, entry: BomEntry
    ) -> tuple[ResolvedVariant | None, InvalidReason | None]:
        try:
            resolved = await self.catalog.resolve_variant(entry.variant_id)
        except ReferenceNotFound as exc:
            return None, InvalidReason(exc.reason)

        if not self.catalog.is_active(resolved.variant):
            return None, InvalidReason.VARIANT_INACTIVE
        if not self.catalog.is_active(resolved.item):
            return None, InvalidReason.ITEM_INACTIVE
        return resolved, None
