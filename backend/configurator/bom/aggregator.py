"""BOM Aggregator — grouped, priced view of a floorplan's BOM.

Recomputed on every read from the stored entries and the current
placements; nothing is cached. Quantity of a group is the number of
placements on the floorplan that use the main entry's variant.

Main entries whose quantity dropped to zero stay in storage but are left out
of the grand total and of the default view.
"""

from __future__ import annotations

from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Mapping, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from configurator.bom.repository import BomEntryRepository
from configurator.placements.store import PlacementStore
from configurator.schemas.bom import BomEntryResponse, BomGroup, FloorplanBom

ZERO = Decimal("0")


def quantities_by_variant(variant_ids: Iterable[int]) -> dict[int, int]:
    """Count placements per variant id."""
    counts: dict[int, int] = defaultdict(int)
    for variant_id in variant_ids:
        counts[variant_id] += 1
    return dict(counts)


def group_entries(
    floorplan_id: int,
    entries: Sequence[BomEntryResponse],
    quantities: Mapping[int, int],
    include_empty: bool = False,
) -> FloorplanBom:
    """Group entries under their main entry and price each group.

    ``quantities`` maps variant id to placement count and is taken as
    given, so callers can price two snapshot sets against the same counts.
    Groups come out in ascending main entry id; children likewise.
    """
    mains = sorted((e for e in entries if e.parent_entry_id is None), key=lambda e: e.id)
    children: dict[int, list[BomEntryResponse]] = defaultdict(list)
    for entry in entries:
        if entry.parent_entry_id is not None:
            children[entry.parent_entry_id].append(entry)

    groups: list[BomGroup] = []
    grand_total = ZERO

    for main in mains:
        quantity = quantities.get(main.variant_id, 0)
        if quantity <= 0 and not include_empty:
            continue

        kids = sorted(children.get(main.id, []), key=lambda e: e.id)
        unit_price = main.price_snapshot + sum((c.price_snapshot for c in kids), ZERO)
        total = unit_price * quantity

        groups.append(
            BomGroup(
                main_entry=main,
                children=kids,
                quantity=quantity,
                unit_price=unit_price,
                total_price=total,
            )
        )
        if quantity > 0:
            grand_total += total

    return FloorplanBom(
        floorplan_id=floorplan_id,
        groups=groups,
        total_price=grand_total,
    )


class BomAggregator:
    def __init__(
        self,
        db: AsyncSession,
        entries: BomEntryRepository | None = None,
        placements: PlacementStore | None = None,
    ):
        self.entries = entries or BomEntryRepository(db)
        self.placements = placements or PlacementStore(db)

    async def build_view(
        self, floorplan_id: int, include_empty: bool = False
    ) -> FloorplanBom:
        entries = await self.entries.find_by_floorplan(floorplan_id)
        placements = await self.placements.list_placements(floorplan_id)

        return group_entries(
            floorplan_id,
            [BomEntryResponse.model_validate(e) for e in entries],
            quantities_by_variant(p.variant_id for p in placements),
            include_empty=include_empty,
        )
