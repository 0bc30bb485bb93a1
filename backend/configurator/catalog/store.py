"""Catalog Store — read access to items, variants and add-on relations.

The BOM engine never writes the catalog. Lookups return detached pydantic
views so live catalog values cannot leak into BOM snapshots by accident.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from configurator.errors import ReferenceNotFound, upstream
from configurator.models.catalog import Item, ItemVariant, ItemAddon
from configurator.schemas.catalog import (
    CatalogItem,
    CatalogVariant,
    RequiredAddon,
    ResolvedVariant,
)


class CatalogStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def resolve_variant(self, variant_id: int) -> ResolvedVariant:
        """Return the variant and its item.

        Raises ReferenceNotFound with kind ``variant`` or ``item``.
        """
        with upstream("catalog"):
            variant = await self.db.get(ItemVariant, variant_id)
            if variant is None:
                raise ReferenceNotFound("variant", variant_id)
            item = await self.db.get(Item, variant.item_id)
        if item is None:
            raise ReferenceNotFound("item", variant.item_id)

        return ResolvedVariant(
            item=CatalogItem.model_validate(item),
            variant=CatalogVariant.model_validate(variant),
        )

    @staticmethod
    def is_active(record: CatalogItem | CatalogVariant) -> bool:
        return bool(record.is_active)

    async def get_required_addons(self, item_id: int) -> list[RequiredAddon]:
        """Required add-ons of an item in slot order.

        Ties within a slot fall back to the relation's own sort order, then
        its id. Each add-on is paired with the lowest-sort-order active
        variant of the add-on item.
        """
        stmt = (
            select(ItemAddon)
            .where(
                ItemAddon.parent_item_id == item_id,
                ItemAddon.is_required.is_(True),
            )
            .order_by(ItemAddon.slot_number, ItemAddon.sort_order, ItemAddon.id)
        )
        with upstream("catalog"):
            relations = list((await self.db.execute(stmt)).scalars().all())

            addons: list[RequiredAddon] = []
            for relation in relations:
                addons.append(
                    RequiredAddon(
                        addon_item_id=relation.addon_item_id,
                        addon_variant_id=await self._default_variant_id(
                            relation.addon_item_id
                        ),
                        slot_number=relation.slot_number,
                        sort_order=relation.sort_order,
                    )
                )
        return addons

    async def _default_variant_id(self, item_id: int) -> int | None:
        stmt = (
            select(ItemVariant.id)
            .where(
                ItemVariant.item_id == item_id,
                ItemVariant.is_active.is_(True),
            )
            .order_by(ItemVariant.sort_order, ItemVariant.id)
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalars().first()
