"""Read-only views of catalog rows handed to the BOM engine."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel


class CatalogItem(BaseModel):
    id: int
    name: str
    base_model_number: str | None = None
    is_active: bool = True

    model_config = {"from_attributes": True}


class CatalogVariant(BaseModel):
    id: int
    item_id: int
    style_name: str
    price: Decimal
    image_path: str | None = None
    sort_order: int = 0
    is_active: bool = True

    model_config = {"from_attributes": True}


class ResolvedVariant(BaseModel):
    """A variant together with the item it belongs to, as the catalog has
    them right now."""

    item: CatalogItem
    variant: CatalogVariant


class RequiredAddon(BaseModel):
    addon_item_id: int
    # None when the add-on item has no active variant to quote
    addon_variant_id: int | None = None
    slot_number: int
    sort_order: int = 0
