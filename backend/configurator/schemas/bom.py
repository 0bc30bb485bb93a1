from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


class BomEntryResponse(BaseModel):
    id: int
    floorplan_id: int
    item_id: int
    variant_id: int
    parent_entry_id: int | None = None
    name_snapshot: str
    model_number_snapshot: str | None = None
    style_name_snapshot: str | None = None
    price_snapshot: Decimal
    picture_path: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class BomGroup(BaseModel):
    main_entry: BomEntryResponse
    children: list[BomEntryResponse] = Field(default_factory=list)
    quantity: int = 0
    unit_price: Decimal = Decimal("0")
    total_price: Decimal = Decimal("0")


class FloorplanBom(BaseModel):
    floorplan_id: int
    groups: list[BomGroup] = Field(default_factory=list)
    total_price: Decimal = Decimal("0")


# ─── Reconciliation ───


class InvalidReason(str, Enum):
    VARIANT_NOT_FOUND = "variant_not_found"
    ITEM_NOT_FOUND = "item_not_found"
    VARIANT_INACTIVE = "variant_inactive"
    ITEM_INACTIVE = "item_inactive"


class PriceUpdate(BaseModel):
    entry_id: int
    name: str
    old_price: Decimal
    new_price: Decimal


class InvalidReference(BaseModel):
    entry_id: int
    name: str
    reason: InvalidReason


class ChangeReport(BaseModel):
    floorplan_id: int
    updated: list[PriceUpdate] = Field(default_factory=list)
    invalid: list[InvalidReference] = Field(default_factory=list)
    total_before: Decimal = Decimal("0")
    total_after: Decimal = Decimal("0")
    cancelled: bool = False


# ─── Requests ───


class SwitchVariantRequest(BaseModel):
    variant_id: int = Field(..., gt=0)
