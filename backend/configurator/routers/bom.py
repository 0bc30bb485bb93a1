"""BOM router — grouped view, export, catalog update and entry edits."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from configurator.db.session import get_db
from configurator.services.bom_service import BomService
from configurator.schemas.bom import (
    BomEntryResponse,
    ChangeReport,
    FloorplanBom,
    SwitchVariantRequest,
)

router = APIRouter()

DISCONNECT_POLL_SECONDS = 0.5


def _get_service(db: AsyncSession = Depends(get_db)) -> BomService:
    return BomService(db)


async def _cancel_on_disconnect(request: Request, cancel: asyncio.Event) -> None:
    while not cancel.is_set():
        if await request.is_disconnected():
            cancel.set()
            return
        await asyncio.sleep(DISCONNECT_POLL_SECONDS)


@router.get("/floorplans/{floorplan_id}", response_model=FloorplanBom)
async def get_floorplan_bom(
    floorplan_id: int,
    include_empty: bool = Query(False),
    service: BomService = Depends(_get_service),
):
    """Grouped BOM with quantities and totals."""
    return await service.get_view(floorplan_id, include_empty=include_empty)


@router.get("/floorplans/{floorplan_id}/export", response_class=PlainTextResponse)
async def export_floorplan_bom(
    floorplan_id: int,
    service: BomService = Depends(_get_service),
):
    """BOM as CSV."""
    content = await service.export_csv(floorplan_id)
    return PlainTextResponse(
        content,
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="bom-floorplan-{floorplan_id}.csv"'
        },
    )


@router.post(
    "/floorplans/{floorplan_id}/update-from-catalog",
    response_model=ChangeReport,
)
async def update_floorplan_bom_from_catalog(
    floorplan_id: int,
    request: Request,
    service: BomService = Depends(_get_service),
):
    """Refresh quoted prices from the catalog and report the changes.

    A client that disconnects mid-run stops it; updates already applied are
    kept and the report comes back flagged ``cancelled``.
    """
    cancel = asyncio.Event()
    watcher = asyncio.create_task(_cancel_on_disconnect(request, cancel))
    try:
        return await service.update_from_catalog(floorplan_id, cancel)
    finally:
        watcher.cancel()


@router.delete("/floorplans/{floorplan_id}/entries/{entry_id}", status_code=204)
async def delete_bom_entry(
    floorplan_id: int,
    entry_id: int,
    service: BomService = Depends(_get_service),
):
    """Drop a line item and its add-ons."""
    await service.delete_entry(floorplan_id, entry_id)


@router.get("/entries/{entry_id}", response_model=BomEntryResponse)
async def get_bom_entry(
    entry_id: int,
    service: BomService = Depends(_get_service),
):
    entry = await service.get_entry(entry_id)
    return BomEntryResponse.model_validate(entry)


@router.put("/entries/{entry_id}/variant", response_model=BomEntryResponse)
async def switch_bom_entry_variant(
    entry_id: int,
    data: SwitchVariantRequest,
    service: BomService = Depends(_get_service),
):
    """Switch a line item to another variant and rebuild its add-ons."""
    entry = await service.switch_variant(entry_id, data.variant_id)
    return BomEntryResponse.model_validate(entry)
