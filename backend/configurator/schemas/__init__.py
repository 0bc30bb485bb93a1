from configurator.schemas.bom import (
    BomEntryResponse,
    BomGroup,
    FloorplanBom,
    ChangeReport,
    InvalidReason,
)
from configurator.schemas.catalog import ResolvedVariant, RequiredAddon
from configurator.schemas.floorplan import (
    FloorplanResponse,
    PlacementResponse,
)

__all__ = [
    "BomEntryResponse",
    "BomGroup",
    "FloorplanBom",
    "ChangeReport",
    "InvalidReason",
    "ResolvedVariant",
    "RequiredAddon",
    "FloorplanResponse",
    "PlacementResponse",
]
