"""BOM engine errors.

Every failure is scoped to the floorplan or entry the caller asked about;
the API layer turns these into JSON error bodies (see ``main.py``).
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy.exc import OperationalError


class BomError(Exception):
    """Base exception for all BOM engine errors."""

    code = "BOM_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ReferenceNotFound(BomError):
    """A variant, item, floorplan or BOM entry id no longer resolves."""

    code = "REFERENCE_NOT_FOUND"

    def __init__(self, kind: str, ref_id: Any):
        super().__init__(
            f"{kind.replace('_', ' ').capitalize()} {ref_id} not found",
            details={"kind": kind, "id": ref_id},
        )
        self.kind = kind
        self.ref_id = ref_id

    @property
    def reason(self) -> str:
        return f"{self.kind}_not_found"


class Conflict(BomError):
    """A main entry for the (floorplan, variant) pair already exists."""

    code = "CONFLICT"

    def __init__(self, floorplan_id: int, variant_id: int):
        super().__init__(
            f"Floorplan {floorplan_id} already has a BOM entry "
            f"for variant {variant_id}",
            details={"floorplan_id": floorplan_id, "variant_id": variant_id},
        )
        self.floorplan_id = floorplan_id
        self.variant_id = variant_id


class InvalidOperation(BomError):
    """The operation does not apply to the entry in its current state."""

    code = "INVALID_OPERATION"


class UpstreamUnavailable(BomError):
    """Catalog or placement store I/O failed. Never retried here."""

    code = "UPSTREAM_UNAVAILABLE"

    def __init__(self, source: str, cause: str):
        super().__init__(
            f"{source} is unavailable: {cause}",
            details={"source": source},
        )
        self.source = source


@contextmanager
def upstream(source: str) -> Iterator[None]:
    """Translate connection-level database failures of a store."""
    try:
        yield
    except OperationalError as exc:
        raise UpstreamUnavailable(source, str(exc.orig or exc)) from exc
