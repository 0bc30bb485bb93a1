"""Smart Home Configurator — BOM backend

Backend responsibilities:
  1. Floorplans and placements (async SQLAlchemy)
  2. BOM materialization from placements, with required add-ons
  3. Grouped BOM view and CSV export
  4. "Update from Catalog" reconciliation with change report

The catalog itself is maintained by the spreadsheet import job.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from configurator.config import get_settings
from configurator.db.session import init_db, close_db
from configurator.errors import (
    BomError,
    Conflict,
    InvalidOperation,
    ReferenceNotFound,
    UpstreamUnavailable,
)
from configurator.routers import bom, floorplans, placements

API_VERSION = "0.4.0"

_ERROR_STATUS: dict[type[BomError], int] = {
    ReferenceNotFound: 404,
    Conflict: 409,
    InvalidOperation: 422,
    UpstreamUnavailable: 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: check DB. Shutdown: close DB pool."""
    await init_db()
    yield
    await close_db()


async def bom_error_handler(request: Request, exc: BomError) -> JSONResponse:
    status_code = next(
        (code for kind, code in _ERROR_STATUS.items() if isinstance(exc, kind)),
        400,
    )
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "error": exc.code, "details": exc.details},
    )


def create_app() -> FastAPI:
    settings = get_settings()

    application = FastAPI(
        title=settings.app_name,
        version=API_VERSION,
        description=(
            "Smart-home installation configurator.\n\n"
            "Turns items placed on floorplans into a priced, hierarchical "
            "bill of materials and keeps it in line with the catalog."
        ),
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.add_exception_handler(BomError, bom_error_handler)

    # ─── Floorplans ───
    application.include_router(
        floorplans.router, prefix="/api/floorplans", tags=["Floorplans"]
    )

    # ─── Placements (materialize BOM entries) ───
    application.include_router(
        placements.router, prefix="/api/placements", tags=["Placements"]
    )

    # ─── BOM view, export, catalog update ───
    application.include_router(bom.router, prefix="/api/bom", tags=["BOM"])

    @application.get("/health")
    async def health_check():
        return {"status": "ok", "service": "configurator-bom", "version": API_VERSION}

    return application


app = create_app()
