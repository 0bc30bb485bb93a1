"""Shared fixtures: a throwaway SQLite database and catalog builders."""

from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from configurator.db.session import Base
from configurator.models import bom as _bom_models  # noqa: F401
from configurator.models.catalog import Item, ItemAddon, ItemVariant
from configurator.models.floorplan import Floorplan


def _configure_sqlite(engine) -> None:
    # The sqlite driver defers BEGIN on its own; take over so SAVEPOINT works.
    # Foreign keys are off in SQLite unless asked for, per connection.
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'bom.db'}")
    _configure_sqlite(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


class CatalogBuilder:
    """Creates catalog rows and floorplans straight through the ORM."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _add(self, obj):
        self.db.add(obj)
        await self.db.flush()
        return obj

    async def item(
        self,
        name: str,
        base_model_number: str | None = None,
        is_active: bool = True,
    ) -> Item:
        return await self._add(
            Item(name=name, base_model_number=base_model_number, is_active=is_active)
        )

    async def variant(
        self,
        item: Item,
        price: str | Decimal,
        style_name: str = "White",
        sort_order: int = 0,
        is_active: bool = True,
        image_path: str | None = None,
    ) -> ItemVariant:
        return await self._add(
            ItemVariant(
                item_id=item.id,
                style_name=style_name,
                price=Decimal(price),
                sort_order=sort_order,
                is_active=is_active,
                image_path=image_path,
            )
        )

    async def addon(
        self,
        parent: Item,
        addon_item: Item,
        slot_number: int = 1,
        is_required: bool = True,
        sort_order: int = 0,
    ) -> ItemAddon:
        return await self._add(
            ItemAddon(
                parent_item_id=parent.id,
                addon_item_id=addon_item.id,
                slot_number=slot_number,
                is_required=is_required,
                sort_order=sort_order,
            )
        )

    async def floorplan(self, name: str = "Ground Floor") -> Floorplan:
        return await self._add(Floorplan(name=name, image_path="floorplans/ground.png"))

    async def product(
        self,
        name: str,
        price: str,
        addon_prices: tuple[str, ...] = (),
        base_model_number: str | None = None,
    ) -> ItemVariant:
        """An item with one variant and one required add-on per addon price."""
        item = await self.item(name, base_model_number=base_model_number)
        variant = await self.variant(item, price)
        for slot, addon_price in enumerate(addon_prices, start=1):
            addon_item = await self.item(f"{name} add-on {slot}")
            await self.variant(addon_item, addon_price)
            await self.addon(item, addon_item, slot_number=slot)
        return variant


@pytest.fixture
def catalog(db) -> CatalogBuilder:
    return CatalogBuilder(db)
