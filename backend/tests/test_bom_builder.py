"""Tests for BOM materialization and variant switching."""

from decimal import Decimal

import pytest
from sqlalchemy import func, select

from configurator.bom.builder import BomBuilder
from configurator.errors import Conflict, InvalidOperation, ReferenceNotFound
from configurator.models.bom import BomEntry
from configurator.models.floorplan import Placement


async def _entry_count(db) -> int:
    return (await db.execute(select(func.count()).select_from(BomEntry))).scalar()


async def _add_placement(db, floorplan_id: int, variant_id: int, entry_id: int):
    placement = Placement(
        floorplan_id=floorplan_id,
        variant_id=variant_id,
        bom_entry_id=entry_id,
        x=0,
        y=0,
        width=24,
        height=24,
    )
    db.add(placement)
    await db.flush()
    return placement


# ═══════════════════════════════════════════════════════════
# materialize_for_placement
# ═══════════════════════════════════════════════════════════


class TestMaterialize:
    async def test_first_placement_snapshots_catalog(self, db, catalog):
        floorplan = await catalog.floorplan()
        item = await catalog.item("Light switch", base_model_number="LS-100")
        variant = await catalog.variant(
            item, "24.90", style_name="Brushed Steel", image_path="img/ls-steel.png"
        )

        entry_id = await BomBuilder(db).materialize_for_placement(floorplan.id, variant.id)

        entry = await db.get(BomEntry, entry_id)
        assert entry.is_main
        assert entry.floorplan_id == floorplan.id
        assert entry.item_id == item.id
        assert entry.variant_id == variant.id
        assert entry.name_snapshot == "Light switch"
        assert entry.model_number_snapshot == "LS-100"
        assert entry.style_name_snapshot == "Brushed Steel"
        assert entry.price_snapshot == Decimal("24.90")
        assert entry.picture_path == "img/ls-steel.png"

    async def test_model_number_falls_back_to_style_name(self, db, catalog):
        floorplan = await catalog.floorplan()
        item = await catalog.item("Motion sensor")
        variant = await catalog.variant(item, "39.00", style_name="MS-200-W")

        entry_id = await BomBuilder(db).materialize_for_placement(floorplan.id, variant.id)

        entry = await db.get(BomEntry, entry_id)
        assert entry.model_number_snapshot == "MS-200-W"

    async def test_second_placement_reuses_entry(self, db, catalog):
        floorplan = await catalog.floorplan()
        variant = await catalog.product("Dimmer", "50", addon_prices=("3",))
        builder = BomBuilder(db)

        first = await builder.materialize_for_placement(floorplan.id, variant.id)
        second = await builder.materialize_for_placement(floorplan.id, variant.id)

        assert first == second
        assert await _entry_count(db) == 2

    async def test_same_variant_on_other_floorplan_gets_own_entry(self, db, catalog):
        ground = await catalog.floorplan("Ground Floor")
        upstairs = await catalog.floorplan("First Floor")
        variant = await catalog.product("Dimmer", "50")
        builder = BomBuilder(db)

        a = await builder.materialize_for_placement(ground.id, variant.id)
        b = await builder.materialize_for_placement(upstairs.id, variant.id)

        assert a != b

    async def test_reuse_keeps_old_snapshot(self, db, catalog):
        floorplan = await catalog.floorplan()
        variant = await catalog.product("Thermostat", "99")
        builder = BomBuilder(db)
        entry_id = await builder.materialize_for_placement(floorplan.id, variant.id)

        variant.price = Decimal("129")
        await db.flush()
        again = await builder.materialize_for_placement(floorplan.id, variant.id)

        entry = await db.get(BomEntry, again)
        assert again == entry_id
        assert entry.price_snapshot == Decimal("99")

    async def test_required_addons_in_slot_order(self, db, catalog):
        floorplan = await catalog.floorplan()
        keypad = await catalog.item("Keypad")
        variant = await catalog.variant(keypad, "80")
        backbox = await catalog.item("Back box")
        await catalog.variant(backbox, "4")
        frame = await catalog.item("Frame")
        await catalog.variant(frame, "6")
        optional = await catalog.item("Engraving")
        await catalog.variant(optional, "12")
        # Registered out of slot order on purpose
        await catalog.addon(keypad, frame, slot_number=2)
        await catalog.addon(keypad, backbox, slot_number=1)
        await catalog.addon(keypad, optional, slot_number=3, is_required=False)

        main_id = await BomBuilder(db).materialize_for_placement(floorplan.id, variant.id)

        children = (
            await db.execute(
                select(BomEntry)
                .where(BomEntry.parent_entry_id == main_id)
                .order_by(BomEntry.id)
            )
        ).scalars().all()
        assert [c.name_snapshot for c in children] == ["Back box", "Frame"]
        assert [c.price_snapshot for c in children] == [Decimal("4"), Decimal("6")]
        assert all(c.floorplan_id == floorplan.id for c in children)

    async def test_addon_uses_lowest_sort_order_active_variant(self, db, catalog):
        floorplan = await catalog.floorplan()
        switch = await catalog.item("Switch")
        variant = await catalog.variant(switch, "20")
        frame = await catalog.item("Frame")
        await catalog.variant(frame, "9", style_name="Gold", sort_order=0, is_active=False)
        await catalog.variant(frame, "7", style_name="Black", sort_order=2)
        await catalog.variant(frame, "5", style_name="White", sort_order=1)
        await catalog.addon(switch, frame)

        main_id = await BomBuilder(db).materialize_for_placement(floorplan.id, variant.id)

        child = (
            await db.execute(select(BomEntry).where(BomEntry.parent_entry_id == main_id))
        ).scalar_one()
        assert child.style_name_snapshot == "White"
        assert child.price_snapshot == Decimal("5")

    async def test_addon_without_active_variant_is_skipped(self, db, catalog):
        floorplan = await catalog.floorplan()
        switch = await catalog.item("Switch")
        variant = await catalog.variant(switch, "20")
        retired = await catalog.item("Retired frame")
        await catalog.variant(retired, "3", is_active=False)
        await catalog.addon(switch, retired)

        main_id = await BomBuilder(db).materialize_for_placement(floorplan.id, variant.id)

        assert main_id is not None
        assert await _entry_count(db) == 1

    async def test_unknown_variant_creates_nothing(self, db, catalog):
        floorplan = await catalog.floorplan()

        with pytest.raises(ReferenceNotFound) as exc_info:
            await BomBuilder(db).materialize_for_placement(floorplan.id, 4242)

        assert exc_info.value.kind == "variant"
        assert await _entry_count(db) == 0

    async def test_variant_removed_with_its_item_creates_nothing(self, db, catalog):
        floorplan = await catalog.floorplan()
        item = await catalog.item("Doorbell")
        variant = await catalog.variant(item, "60")
        await db.delete(item)
        await db.flush()
        # The item delete cascades to its variants in the database
        db.expunge(variant)

        with pytest.raises(ReferenceNotFound) as exc_info:
            await BomBuilder(db).materialize_for_placement(floorplan.id, variant.id)

        assert exc_info.value.kind == "variant"
        assert await _entry_count(db) == 0

    async def test_lost_race_rereads_winner(self, db, catalog, monkeypatch):
        floorplan = await catalog.floorplan()
        variant = await catalog.product("Camera", "150", addon_prices=("10",))
        builder = BomBuilder(db)
        winner = await builder.materialize_for_placement(floorplan.id, variant.id)

        # The loser's first lookup ran before the winner committed
        real_find_main = builder.entries.find_main
        calls = []

        async def stale_find_main(floorplan_id, variant_id):
            calls.append(variant_id)
            if len(calls) == 1:
                return None
            return await real_find_main(floorplan_id, variant_id)

        monkeypatch.setattr(builder.entries, "find_main", stale_find_main)

        loser = await builder.materialize_for_placement(floorplan.id, variant.id)

        assert loser == winner
        assert len(calls) == 2
        assert await _entry_count(db) == 2

    async def test_vanished_winner_triggers_one_retry(self, db, catalog, monkeypatch):
        floorplan = await catalog.floorplan()
        variant = await catalog.product("Camera", "150", addon_prices=("10",))
        builder = BomBuilder(db)
        real_create = builder._create_main_entry
        attempts = []

        # First insert is blocked by a transaction that then rolls back
        async def blocked_once(floorplan_id, resolved):
            attempts.append(resolved.variant.id)
            if len(attempts) == 1:
                raise Conflict(floorplan_id, resolved.variant.id)
            return await real_create(floorplan_id, resolved)

        monkeypatch.setattr(builder, "_create_main_entry", blocked_once)

        entry_id = await builder.materialize_for_placement(floorplan.id, variant.id)

        assert len(attempts) == 2
        entry = await db.get(BomEntry, entry_id)
        assert entry.is_main
        assert [c.price_snapshot for c in await builder.entries.find_children(entry_id)] == [
            Decimal("10")
        ]

    async def test_gives_up_after_second_blocked_insert(self, db, catalog, monkeypatch):
        floorplan = await catalog.floorplan()
        variant = await catalog.product("Camera", "150")
        builder = BomBuilder(db)
        attempts = []

        async def always_blocked(floorplan_id, resolved):
            attempts.append(resolved.variant.id)
            raise Conflict(floorplan_id, resolved.variant.id)

        monkeypatch.setattr(builder, "_create_main_entry", always_blocked)

        with pytest.raises(Conflict):
            await builder.materialize_for_placement(floorplan.id, variant.id)

        assert len(attempts) == 2
        assert await _entry_count(db) == 0


# ═══════════════════════════════════════════════════════════
# switch_variant
# ═══════════════════════════════════════════════════════════


class TestSwitchVariant:
    async def test_switch_refreshes_snapshot_addons_and_placements(self, db, catalog):
        floorplan = await catalog.floorplan()
        old = await catalog.product("Switch", "20", addon_prices=("2",))
        new = await catalog.product("Smart switch", "45", addon_prices=("3", "4"))
        builder = BomBuilder(db)
        entry_id = await builder.materialize_for_placement(floorplan.id, old.id)
        placement = await _add_placement(db, floorplan.id, old.id, entry_id)

        entry = await builder.switch_variant(entry_id, new.id)

        assert entry.id == entry_id
        assert entry.variant_id == new.id
        assert entry.item_id == new.item_id
        assert entry.name_snapshot == "Smart switch"
        assert entry.price_snapshot == Decimal("45")
        children = await builder.entries.find_children(entry_id)
        assert [c.price_snapshot for c in children] == [Decimal("3"), Decimal("4")]
        await db.refresh(placement)
        assert placement.variant_id == new.id
        assert placement.bom_entry_id == entry_id

    async def test_same_variant_is_noop(self, db, catalog):
        floorplan = await catalog.floorplan()
        variant = await catalog.product("Switch", "20")
        builder = BomBuilder(db)
        entry_id = await builder.materialize_for_placement(floorplan.id, variant.id)

        entry = await builder.switch_variant(entry_id, variant.id)

        assert entry.variant_id == variant.id
        assert entry.price_snapshot == Decimal("20")

    async def test_target_variant_already_has_entry(self, db, catalog):
        floorplan = await catalog.floorplan()
        first = await catalog.product("Switch", "20")
        second = await catalog.product("Dimmer", "50")
        builder = BomBuilder(db)
        entry_id = await builder.materialize_for_placement(floorplan.id, first.id)
        await builder.materialize_for_placement(floorplan.id, second.id)

        with pytest.raises(Conflict):
            await builder.switch_variant(entry_id, second.id)

        entry = await db.get(BomEntry, entry_id)
        assert entry.variant_id == first.id

    async def test_child_entry_cannot_be_switched(self, db, catalog):
        floorplan = await catalog.floorplan()
        variant = await catalog.product("Switch", "20", addon_prices=("2",))
        other = await catalog.product("Dimmer", "50")
        builder = BomBuilder(db)
        main_id = await builder.materialize_for_placement(floorplan.id, variant.id)
        (child,) = await builder.entries.find_children(main_id)

        with pytest.raises(InvalidOperation):
            await builder.switch_variant(child.id, other.id)

    async def test_unknown_entry(self, db):
        with pytest.raises(ReferenceNotFound) as exc_info:
            await BomBuilder(db).switch_variant(999, 1)
        assert exc_info.value.kind == "bom_entry"

    async def test_unknown_target_variant_leaves_entry(self, db, catalog):
        floorplan = await catalog.floorplan()
        variant = await catalog.product("Switch", "20")
        builder = BomBuilder(db)
        entry_id = await builder.materialize_for_placement(floorplan.id, variant.id)

        with pytest.raises(ReferenceNotFound):
            await builder.switch_variant(entry_id, 31337)

        entry = await db.get(BomEntry, entry_id)
        assert entry.variant_id == variant.id
