"""Tests for the BOM CSV export."""

import csv
from decimal import Decimal
from io import StringIO

from configurator.bom.aggregator import group_entries
from configurator.bom.export import CSV_COLUMNS, bom_to_csv
from configurator.schemas.bom import BomEntryResponse


def _entry(entry_id, variant_id, name, price, parent=None, model=None, style=None):
    return BomEntryResponse(
        id=entry_id,
        floorplan_id=1,
        item_id=variant_id,
        variant_id=variant_id,
        parent_entry_id=parent,
        name_snapshot=name,
        model_number_snapshot=model,
        style_name_snapshot=style,
        price_snapshot=Decimal(price),
    )


def _rows(text: str) -> list[list[str]]:
    return list(csv.reader(StringIO(text)))


class TestBomToCsv:
    def test_groups_addons_and_total(self):
        bom = group_entries(
            1,
            [
                _entry(1, 10, "Light switch", "10", model="LS-100", style="White"),
                _entry(2, 11, "Back box", "1.5", parent=1),
                _entry(3, 12, "Frame", "2", parent=1, style="White"),
                _entry(4, 20, "Dimmer", "50", model="DM-1"),
            ],
            {10: 3, 20: 1},
        )

        rows = _rows(bom_to_csv(bom))

        assert rows[0] == CSV_COLUMNS
        assert rows[1] == ["1", "LS-100", "Light switch", "White", "3", "$13.50", "$40.50"]
        assert rows[2] == ["1.1", "", "Back box", "", "3", "$1.50", "$4.50"]
        assert rows[3] == ["1.2", "", "Frame", "White", "3", "$2.00", "$6.00"]
        assert rows[4] == ["2", "DM-1", "Dimmer", "", "1", "$50.00", "$50.00"]
        assert rows[5] == []
        assert rows[6] == ["", "", "TOTAL", "", "4", "", "$90.50"]

    def test_empty_bom(self):
        rows = _rows(bom_to_csv(group_entries(1, [], {}), currency="€"))

        assert rows[0] == CSV_COLUMNS
        assert rows[-1] == ["", "", "TOTAL", "", "0", "", "€0.00"]
