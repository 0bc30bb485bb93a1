"""BOM CSV export.

One row per group for the main entry, followed by a numbered sub-row per
add-on (line 2.1, 2.2, ...), then a total row. Prices come from the snapshots only.
"""

from __future__ import annotations

import csv
from decimal import Decimal
from io import StringIO

from configurator.schemas.bom import FloorplanBom

CSV_COLUMNS = [
    "Line",
    "Model Number",
    "Name",
    "Style",
    "Quantity",
    "Unit Price",
    "Extended Price",
]


def _money(value: Decimal, currency: str) -> str:
    return f"{currency}{value.quantize(Decimal('0.01'))}"


def bom_to_csv(bom: FloorplanBom, currency: str = "$") -> str:
    """Convert a floorplan BOM view to a CSV string."""
    buf = StringIO()
    writer = csv.writer(buf)
    writer.writerow(CSV_COLUMNS)

    for line, group in enumerate(bom.groups, start=1):
        main = group.main_entry
        writer.writerow(
            [
                line,
                main.model_number_snapshot or "",
                main.name_snapshot,
                main.style_name_snapshot or "",
                group.quantity,
                _money(group.unit_price, currency),
                _money(group.total_price, currency),
            ]
        )
        for sub, child in enumerate(group.children, start=1):
            writer.writerow(
                [
                    f"{line}.{sub}",
                    child.model_number_snapshot or "",
                    child.name_snapshot,
                    child.style_name_snapshot or "",
                    group.quantity,
                    _money(child.price_snapshot, currency),
                    _money(child.price_snapshot * group.quantity, currency),
                ]
            )

    # Summary row
    writer.writerow([])
    writer.writerow(
        [
            "",
            "",
            "TOTAL",
            "",
            sum(g.quantity for g in bom.groups),
            "",
            _money(bom.total_price, currency),
        ]
    )

    return buf.getvalue()
