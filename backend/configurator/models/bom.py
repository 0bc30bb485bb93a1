"""SQLAlchemy ORM model for BOM line items."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String,
    Integer,
    Numeric,
    DateTime,
    ForeignKey,
    Index,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from configurator.db.session import Base


class BomEntry(Base):
    """A priced line item on a floorplan.

    Main entries (``parent_entry_id`` is NULL) are shared by every placement
    of the same variant on the floorplan. Child entries are the required
    add-ons expanded under a main entry; they never have children of their
    own.

    The ``*_snapshot`` columns and ``picture_path`` hold what was quoted.
    Only the builder and the catalog reconciler write them.
    """

    __tablename__ = "bom_entries"
    __mapper_args__ = {"eager_defaults": True}
    __table_args__ = (
        Index(
            "uq_bom_entries_main_variant",
            "floorplan_id",
            "variant_id",
            unique=True,
            postgresql_where=text("parent_entry_id IS NULL"),
            sqlite_where=text("parent_entry_id IS NULL"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    floorplan_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("floorplans.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Catalog references, only followed by the reconciler
    item_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    variant_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    parent_entry_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("bom_entries.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    # Snapshots
    name_snapshot: Mapped[str] = mapped_column(String(255), nullable=False)
    model_number_snapshot: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    style_name_snapshot: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    price_snapshot: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    picture_path: Mapped[str | None] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    @property
    def is_main(self) -> bool:
        return self.parent_entry_id is None

    def __repr__(self) -> str:
        kind = "main" if self.is_main else f"child of {self.parent_entry_id}"
        return f"<BomEntry {self.name_snapshot} {kind} ({self.id})>"
