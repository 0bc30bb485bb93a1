"""SQLAlchemy ORM models for floorplans and the placements drawn on them."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    String,
    Integer,
    Float,
    DateTime,
    ForeignKey,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from configurator.db.session import Base


class Floorplan(Base):
    __tablename__ = "floorplans"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    image_path: Mapped[str | None] = mapped_column(String(500), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<Floorplan {self.name} ({self.id})>"


class Placement(Base):
    """A catalog variant positioned on a floorplan image.

    Not priced: the price lives on the BOM entry it is linked to.
    """

    __tablename__ = "placements"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    floorplan_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("floorplans.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # No foreign key: a placed variant may still be deleted from the catalog
    variant_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    bom_entry_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("bom_entries.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    x: Mapped[float] = mapped_column(Float, nullable=False)
    y: Mapped[float] = mapped_column(Float, nullable=False)
    width: Mapped[float] = mapped_column(Float, nullable=False)
    height: Mapped[float] = mapped_column(Float, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<Placement variant {self.variant_id} on {self.floorplan_id} ({self.id})>"
