"""Catalog, floorplan, placement and BOM entry schema.

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "items",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("base_model_number", sa.String(length=100), nullable=True),
        sa.Column("dimensions", sa.String(length=100), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "item_variants",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("style_name", sa.String(length=255), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("image_path", sa.String(length=500), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.ForeignKeyConstraint(["item_id"], ["items.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_item_variants_item_id", "item_variants", ["item_id"])

    op.create_table(
        "item_addons",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("parent_item_id", sa.Integer(), nullable=False),
        sa.Column("addon_item_id", sa.Integer(), nullable=False),
        sa.Column("slot_number", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("is_required", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.ForeignKeyConstraint(["parent_item_id"], ["items.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["addon_item_id"], ["items.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_item_addons_parent_item_id", "item_addons", ["parent_item_id"])

    op.create_table(
        "floorplans",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("project_id", sa.Integer(), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("image_path", sa.String(length=500), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_floorplans_project_id", "floorplans", ["project_id"])

    op.create_table(
        "bom_entries",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("floorplan_id", sa.Integer(), nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("variant_id", sa.Integer(), nullable=False),
        sa.Column("parent_entry_id", sa.Integer(), nullable=True),
        sa.Column("name_snapshot", sa.String(length=255), nullable=False),
        sa.Column("model_number_snapshot", sa.String(length=255), nullable=True),
        sa.Column("style_name_snapshot", sa.String(length=255), nullable=True),
        sa.Column("price_snapshot", sa.Numeric(12, 2), nullable=False),
        sa.Column("picture_path", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["floorplan_id"], ["floorplans.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["parent_entry_id"], ["bom_entries.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_bom_entries_floorplan_id", "bom_entries", ["floorplan_id"])
    op.create_index("ix_bom_entries_item_id", "bom_entries", ["item_id"])
    op.create_index("ix_bom_entries_variant_id", "bom_entries", ["variant_id"])
    op.create_index("ix_bom_entries_parent_entry_id", "bom_entries", ["parent_entry_id"])
    # One main entry per variant per floorplan
    op.create_index(
        "uq_bom_entries_main_variant",
        "bom_entries",
        ["floorplan_id", "variant_id"],
        unique=True,
        postgresql_where=sa.text("parent_entry_id IS NULL"),
    )

    op.create_table(
        "placements",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("floorplan_id", sa.Integer(), nullable=False),
        sa.Column("variant_id", sa.Integer(), nullable=False),
        sa.Column("bom_entry_id", sa.Integer(), nullable=True),
        sa.Column("x", sa.Float(), nullable=False),
        sa.Column("y", sa.Float(), nullable=False),
        sa.Column("width", sa.Float(), nullable=False),
        sa.Column("height", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["floorplan_id"], ["floorplans.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["bom_entry_id"], ["bom_entries.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_placements_floorplan_id", "placements", ["floorplan_id"])
    op.create_index("ix_placements_variant_id", "placements", ["variant_id"])
    op.create_index("ix_placements_bom_entry_id", "placements", ["bom_entry_id"])


def downgrade() -> None:
    op.drop_index("ix_placements_bom_entry_id", table_name="placements")
    op.drop_index("ix_placements_variant_id", table_name="placements")
    op.drop_index("ix_placements_floorplan_id", table_name="placements")
    op.drop_table("placements")
    op.drop_index("uq_bom_entries_main_variant", table_name="bom_entries")
    op.drop_index("ix_bom_entries_parent_entry_id", table_name="bom_entries")
    op.drop_index("ix_bom_entries_variant_id", table_name="bom_entries")
    op.drop_index("ix_bom_entries_item_id", table_name="bom_entries")
    op.drop_index("ix_bom_entries_floorplan_id", table_name="bom_entries")
    op.drop_table("bom_entries")
    op.drop_index("ix_floorplans_project_id", table_name="floorplans")
    op.drop_table("floorplans")
    op.drop_index("ix_item_addons_parent_item_id", table_name="item_addons")
    op.drop_table("item_addons")
    op.drop_index("ix_item_variants_item_id", table_name="item_variants")
    op.drop_table("item_variants")
    op.drop_table("items")
