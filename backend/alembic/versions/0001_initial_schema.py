"""Initial schema: filaments table.

Revision ID: 0001
Revises:
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- filaments ---
    op.create_table(
        "filaments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("brand", sa.String(100), nullable=False),
        sa.Column("material", sa.String(50), nullable=False),
        sa.Column("color_name", sa.String(100), nullable=False, server_default=""),
        sa.Column("color_hex", sa.String(7), nullable=False),
        sa.Column("color_family", sa.String(20), nullable=False),
        sa.Column("diameter", sa.Float, nullable=False, server_default="1.75"),
        sa.Column("spool_weight", sa.Float, nullable=False, server_default="1000"),
        sa.Column("quantity", sa.Integer, nullable=False, server_default="1"),
        sa.Column("weight_remaining", sa.Float, nullable=True),
        sa.Column("print_temp_min", sa.Integer, nullable=True),
        sa.Column("print_temp_max", sa.Integer, nullable=True),
        sa.Column("bed_temp_min", sa.Integer, nullable=True),
        sa.Column("bed_temp_max", sa.Integer, nullable=True),
        sa.Column("price", sa.Float, nullable=True),
        sa.Column("purchase_url", sa.String(500), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("tags", sa.String(500), nullable=False, server_default=""),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.Column("favorite", sa.Boolean, nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_filaments_brand_material", "filaments", ["brand", "material"])


def downgrade() -> None:
    op.drop_index("ix_filaments_brand_material", table_name="filaments")
    op.drop_table("filaments")
