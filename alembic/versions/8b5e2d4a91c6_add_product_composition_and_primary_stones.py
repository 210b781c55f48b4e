"""add product composition columns and primary_stones list

Revision ID: 8b5e2d4a91c6
Revises: 3f2a9c1d7b40
Create Date: 2026-09-19 15:02:44.902113

Products created before customization estimates only had base_price. Adds the
metal/stone composition and calculated price columns idempotently.

Design requests used to store a single primary_stone string; it is folded into
the primary_stones JSON list.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = '8b5e2d4a91c6'
down_revision: Union[str, None] = '3f2a9c1d7b40'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


PRODUCT_COLUMNS = [
    ("calculated_price_usd", sa.Float()),
    ("calculated_price_inr", sa.Float()),
    ("metal_type", sa.String()),
    ("metal_weight", sa.Float()),
    ("main_stone_type", sa.String()),
    ("main_stone_weight", sa.Float()),
    ("secondary_stone_type", sa.String()),
    ("secondary_stone_weight", sa.Float()),
    ("other_stone_type", sa.String()),
    ("other_stone_weight", sa.Float()),
    ("ai_inputs", sa.JSON()),
]


def _column_exists(table_name, column_name):
    """Check if a column already exists in the table."""
    bind = op.get_bind()
    insp = inspect(bind)
    columns = [c["name"] for c in insp.get_columns(table_name)]
    return column_name in columns


def _table_exists(table_name):
    """Check if a table exists."""
    bind = op.get_bind()
    insp = inspect(bind)
    return table_name in insp.get_table_names()


def upgrade() -> None:
    if _table_exists("products"):
        for col_name, col_type in PRODUCT_COLUMNS:
            if not _column_exists("products", col_name):
                op.add_column("products", sa.Column(col_name, col_type, nullable=True))

    if _table_exists("design_requests"):
        if not _column_exists("design_requests", "primary_stones"):
            op.add_column("design_requests", sa.Column("primary_stones", sa.JSON(), nullable=True))

        if _column_exists("design_requests", "primary_stone"):
            design_requests = sa.table(
                "design_requests",
                sa.column("id", sa.Integer()),
                sa.column("primary_stone", sa.String()),
                sa.column("primary_stones", sa.JSON()),
            )
            bind = op.get_bind()
            rows = bind.execute(
                sa.select(design_requests.c.id, design_requests.c.primary_stone)
                .where(design_requests.c.primary_stone.isnot(None))
            ).fetchall()
            for row_id, stone in rows:
                stones = [s.strip() for s in stone.split(",") if s.strip()]
                bind.execute(
                    design_requests.update()
                    .where(design_requests.c.id == row_id)
                    .values(primary_stones=stones)
                )
            with op.batch_alter_table("design_requests") as batch_op:
                batch_op.drop_column("primary_stone")


def downgrade() -> None:
    # primary_stone is not restored; the list is kept
    if _table_exists("products"):
        with op.batch_alter_table("products") as batch_op:
            for col_name, _ in reversed(PRODUCT_COLUMNS):
                if _column_exists("products", col_name):
                    batch_op.drop_column(col_name)
