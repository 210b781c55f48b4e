"""initial storefront schema

Revision ID: 3f2a9c1d7b40
Revises:
Create Date: 2026-09-02 10:41:07.318220

Creates every table the ORM defines. Tables that already exist (databases
created by Base.metadata.create_all() on startup) are left alone.
"""
from typing import Sequence, Union

from alembic import op
from sqlalchemy import inspect

from backend.database import Base
from backend import models  # noqa: F401


# revision identifiers, used by Alembic.
revision: str = '3f2a9c1d7b40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _table_exists(table_name):
    """Check if a table exists."""
    bind = op.get_bind()
    insp = inspect(bind)
    return table_name in insp.get_table_names()


def upgrade() -> None:
    bind = op.get_bind()
    # sorted_tables is FK-dependency order
    for table in Base.metadata.sorted_tables:
        if not _table_exists(table.name):
            table.create(bind)


def downgrade() -> None:
    bind = op.get_bind()
    for table in reversed(Base.metadata.sorted_tables):
        if _table_exists(table.name):
            table.drop(bind)
