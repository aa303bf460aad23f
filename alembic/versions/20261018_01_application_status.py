"""Application status record table

Revision ID: 20261018_01
Revises:
Create Date: 2026-10-18
"""
# pylint: disable=no-member,invalid-name,wrong-import-order

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261018_01"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    op.create_table(
        "application_status",
        sa.Column("application_name", sa.Text(), nullable=False),
        sa.Column("namespace", sa.Text(), nullable=False),
        sa.Column("record_version", sa.BigInteger(), nullable=False, server_default=sa.text("1")),
        sa.Column("status_payload", sa.Text(), nullable=False),
        sa.Column("updated_at_utc", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("application_name", "namespace", name="pk_application_status"),
        sa.CheckConstraint("record_version >= 1", name="ck_application_status_record_version_positive"),
    )


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_table("application_status")
