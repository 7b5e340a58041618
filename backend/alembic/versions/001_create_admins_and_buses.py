"""Create admins and buses tables

Revision ID: 001
Revises: None
Create Date: 2024-06-10 00:00:00.000000+00:00

What:  Initial schema: the admin credential store and the bus record store.
Rollback: downgrade() drops both tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "admins",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_admins_email", "admins", ["email"], unique=True)

    op.create_table(
        "buses",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("route", sa.String(500), nullable=False),
        sa.Column(
            "image_url",
            sa.String(500),
            nullable=False,
            comment="Placeholder reference or URL of the owned upload",
        ),
        sa.Column("stops", sa.JSON(), nullable=False),
        sa.Column(
            "status",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'active'"),
            comment="active or inactive",
        ),
        sa.Column("schedule", sa.String(500), nullable=False),
        sa.Column("fare", sa.String(100), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    # List returns newest first
    op.create_index(
        "idx_buses_created_at",
        "buses",
        [sa.text("created_at DESC")],
    )


def downgrade() -> None:
    op.drop_index("idx_buses_created_at", table_name="buses")
    op.drop_table("buses")
    op.drop_index("ix_admins_email", table_name="admins")
    op.drop_table("admins")
