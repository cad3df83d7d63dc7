"""Create treatments, users and bookings tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Initial schema: the treatment catalog, registered users, and the
       bookings each user appends.
How:   UUID keys are generated by the application (no server-side UUID
       function), so the same migration runs on PostgreSQL and SQLite.

Rollback: downgrade() drops all three tables (destructive).
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
        "treatments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "name",
            sa.String(100),
            nullable=False,
            comment="Display name, unique across the catalog",
        ),
        sa.Column(
            "category",
            sa.String(50),
            nullable=False,
            comment="Catalog category label",
        ),
        sa.Column(
            "icon",
            sa.String(255),
            nullable=False,
            comment="Icon file name shown by the frontend",
        ),
        sa.Column(
            "sort_order",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("0"),
            comment="Position in the catalog listing",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index("idx_treatments_sort_order", "treatments", ["sort_order"])

    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("first_name", sa.String(30), nullable=False),
        sa.Column("last_name", sa.String(30), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("mobile_phone", sa.String(16), nullable=False),
        sa.Column("password_hash", sa.String(60), nullable=False),
        sa.Column("access_token", sa.String(256), nullable=False),
        sa.Column(
            "access_token_digest",
            sa.String(64),
            nullable=False,
            comment="SHA-256 hex digest of access_token; authentication lookup key",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
        sa.UniqueConstraint("mobile_phone"),
        sa.UniqueConstraint("access_token"),
        sa.UniqueConstraint("access_token_digest"),
        sa.UniqueConstraint("email", "mobile_phone", name="uq_users_email_mobile_phone"),
    )

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("treatment_id", sa.Uuid(), nullable=False),
        sa.Column(
            "picked_date",
            sa.Date(),
            nullable=True,
            comment="Date chosen by the client; no server-side slot checking",
        ),
        sa.Column(
            "booked_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["treatment_id"], ["treatments.id"]),
    )
    # Serves "bookings of one user in append order"
    op.create_index("idx_bookings_user_id", "bookings", ["user_id", "id"])


def downgrade() -> None:
    op.drop_index("idx_bookings_user_id", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("users")
    op.drop_index("idx_treatments_sort_order", table_name="treatments")
    op.drop_table("treatments")
