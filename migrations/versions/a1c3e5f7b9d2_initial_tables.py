"""initial_tables

Revision ID: a1c3e5f7b9d2
Revises:
Create Date: 2026-10-16 09:12:44.318207

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1c3e5f7b9d2"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # DATASETS
    op.create_table(
        "datasets",
        sa.Column("id", sa.BigInteger(), autoincrement=False, nullable=False),
        sa.Column("dataset_ref", sa.Text(), nullable=False),
        sa.Column("analysis_ref", sa.Text(), server_default=sa.text("''"), nullable=False),
        sa.Column("owner", sa.String(255), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("views", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("downloads", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("citations", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("dataset_ref", name="uq_datasets_dataset_ref"),
    )
    op.create_index("idx_datasets_owner_id", "datasets", ["owner", "id"])
    op.create_index("idx_datasets_is_public", "datasets", ["is_public", "id"])

    # EVENTS
    op.create_table(
        "events",
        sa.Column("seq", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("event_type", sa.String(128), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("seq"),
        sa.UniqueConstraint("id"),
    )
    op.create_index("idx_events_type_seq", "events", ["event_type", "seq"])

    # DELIVERIES
    op.create_table(
        "deliveries",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("event_id", sa.String(36), nullable=False),
        sa.Column("consumer_group", sa.String(128), nullable=False),
        sa.Column("status", sa.String(32), server_default=sa.text("'pending'"), nullable=False),
        sa.Column("claimed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("delivered_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("delivery_error", sa.Text(), nullable=True),
        sa.Column("retry_count", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("available_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["event_id"], ["events.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("event_id", "consumer_group", name="uq_delivery_event_consumer"),
    )
    op.create_index(
        "idx_deliveries_claim",
        "deliveries",
        ["consumer_group", "status", "event_id"],
        postgresql_where=sa.text("status IN ('pending', 'claimed')"),
    )
    op.create_index(
        "idx_deliveries_stale",
        "deliveries",
        ["claimed_at"],
        postgresql_where=sa.text("status = 'claimed'"),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("idx_deliveries_stale", table_name="deliveries")
    op.drop_index("idx_deliveries_claim", table_name="deliveries")
    op.drop_table("deliveries")
    op.drop_index("idx_events_type_seq", table_name="events")
    op.drop_table("events")
    op.drop_index("idx_datasets_is_public", table_name="datasets")
    op.drop_index("idx_datasets_owner_id", table_name="datasets")
    op.drop_table("datasets")
