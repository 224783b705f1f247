"""SQLAlchemy table definitions - dialect-agnostic (works with SQLite and PostgreSQL)."""

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.types import JSON

metadata = MetaData()

# ============================================================================
# DATASETS TABLE
# ============================================================================
# Ids are assigned by the registry (0, 1, 2, ...), never by the database.
# The unique constraint on dataset_ref is the reference index.
datasets_table = Table(
    "datasets",
    metadata,
    Column("id", BigInteger, primary_key=True, autoincrement=False),
    Column("dataset_ref", Text, nullable=False),
    Column("analysis_ref", Text, nullable=False, server_default=text("''")),
    Column("owner", String(255), nullable=False),
    Column("is_public", Boolean, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("views", Integer, nullable=False, server_default=text("0")),
    Column("downloads", Integer, nullable=False, server_default=text("0")),
    Column("citations", Integer, nullable=False, server_default=text("0")),
    UniqueConstraint("dataset_ref", name="uq_datasets_dataset_ref"),
)

# Owner index: an actor's datasets in creation order
Index("idx_datasets_owner_id", datasets_table.c.owner, datasets_table.c.id)
Index("idx_datasets_is_public", datasets_table.c.is_public, datasets_table.c.id)


# ============================================================================
# EVENTS TABLE (append-only notification log)
# ============================================================================
# seq gives a total commit order; created_at alone can tie.
events_table = Table(
    "events",
    metadata,
    Column("seq", Integer, primary_key=True, autoincrement=True),
    Column("id", String(36), nullable=False, unique=True),
    Column("event_type", String(128), nullable=False),
    Column("payload", JSON, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
)

Index("idx_events_type_seq", events_table.c.event_type, events_table.c.seq)


# ============================================================================
# DELIVERIES TABLE (per-consumer-group tracking)
# ============================================================================
deliveries_table = Table(
    "deliveries",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("event_id", String(36), ForeignKey("events.id"), nullable=False),
    Column("consumer_group", String(128), nullable=False),
    Column("status", String(32), nullable=False, server_default=text("'pending'")),
    Column("claimed_at", DateTime(timezone=True), nullable=True),
    Column("delivered_at", DateTime(timezone=True), nullable=True),
    Column("delivery_error", Text, nullable=True),
    Column("retry_count", Integer, nullable=False, server_default=text("0")),
    Column("available_at", DateTime(timezone=True), nullable=True),  # retry backoff
    Column("updated_at", DateTime(timezone=True), nullable=False),
    UniqueConstraint("event_id", "consumer_group", name="uq_delivery_event_consumer"),
)

# Primary worker polling index
Index(
    "idx_deliveries_claim",
    deliveries_table.c.consumer_group,
    deliveries_table.c.status,
    deliveries_table.c.event_id,
    postgresql_where=text("status IN ('pending', 'claimed')"),
)

# Stale claim detection
Index(
    "idx_deliveries_stale",
    deliveries_table.c.claimed_at,
    postgresql_where=text("status = 'claimed'"),
)
