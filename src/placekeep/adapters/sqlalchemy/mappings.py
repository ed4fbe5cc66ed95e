"""SQLAlchemy table metadata for the local durable state."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Final

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Integer,
    LargeBinary,
    MetaData,
    String,
    Table,
    Text,
    TypeDecorator,
)

from placekeep.domain.model import MutationKind

NAMING_CONVENTION: Final[dict[str, str]] = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=NAMING_CONVENTION)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


pending_mutation_table = Table(
    "pending_mutation",
    metadata,
    Column("sequence", Integer, primary_key=True, autoincrement=True),
    Column("temp_id", String(64), nullable=False, unique=True),
    Column(
        "kind",
        Enum(MutationKind, native_enum=False, length=32),
        nullable=False,
    ),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("place_json", Text, nullable=False),
    Column("visited_on", Date, nullable=False),
    Column("rating", Integer, nullable=True),
    Column("text", Text, nullable=True),
)

mutation_attachment_table = Table(
    "mutation_attachment",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "mutation_sequence",
        Integer,
        ForeignKey("pending_mutation.sequence", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("position", Integer, nullable=False),
    Column("name", String(255), nullable=False),
    Column("content_type", String(128), nullable=True),
    Column("data", LargeBinary, nullable=False),
)

place_snapshot_table = Table(
    "place_snapshot",
    metadata,
    Column("key", String(64), primary_key=True),
    Column("payload", Text, nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
)
