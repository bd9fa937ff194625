"""SQLAlchemy table metadata for the clinic scheduling schema.

Only the columns the repair operations read or write are declared; the live
schema carries more.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    TypeDecorator,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine


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


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

service_types_table = Table(
    "service_types",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("tenant_id", Integer, nullable=True, index=True),
    Column("name", String, nullable=False),
    Column("price", Numeric(10, 2, asdecimal=True), nullable=True),
    Column("duration_minutes", Integer, nullable=True),
)

appointments_table = Table(
    "appointments",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("tenant_id", Integer, nullable=True, index=True),
    Column("title", String, nullable=True),
    Column(
        "service_type_id",
        Integer,
        ForeignKey("service_types.id", ondelete="SET NULL"),
        nullable=True,
    ),
    Column("client_id", Integer, nullable=True),
    Column("start_time", UTCDateTime(), nullable=True),
    Column("end_time", UTCDateTime(), nullable=True),
)


def create_all_tables(bind: Engine | Connection) -> None:
    """Create any missing tables on ``bind`` (an engine or connection)."""

    metadata.create_all(bind)
