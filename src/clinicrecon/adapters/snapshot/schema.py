"""Pydantic models describing exported catalog and appointment rows."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from decimal import Decimal  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class SnapshotBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ServiceTypeRow(SnapshotBaseModel):
    id: int = Field(ge=0, strict=True)
    name: str
    price: Decimal | None = None
    tenant_id: int | None = None
    duration_minutes: int | None = None

    _normalize_price = field_validator("price", mode="before")(_blank_to_none)


class AppointmentRow(SnapshotBaseModel):
    id: int = Field(ge=0, strict=True)
    title: str | None = None
    service_type_id: int | None = Field(default=None, ge=0)
    tenant_id: int | None = None
    client_id: int | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None


class SnapshotDocument(SnapshotBaseModel):
    service_types: list[object] = Field(default_factory=list)
    appointments: list[object] = Field(default_factory=list)
