from datetime import UTC, date, datetime, time
from enum import Enum

from sqlmodel import Field, SQLModel


def _utc_naive_now() -> datetime:
    """Naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(UTC).replace(tzinfo=None)


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    id: int | None = Field(default=None, primary_key=True)
    # Owner of the calendar the slot is taken from
    provider_id: int = Field(foreign_key="users.id", index=True)
    appointment_date: date = Field(index=True)
    start_time: time
    duration_minutes: int | None = None
    client_id: int = Field(foreign_key="users.id", index=True)
    boat_id: int = Field(foreign_key="boats.id")
    service_category_id: int | None = Field(default=None, foreign_key="service_categories.id")
    creator_id: int = Field(foreign_key="users.id", index=True)
    invitee_id: int | None = Field(default=None, foreign_key="users.id", index=True)
    status: str = Field(default=AppointmentStatus.PENDING.value)
    description: str | None = None
    created_at: datetime = Field(default_factory=_utc_naive_now)
    updated_at: datetime = Field(default_factory=_utc_naive_now)


class ScheduleLock(SQLModel, table=True):
    """One row per provider/day, locked while a slot is checked and written."""

    __tablename__ = "schedule_locks"
    provider_id: int = Field(primary_key=True)
    lock_date: date = Field(primary_key=True)


class AppointmentCreate(SQLModel):
    # Defaults to the creator's own calendar
    provider_id: int | None = None
    appointment_date: date
    start_time: time
    duration_minutes: int | None = Field(default=None, ge=0)
    client_id: int
    boat_id: int
    service_category_id: int | None = None
    invitee_id: int | None = None
    status: AppointmentStatus | None = None
    description: str | None = None


class AppointmentUpdate(SQLModel):
    """Creator edits. No status field: status only changes through invitee responses."""

    appointment_date: date | None = None
    start_time: time | None = None
    duration_minutes: int | None = Field(default=None, ge=0)
    service_category_id: int | None = None
    description: str | None = None


class AppointmentPublic(SQLModel):
    id: int
    provider_id: int
    appointment_date: date
    start_time: time
    duration_minutes: int | None = None
    client_id: int
    boat_id: int
    service_category_id: int | None = None
    creator_id: int
    invitee_id: int | None = None
    status: str
    description: str | None = None
    created_at: datetime
    updated_at: datetime
