from datetime import UTC, datetime
from enum import Enum

from sqlmodel import Field, SQLModel


def _utc_naive_now() -> datetime:
    """Naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(UTC).replace(tzinfo=None)


class RequestStatus(str, Enum):
    SUBMITTED = "submitted"
    FORWARDED = "forwarded"


class Urgency(str, Enum):
    NORMAL = "normal"
    URGENT = "urgent"


class ServiceRequest(SQLModel, table=True):
    __tablename__ = "service_requests"
    id: int | None = Field(default=None, primary_key=True)
    client_id: int = Field(foreign_key="users.id", index=True)
    boat_id: int = Field(foreign_key="boats.id", index=True)
    service_category_id: int = Field(foreign_key="service_categories.id")
    description: str
    urgency: str = Urgency.NORMAL.value
    status: str = Field(default=RequestStatus.SUBMITTED.value)
    # Set at most once, by the resolver (conditional update)
    assigned_provider_id: int | None = Field(default=None, foreign_key="users.id", index=True)
    forwarded_company_id: int | None = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(default_factory=_utc_naive_now)


class ServiceRequestCreate(SQLModel):
    boat_id: int
    service_category_id: int
    description: str
    urgency: Urgency = Urgency.NORMAL


class ServiceRequestPublic(SQLModel):
    id: int
    client_id: int
    boat_id: int
    service_category_id: int
    description: str
    urgency: str
    status: str
    assigned_provider_id: int | None = None
    forwarded_company_id: int | None = None
    created_at: datetime
