from datetime import datetime
from typing import Any

from pydantic import ConfigDict, Field, field_validator

from app.core.timeutils import to_naive_utc
from app.models.events import DEFAULT_EVENT_IMAGE, EventCategory
from app.schemas.common import APIModel
from app.schemas.users import UserSummary

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


def _parse_event_date(value: Any) -> Any:
    # Accept a bare YYYY-MM-DD as midnight
    if isinstance(value, str) and len(value) == 10:
        return f"{value}T00:00:00"
    return value


# ---------- Event ----------
class EventCreate(APIModel):
    title: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1)
    category: EventCategory
    location: str = Field(min_length=1, max_length=255)
    date: datetime
    time: str = Field(pattern=TIME_PATTERN)
    duration: int = Field(ge=1)
    capacity: int = Field(ge=1)
    price: float = Field(default=0, ge=0)
    image: str = Field(default=DEFAULT_EVENT_IMAGE, max_length=500)
    featured: bool = False

    @field_validator("title", "description", "location", mode="before")
    @classmethod
    def strip_text(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, value: Any) -> Any:
        return _parse_event_date(value)

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


class EventUpdate(APIModel):
    """Partial update. Capacity and organizer are fixed at creation."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, min_length=1)
    category: EventCategory | None = None
    location: str | None = Field(default=None, min_length=1, max_length=255)
    date: datetime | None = None
    time: str | None = Field(default=None, pattern=TIME_PATTERN)
    duration: int | None = Field(default=None, ge=1)
    price: float | None = Field(default=None, ge=0)
    image: str | None = Field(default=None, max_length=500)
    featured: bool | None = None

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, value: Any) -> Any:
        return _parse_event_date(value)

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value: datetime | None) -> datetime | None:
        return to_naive_utc(value) if value is not None else None


class EventOut(APIModel):
    id: int
    title: str
    description: str
    category: str
    location: str
    date: datetime
    time: str
    duration: int
    capacity: int
    price: float
    image: str
    featured: bool
    organizer_id: int
    organizer: UserSummary | None = None
    booked_count: int
    available_spots: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class EventSummary(APIModel):
    id: int
    title: str
    date: datetime
    time: str
    location: str
    image: str
    price: float


class EventStatsOut(APIModel):
    event_id: int
    capacity: int
    booked_count: int
    available_spots: int
    active_bookings: int
