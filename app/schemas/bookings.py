from datetime import datetime

from pydantic import Field

from app.schemas.common import APIModel
from app.schemas.events import EventSummary


class BookRequest(APIModel):
    event_id: int = Field(ge=1)
    number_of_tickets: int = Field(default=1, ge=1)


class BookingOut(APIModel):
    id: int
    event_id: int
    user_id: int
    number_of_tickets: int
    status: str
    booking_date: datetime
    event: EventSummary | None = None
