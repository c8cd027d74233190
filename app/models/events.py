import enum
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database.db import Base

if TYPE_CHECKING:
    from app.models.bookings import Booking
    from app.models.users import User

DEFAULT_EVENT_IMAGE = (
    "https://images.pexels.com/photos/2747449/pexels-photo-2747449.jpeg"
    "?auto=compress&cs=tinysrgb&w=1260&h=750&dpr=1"
)


class EventCategory(str, enum.Enum):
    CONFERENCE = "conference"
    WORKSHOP = "workshop"
    SEMINAR = "seminar"
    CONCERT = "concert"
    EXHIBITION = "exhibition"
    SPORT = "sport"
    NETWORKING = "networking"
    OTHER = "other"


class Event(Base):
    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    # Stored as naive UTC
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    time: Mapped[str] = mapped_column(String(5), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    # Tickets held by non-cancelled bookings
    booked_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    price: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    image: Mapped[str] = mapped_column(String(500), nullable=False, default=DEFAULT_EVENT_IMAGE)
    organizer_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )

    organizer: Mapped["User"] = relationship(back_populates="events")
    bookings: Mapped[list["Booking"]] = relationship(
        back_populates="event", cascade="all, delete-orphan"
    )

    @property
    def available_spots(self) -> int:
        return self.capacity - self.booked_count
