from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.database.db import get_db
from app.models.events import EventCategory
from app.models.users import User
from app.routes.dependencies import get_current_user
from app.schemas.common import DataResponse, ListResponse, MessageResponse
from app.schemas.events import EventCreate, EventOut, EventStatsOut, EventUpdate
from app.services import events as event_service
from app.services.bookings import get_event_stats

router = APIRouter(prefix="/api/events", tags=["events"])


@router.get("", response_model=ListResponse[EventOut])
def list_events(
    category: EventCategory | None = None,
    on_date: date | None = Query(default=None, alias="date"),
    location: str | None = None,
    search: str | None = None,
    db: Session = Depends(get_db),
):
    events = event_service.list_events(
        db, category=category, on_date=on_date, location=location, search=search
    )
    data = [EventOut.model_validate(event) for event in events]
    return ListResponse(count=len(data), data=data)


@router.get("/{event_id}", response_model=DataResponse[EventOut])
def get_event(event_id: int, db: Session = Depends(get_db)):
    event = event_service.get_event(db, event_id)
    return DataResponse(data=EventOut.model_validate(event))


@router.get("/{event_id}/stats", response_model=DataResponse[EventStatsOut])
def event_stats(event_id: int, db: Session = Depends(get_db)):
    stats = get_event_stats(db, event_id)
    if not stats:
        raise NotFoundError("Event not found")
    return DataResponse(data=EventStatsOut(**stats))


@router.post("", response_model=DataResponse[EventOut], status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    event = event_service.create_event(db, payload, organizer=current_user)
    return DataResponse(data=EventOut.model_validate(event))


@router.put("/{event_id}", response_model=DataResponse[EventOut])
def update_event(
    event_id: int,
    payload: EventUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    event = event_service.update_event(db, event_id, payload, user=current_user)
    return DataResponse(data=EventOut.model_validate(event))


@router.delete("/{event_id}", response_model=MessageResponse)
def delete_event(
    event_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    event_service.delete_event(db, event_id, user=current_user)
    return MessageResponse()
