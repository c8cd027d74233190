from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database.db import get_db
from app.models.users import User
from app.routes.dependencies import get_current_user
from app.schemas.bookings import BookingOut, BookRequest
from app.schemas.common import DataResponse, ListResponse, MessageResponse
from app.services.bookings import cancel_booking, create_booking, list_user_bookings

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


@router.get("", response_model=ListResponse[BookingOut])
def my_bookings(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    bookings = [BookingOut.model_validate(b) for b in list_user_bookings(db, current_user.id)]
    return ListResponse(count=len(bookings), data=bookings)


@router.post("", response_model=DataResponse[BookingOut], status_code=status.HTTP_201_CREATED)
def book_tickets(
    payload: BookRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    booking = create_booking(
        db,
        event_id=payload.event_id,
        user_id=current_user.id,
        number_of_tickets=payload.number_of_tickets,
    )
    return DataResponse(data=BookingOut.model_validate(booking))


@router.delete("/{booking_id}", response_model=MessageResponse)
def cancel(
    booking_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    cancel_booking(db, booking_id=booking_id, user=current_user)
    return MessageResponse()
