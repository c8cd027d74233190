from app.schemas.common import APIModel


class ReportOut(APIModel):
    total_capacity: int
    total_booked: int
    total_active_bookings: int
