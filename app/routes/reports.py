from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database.db import get_db
from app.models.users import User
from app.routes.dependencies import require_admin
from app.schemas.common import DataResponse
from app.schemas.reports import ReportOut
from app.services.bookings import get_overall_report

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("", response_model=DataResponse[ReportOut])
def overall_report(_: User = Depends(require_admin), db: Session = Depends(get_db)):
    """Aggregate report across all events."""
    return DataResponse(data=ReportOut(**get_overall_report(db)))
