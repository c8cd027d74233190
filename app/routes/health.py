from fastapi import APIRouter

from app.core.timeutils import utcnow

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("")
def health():
    return {"success": True, "status": "ok", "timestamp": utcnow().isoformat()}
