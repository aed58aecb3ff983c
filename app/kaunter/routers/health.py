from fastapi import APIRouter, Depends, Request
from sqlalchemy import text

from app.kaunter.core.config import settings
from app.kaunter.core.error_catalog import ErrorCatalog
from app.kaunter.core.errors import error_response
from app.kaunter.db.session import get_db

router = APIRouter()


def _trace_id(request: Request) -> str:
    return getattr(request.state, "trace_id", "")


@router.get("/health")
async def health(request: Request):
    return {"status": "ok", "app": settings.APP_NAME, "trace_id": _trace_id(request)}


@router.get("/ready")
def ready(request: Request, db=Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
    except Exception as exc:
        return error_response(
            code=ErrorCatalog.DB_UNAVAILABLE.code,
            message=ErrorCatalog.DB_UNAVAILABLE.message,
            details={"type": exc.__class__.__name__},
            trace_id=_trace_id(request),
            status_code=ErrorCatalog.DB_UNAVAILABLE.status_code,
        )
    return {"status": "ready", "trace_id": _trace_id(request)}
