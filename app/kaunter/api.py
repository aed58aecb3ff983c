from fastapi import APIRouter

from app.kaunter.core.config import settings
from app.kaunter.routers.cash_register import router as cash_register_router
from app.kaunter.routers.health import router as health_router
from app.kaunter.routers.metrics import router as metrics_router
from app.kaunter.routers.transactions import router as transactions_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(cash_register_router, tags=["cash-register"])
api_router.include_router(transactions_router, tags=["transactions"])
if settings.METRICS_ENABLED:
    api_router.include_router(metrics_router, tags=["ops"])
