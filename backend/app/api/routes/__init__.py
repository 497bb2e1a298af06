"""Route registration helpers."""

from __future__ import annotations

from fastapi import APIRouter

from .analytics import router as analytics_router
from .assistant import router as assistant_router
from .time_windows import router as time_windows_router

api_router = APIRouter()
api_router.include_router(assistant_router, prefix="/assistant", tags=["assistant"])
api_router.include_router(analytics_router, prefix="/analytics", tags=["analytics"])
api_router.include_router(time_windows_router, prefix="/time-windows", tags=["time-windows"])

__all__ = ["api_router"]
