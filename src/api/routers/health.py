from __future__ import annotations

from fastapi import APIRouter

from api.schemas import HealthStatus

router = APIRouter(tags=["health"])


@router.get("/health", summary="Health check", response_model=HealthStatus)
def health() -> HealthStatus:
    return HealthStatus(status="ok")


__all__ = ["router"]
