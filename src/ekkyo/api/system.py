"""Health check and scheduler control endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Product
from ..schemas import HealthResponse, ServiceStatus

router = APIRouter(prefix="/api", tags=["system"])


@router.get("/health", response_model=HealthResponse)
def health_check(db: Session = Depends(get_db)):
    from ..main import app_state

    scheduler = app_state.get("scheduler")
    running = scheduler.running if scheduler else False

    services: list[ServiceStatus] = []
    rates = app_state.get("rates")
    if rates is None:
        services.append(ServiceStatus(name="exchange_rates", status="disabled"))
    else:
        refreshed = rates.last_refreshed_at
        services.append(ServiceStatus(
            name="exchange_rates",
            status="ok" if refreshed else "error",
            detail=f"last live refresh {refreshed.isoformat()}" if refreshed else "no live refresh yet",
        ))
    services.append(ServiceStatus(
        name="recommendations",
        status="ok" if app_state.get("recommender") else "disabled",
    ))

    return HealthResponse(
        status="ok",
        scheduler_running=running,
        product_count=db.query(Product).count(),
        services=services,
    )


@router.post("/scheduler/pause")
def pause_scheduler():
    from ..main import app_state

    scheduler = app_state.get("scheduler")
    if scheduler:
        scheduler.pause()
    return {"status": "paused"}


@router.post("/scheduler/resume")
def resume_scheduler():
    from ..main import app_state

    scheduler = app_state.get("scheduler")
    if scheduler:
        scheduler.resume()
    return {"status": "resumed"}
