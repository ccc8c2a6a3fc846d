"""Exchange rate endpoints: stored pairs, manual overrides and live refresh."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..fx import ExchangeRateApiError
from ..models import ExchangeRate
from ..schemas import ExchangeRateResponse, ExchangeRateUpsert, RateRefreshResponse
from .deps import get_rate_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/rates", tags=["rates"])


@router.get("", response_model=list[ExchangeRateResponse])
def list_rates(db: Session = Depends(get_db)):
    return db.query(ExchangeRate).order_by(ExchangeRate.from_currency, ExchangeRate.to_currency).all()


@router.put("", response_model=ExchangeRateResponse)
def upsert_rate(body: ExchangeRateUpsert, db: Session = Depends(get_db), rates=Depends(get_rate_service)):
    """Manually set a pair. The inverse pair, if stored, is kept consistent."""
    if body.from_currency.upper() == body.to_currency.upper():
        raise HTTPException(422, "from_currency and to_currency must differ")
    row = rates.store(db, body.from_currency, body.to_currency, body.rate, source="manual")
    logger.info("Manual exchange rate: 1 %s = %s %s", row.from_currency, row.rate, row.to_currency)
    return row


@router.post("/refresh", response_model=RateRefreshResponse)
async def refresh_rates(rates=Depends(get_rate_service)):
    try:
        refreshed = await rates.refresh()
    except ExchangeRateApiError as e:
        raise HTTPException(502, f"Exchange rate API error: {e}") from e
    return RateRefreshResponse(rates=refreshed, refreshed_at=rates.last_refreshed_at)
