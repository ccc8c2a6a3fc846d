"""Shared dependencies: app services and pricing error mapping."""

from __future__ import annotations

from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..pricing import (
    ExchangeRateUnavailable,
    InvalidPurchasePrice,
    InvalidSellingPrice,
    MissingProductData,
    NoShippingRateFound,
    PlatformNotConfigured,
    ProductNotFound,
    ProfitCalculationError,
)
from ..pricing.lookup import DbLookup

_STATUS_CODES: dict[type[ProfitCalculationError], int] = {
    ProductNotFound: 404,
    MissingProductData: 422,
    InvalidPurchasePrice: 422,
    InvalidSellingPrice: 422,
    PlatformNotConfigured: 422,
    ExchangeRateUnavailable: 503,
    NoShippingRateFound: 409,
}


def get_rate_service():
    from ..main import app_state

    service = app_state.get("rates")
    if service is None:
        raise HTTPException(503, "Exchange rate service is not running")
    return service


def get_aggregator():
    from ..main import app_state

    aggregator = app_state.get("recommender")
    if aggregator is None:
        raise HTTPException(503, "Recommendation service is not running")
    return aggregator


def get_lookup(db: Session = Depends(get_db), rates=Depends(get_rate_service)) -> DbLookup:
    return DbLookup(db, rates)


def pricing_http_error(e: ProfitCalculationError) -> HTTPException:
    return HTTPException(_STATUS_CODES.get(type(e), 422), str(e))
