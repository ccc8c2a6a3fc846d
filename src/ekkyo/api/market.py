"""Observed market prices pushed in by external scrapers."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import MarketPrice
from ..schemas import MarketPriceCreate, MarketPriceResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/market-prices", tags=["market"])


@router.post("", response_model=list[MarketPriceResponse], status_code=201)
def add_market_prices(body: list[MarketPriceCreate], db: Session = Depends(get_db)):
    rows = []
    for item in body:
        row = MarketPrice(**item.model_dump())
        row.currency = row.currency.upper()
        db.add(row)
        rows.append(row)
    db.commit()
    for row in rows:
        db.refresh(row)
    logger.info("Stored %d market price observations", len(rows))
    return rows


@router.get("", response_model=list[MarketPriceResponse])
def list_market_prices(
    keyword: str | None = None,
    product_sku: str | None = None,
    platform: str | None = None,
    limit: int = 100,
    db: Session = Depends(get_db),
):
    q = db.query(MarketPrice)
    if keyword:
        q = q.filter(MarketPrice.keyword == keyword)
    if product_sku:
        q = q.filter(MarketPrice.product_sku == product_sku)
    if platform:
        q = q.filter(MarketPrice.platform == platform)
    return q.order_by(MarketPrice.scraped_at.desc()).limit(limit).all()
