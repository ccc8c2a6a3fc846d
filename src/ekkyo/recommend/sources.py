"""Market listing sources for keyword screening.

Scrapers live outside this service and push observations into
``market_prices``; ``MarketPriceSource`` reads them back per keyword and
platform. Anything with an async ``fetch(keyword)`` can stand in.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Protocol
from urllib.parse import quote

from sqlalchemy.orm import Session

from ..database import SessionLocal
from ..models import MarketPrice
from ..pricing.fees import DomesticPlatform, OverseasPlatform

logger = logging.getLogger(__name__)

SEARCH_URL_TEMPLATES = {
    OverseasPlatform.EBAY.value: "https://www.ebay.com/sch/i.html?_nkw={q}&_sacat=0",
    OverseasPlatform.AMAZON.value: "https://www.amazon.com/s?k={q}",
    OverseasPlatform.STOCKX.value: "https://stockx.com/search?s={q}",
    OverseasPlatform.MERCARI_US.value: "https://www.mercari.com/search/?keyword={q}",
}


def search_url(platform: str, keyword: str) -> str:
    template = SEARCH_URL_TEMPLATES.get(platform)
    return template.format(q=quote(keyword)) if template else ""


@dataclass(frozen=True)
class MarketListing:
    platform: str
    price: float
    currency: str
    title: str = ""
    listing_url: str = ""
    image_url: str = ""
    data_source: str = "scraped"


class ListingSource(Protocol):
    platform: str

    async def fetch(self, keyword: str) -> list[MarketListing]: ...


class MarketPriceSource:
    """Latest stored observations for one platform."""

    def __init__(
        self,
        platform: str,
        session_factory: Callable[[], Session] = SessionLocal,
        limit: int = 20,
    ) -> None:
        self.platform = platform
        self._session_factory = session_factory
        self._limit = limit

    async def fetch(self, keyword: str) -> list[MarketListing]:
        db = self._session_factory()
        try:
            rows = (
                db.query(MarketPrice)
                .filter(MarketPrice.keyword == keyword, MarketPrice.platform == self.platform)
                .order_by(MarketPrice.scraped_at.desc())
                .limit(self._limit)
                .all()
            )
            return [
                MarketListing(
                    platform=r.platform,
                    price=r.price,
                    currency=r.currency,
                    title=r.title,
                    listing_url=r.listing_url,
                    image_url=r.image_url,
                    data_source=r.data_source,
                )
                for r in rows
            ]
        finally:
            db.close()


def default_sources(
    session_factory: Callable[[], Session] = SessionLocal,
) -> tuple[list[MarketPriceSource], list[MarketPriceSource]]:
    """(domestic, overseas) DB-backed sources for every known platform."""
    domestic = [MarketPriceSource(p.value, session_factory) for p in DomesticPlatform]
    overseas = [MarketPriceSource(p.value, session_factory) for p in OverseasPlatform]
    return domestic, overseas
