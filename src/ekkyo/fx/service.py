"""Exchange-rate resolution: TTL memo in front of the DB, refreshed from the live API."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from sqlalchemy.orm import Session

from ..cache import TtlCache
from ..config import settings
from ..database import SessionLocal
from ..models import ExchangeRate
from . import ExchangeRateApiError

logger = logging.getLogger(__name__)

BASE_CURRENCY = "JPY"


def _pair(from_currency: str, to_currency: str) -> tuple[str, str]:
    return from_currency.upper(), to_currency.upper()


def set_rate(
    db: Session,
    from_currency: str,
    to_currency: str,
    rate: float,
    source: str = "manual",
) -> ExchangeRate:
    """Upsert a rate. A stored inverse pair is rewritten to 1/rate to stay consistent."""
    if rate <= 0:
        raise ValueError(f"Exchange rate must be positive, got {rate}")
    src, dst = _pair(from_currency, to_currency)
    now = datetime.now(timezone.utc)

    row = db.query(ExchangeRate).filter_by(from_currency=src, to_currency=dst).first()
    if row is None:
        row = ExchangeRate(from_currency=src, to_currency=dst, rate=rate, source=source)
        db.add(row)
    else:
        row.rate = rate
        row.source = source
        row.updated_at = now

    inverse = db.query(ExchangeRate).filter_by(from_currency=dst, to_currency=src).first()
    if inverse is not None:
        inverse.rate = 1.0 / rate
        inverse.source = source
        inverse.updated_at = now

    db.commit()
    db.refresh(row)
    return row


def read_rate(db: Session, from_currency: str, to_currency: str) -> float | None:
    """Direct DB row, else the inverse row, else None."""
    src, dst = _pair(from_currency, to_currency)
    if src == dst:
        return 1.0
    row = db.query(ExchangeRate).filter_by(from_currency=src, to_currency=dst).first()
    if row is not None and row.rate > 0:
        return row.rate
    inverse = db.query(ExchangeRate).filter_by(from_currency=dst, to_currency=src).first()
    if inverse is not None and inverse.rate > 0:
        return 1.0 / inverse.rate
    return None


class ExchangeRateService:
    """Resolve currency pairs for the pricing core.

    Resolved rates are memoized for ``cache_ttl`` seconds so a burst of
    pricing calls costs one DB read per pair. ``refresh()`` pulls live rates
    and writes them through to the DB and the cache.
    """

    def __init__(
        self,
        client=None,
        session_factory: Callable[[], Session] = SessionLocal,
        cache: TtlCache | None = None,
    ) -> None:
        self._client = client
        self._session_factory = session_factory
        self._cache = cache or TtlCache(settings.exchange_rate_cache_ttl)
        self.last_refreshed_at: datetime | None = None

    @property
    def cache(self) -> TtlCache:
        return self._cache

    def get_rate(self, from_currency: str, to_currency: str, db: Session | None = None) -> float | None:
        """Return 1 ``from_currency`` in ``to_currency`` or None if unknown."""
        src, dst = _pair(from_currency, to_currency)
        if src == dst:
            return 1.0

        def load() -> float | None:
            if db is not None:
                return read_rate(db, src, dst)
            session = self._session_factory()
            try:
                return read_rate(session, src, dst)
            finally:
                session.close()

        return self._cache.get_or_set((src, dst), load)

    def store(self, db: Session, from_currency: str, to_currency: str, rate: float, source: str = "manual") -> ExchangeRate:
        row = set_rate(db, from_currency, to_currency, rate, source=source)
        src, dst = _pair(from_currency, to_currency)
        self._cache.invalidate((src, dst))
        self._cache.invalidate((dst, src))
        return row

    async def refresh(self, currencies: list[str] | None = None) -> dict[str, float]:
        """Fetch ``<currency> -> JPY`` live and persist. Returns the stored rates."""
        if self._client is None:
            raise ExchangeRateApiError("Live exchange rate client is not configured")

        stored: dict[str, float] = {}
        session = self._session_factory()
        try:
            for currency in currencies or settings.exchange_rate_currencies:
                rate = await self._client.rate(currency, BASE_CURRENCY)
                rate = round(rate, 4)
                self.store(session, currency, BASE_CURRENCY, rate, source="live")
                stored[currency.upper()] = rate
                logger.info("Live exchange rate: 1 %s = %s %s", currency.upper(), rate, BASE_CURRENCY)
        finally:
            session.close()

        self.last_refreshed_at = datetime.now(timezone.utc)
        return stored

    async def resolve_usd_jpy(self) -> tuple[float, str]:
        """USD->JPY with its provenance: live API, then DB, then the configured fallback.

        Used only by coarse screening; the pricing core never falls back to a
        hardcoded rate.
        """
        if self._client is not None:
            try:
                rates = await self.refresh(["USD"])
                return rates["USD"], "live"
            except ExchangeRateApiError as e:
                logger.warning("Live exchange rate API failed: %s", e)

        self._cache.invalidate(("USD", BASE_CURRENCY))
        rate = self.get_rate("USD", BASE_CURRENCY)
        if rate is not None:
            logger.info("DB exchange rate: 1 USD = %s JPY", rate)
            return rate, "database"

        logger.warning("Using fallback exchange rate: 1 USD = %s JPY", settings.fallback_usd_jpy_rate)
        return settings.fallback_usd_jpy_rate, "hardcoded"
