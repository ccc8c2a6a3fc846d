"""Reference-data lookups consumed by the pricing core.

The cost model, solver and selector only talk to a ``PricingLookup``.
``DbLookup`` is the production implementation over the SQLAlchemy tables
and the exchange-rate service.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy.orm import Session

from ..models import CustomsDuty, MarketPrice, Platform, Product, ShippingRate, ShippingZone
from . import NoShippingRateFound
from .fees import FeeSchedule

logger = logging.getLogger(__name__)

DEFAULT_ZONE = "USA"
COUNTRY_ZONES = {
    "US": "USA",
    "USA": "USA",
    "GB": "Europe",
    "DE": "Europe",
    "FR": "Europe",
}

COMPETITOR_PRICE_LIMIT = 10


@dataclass(frozen=True)
class ProductInfo:
    sku: str
    category: str = ""
    weight_kg: float | None = None
    hs_code: str | None = None
    purchase_price: float | None = None  # JPY


@dataclass(frozen=True)
class CompetitorPrice:
    price: float
    currency: str
    platform: str = ""
    listing_url: str = ""


class PricingLookup(Protocol):
    def get_product(self, sku: str) -> ProductInfo | None: ...

    def get_fee_schedule(self, platform: str) -> FeeSchedule | None: ...

    def get_exchange_rate(self, from_currency: str, to_currency: str) -> float | None: ...

    def get_shipping_cost(self, weight_kg: float, country_code: str) -> float: ...

    def get_customs_duty_rate(self, hs_code: str, country_code: str, value_usd: float) -> float: ...

    def get_competitor_prices(self, sku: str, platform: str) -> list[CompetitorPrice]: ...


def zone_for_country(country_code: str) -> str:
    return COUNTRY_ZONES.get((country_code or "").upper(), DEFAULT_ZONE)


def product_info(product: Product) -> ProductInfo:
    return ProductInfo(
        sku=product.sku,
        category=product.category or "",
        weight_kg=product.weight_kg,
        hs_code=product.hs_code,
        purchase_price=product.purchase_price,
    )


def pick_shipping_band(rates: list[ShippingRate], weight_kg: float) -> ShippingRate | None:
    """Band with min <= weight < max (max NULL = unbounded)."""
    for band in sorted(rates, key=lambda r: r.min_weight_kg, reverse=True):
        if weight_kg >= band.min_weight_kg and (band.max_weight_kg is None or weight_kg < band.max_weight_kg):
            return band
    return None


def pick_duty_rule(rules: list[CustomsDuty], hs_code: str, value_usd: float) -> CustomsDuty | None:
    """Most specific prefix first; the first rule whose value bracket contains the value wins."""
    relevant = [r for r in rules if hs_code.startswith(r.hs_code_prefix)]
    relevant.sort(key=lambda r: (-len(r.hs_code_prefix), r.id or 0))
    for rule in relevant:
        above_min = rule.min_value_usd is None or value_usd >= rule.min_value_usd
        below_max = rule.max_value_usd is None or value_usd <= rule.max_value_usd
        if above_min and below_max:
            return rule
    return None


class DbLookup:
    """``PricingLookup`` backed by a DB session and an ``ExchangeRateService``."""

    def __init__(self, db: Session, rates) -> None:
        self._db = db
        self._rates = rates

    def get_product(self, sku: str) -> ProductInfo | None:
        product = self._db.query(Product).filter(Product.sku == sku).first()
        if product is None:
            return None
        return product_info(product)

    def get_fee_schedule(self, platform: str) -> FeeSchedule | None:
        row = self._db.query(Platform).filter(Platform.name == platform).first()
        if row is None:
            return None
        return FeeSchedule(
            platform=row.name,
            currency=row.currency,
            base_fee_percentage=row.base_fee_percentage,
            fixed_fee_local_currency=row.fixed_fee_local_currency or 0.0,
        )

    def get_exchange_rate(self, from_currency: str, to_currency: str) -> float | None:
        return self._rates.get_rate(from_currency, to_currency, db=self._db)

    def get_shipping_cost(self, weight_kg: float, country_code: str) -> float:
        zone_name = zone_for_country(country_code)
        zone = self._db.query(ShippingZone).filter(ShippingZone.name == zone_name).first()
        if zone is None:
            raise NoShippingRateFound(f"No shipping zone found for country code: {country_code}")

        band = pick_shipping_band(list(zone.rates), weight_kg)
        if band is None:
            raise NoShippingRateFound(f"No shipping rate found for weight {weight_kg}kg to zone {zone_name}")
        return band.cost_jpy

    def get_customs_duty_rate(self, hs_code: str, country_code: str, value_usd: float) -> float:
        rules = (
            self._db.query(CustomsDuty)
            .filter(CustomsDuty.country_code == (country_code or "").upper())
            .all()
        )
        rule = pick_duty_rule(rules, hs_code, value_usd)
        if rule is None:
            logger.warning(
                "No customs duty rule for HS %s to %s at $%.2f, assuming 0%%",
                hs_code, country_code, value_usd,
            )
            return 0.0
        return rule.duty_percentage

    def get_competitor_prices(self, sku: str, platform: str) -> list[CompetitorPrice]:
        rows = (
            self._db.query(MarketPrice)
            .filter(
                MarketPrice.product_sku == sku,
                MarketPrice.platform == platform,
                MarketPrice.data_source == "scraped",
            )
            .order_by(MarketPrice.scraped_at.desc())
            .limit(COMPETITOR_PRICE_LIMIT)
            .all()
        )
        return [
            CompetitorPrice(price=r.price, currency=r.currency, platform=r.platform, listing_url=r.listing_url)
            for r in rows
        ]
