"""Landed cost and profit for one product at a given overseas selling price.

Pure over its ``PricingLookup``: the same inputs and reference data always
yield the same ``ProfitDetails``.

Cost components (all JPY):
  purchase price          what we pay on the domestic platform
  international shipping  zone/weight band table
  customs duty            selling price x bracketed duty rate
  domestic platform fee   always 0 (buyer side; the seller's fee is already in the price)
  overseas platform fee   selling price x fee rate + fixed fee x rate
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from . import (
    ExchangeRateUnavailable,
    InvalidPurchasePrice,
    InvalidSellingPrice,
    MissingProductData,
    PlatformNotConfigured,
    ProductNotFound,
)
from .fees import FeeSchedule, parse_domestic_platform, parse_overseas_platform
from .lookup import PricingLookup, ProductInfo

logger = logging.getLogger(__name__)

JPY = "JPY"
USD = "USD"
# 国内プラットフォームでは買い手として仕入れるため手数料は発生しない
DOMESTIC_PLATFORM_FEE_JPY = 0.0


@dataclass(frozen=True)
class ProfitDetails:
    estimated_profit_jpy: float
    profit_margin: float  # profit / overseas revenue (JPY)
    domestic_purchase_price_jpy: float
    overseas_selling_price_local: float
    overseas_selling_price_jpy: float
    exchange_rate: float  # overseas currency -> JPY
    international_shipping_cost_jpy: float
    customs_duty_jpy: float
    domestic_platform_fee_jpy: float
    overseas_platform_fee_jpy: float
    overseas_platform: str = ""
    overseas_currency: str = USD
    overseas_fee_rate: float = 0.0
    customs_duty_rate: float = 0.0

    @property
    def total_cost_jpy(self) -> float:
        return (
            self.domestic_purchase_price_jpy
            + self.international_shipping_cost_jpy
            + self.customs_duty_jpy
            + self.domestic_platform_fee_jpy
            + self.overseas_platform_fee_jpy
        )


# --- Input resolution shared with the solver ---


def load_product(lookup: PricingLookup, sku: str) -> ProductInfo:
    product = lookup.get_product(sku)
    if product is None:
        raise ProductNotFound(f"Product with SKU {sku} not found.", sku=sku)
    return product


def require_costing_data(product: ProductInfo) -> None:
    if not product.weight_kg or not product.hs_code:
        raise MissingProductData(
            f"Product {product.sku} is missing essential data (weight_kg or hs_code) for profit calculation.",
            sku=product.sku,
        )


def resolve_purchase_price(product: ProductInfo, override_jpy: float | None = None) -> float:
    """Caller-supplied price wins over the product's stored purchase price."""
    if override_jpy is not None:
        price = override_jpy
    elif product.purchase_price is not None:
        price = product.purchase_price
    else:
        raise InvalidPurchasePrice(
            f"No domestic purchase price available for {product.sku}.", sku=product.sku,
        )
    if price <= 0:
        raise InvalidPurchasePrice(
            f"Invalid domestic purchase price ({price}) for {product.sku}.", sku=product.sku,
        )
    return float(price)


def resolve_overseas_schedule(lookup: PricingLookup, overseas_platform: str) -> FeeSchedule:
    platform = parse_overseas_platform(overseas_platform)
    schedule = lookup.get_fee_schedule(platform.value)
    if schedule is None:
        raise PlatformNotConfigured(f"Overseas platform {platform.value} has no fee schedule.")
    return schedule


def rate_to_jpy(lookup: PricingLookup, currency: str) -> float:
    if currency.upper() == JPY:
        return 1.0
    rate = lookup.get_exchange_rate(currency, JPY)
    if rate is None or rate <= 0:
        raise ExchangeRateUnavailable(f"Exchange rate from {currency} to JPY not available.")
    return rate


def customs_rate_for(
    lookup: PricingLookup,
    product: ProductInfo,
    destination_country: str,
    value_jpy: float,
) -> float:
    """Duty rate for a JPY value, bracketed on its USD equivalent."""
    usd_jpy = lookup.get_exchange_rate(USD, JPY)
    if usd_jpy is None or usd_jpy <= 0:
        raise ExchangeRateUnavailable("Exchange rate USD to JPY not available for customs duty calculation.")
    return lookup.get_customs_duty_rate(product.hs_code, destination_country, value_jpy / usd_jpy)


# --- Cost model ---


def compute_profit(
    lookup: PricingLookup,
    product: ProductInfo,
    domestic_platform: str,
    overseas_platform: str,
    destination_country: str,
    selling_price_local: float,
    purchase_price_jpy: float | None = None,
) -> ProfitDetails:
    """Compute every cost component and the net profit at ``selling_price_local``."""
    require_costing_data(product)
    purchase_jpy = resolve_purchase_price(product, purchase_price_jpy)
    parse_domestic_platform(domestic_platform)
    schedule = resolve_overseas_schedule(lookup, overseas_platform)

    if selling_price_local <= 0:
        raise InvalidSellingPrice(
            f"Invalid overseas selling price ({selling_price_local}) on {schedule.platform} for {product.sku}.",
            sku=product.sku,
        )

    exchange_rate = rate_to_jpy(lookup, schedule.currency)
    selling_price_jpy = selling_price_local * exchange_rate

    shipping_jpy = lookup.get_shipping_cost(product.weight_kg, destination_country)

    fee_rate = schedule.fee_rate_for(product.category)
    overseas_fee_jpy = selling_price_jpy * fee_rate + schedule.fixed_fee_local_currency * exchange_rate

    duty_rate = customs_rate_for(lookup, product, destination_country, selling_price_jpy)
    customs_jpy = selling_price_jpy * duty_rate

    total_cost = purchase_jpy + shipping_jpy + customs_jpy + DOMESTIC_PLATFORM_FEE_JPY + overseas_fee_jpy
    profit = selling_price_jpy - total_cost
    margin = profit / selling_price_jpy if selling_price_jpy > 0 else 0.0

    logger.debug(
        "Profit %s %s->%s @ %.2f %s: profit=%.0f JPY margin=%.4f",
        product.sku, domestic_platform, schedule.platform, selling_price_local,
        schedule.currency, profit, margin,
    )

    return ProfitDetails(
        estimated_profit_jpy=profit,
        profit_margin=margin,
        domestic_purchase_price_jpy=purchase_jpy,
        overseas_selling_price_local=selling_price_local,
        overseas_selling_price_jpy=selling_price_jpy,
        exchange_rate=exchange_rate,
        international_shipping_cost_jpy=shipping_jpy,
        customs_duty_jpy=customs_jpy,
        domestic_platform_fee_jpy=DOMESTIC_PLATFORM_FEE_JPY,
        overseas_platform_fee_jpy=overseas_fee_jpy,
        overseas_platform=schedule.platform,
        overseas_currency=schedule.currency,
        overseas_fee_rate=fee_rate,
        customs_duty_rate=duty_rate,
    )
