"""Minimum overseas selling price that keeps a target margin.

The overseas fee and the customs duty are percentages of the unknown
selling price, so the price is solved algebraically rather than by
substitution.

    F = purchase + shipping + domestic fee (0) + overseas fixed fee (JPY)
    r = overseas fee rate + estimated duty rate
    m = 1 + min_margin

    P = (F + P*r) * m   =>   P = F*m / (1 - r*m)

The margin is a markup on landed cost: at P, profit == min_margin * total cost.
The duty rate is estimated from the purchase price in USD because the real
selling price is still unknown.

When 1 - r*m <= 0 no finite price satisfies the margin; the solver then
returns 2*F tagged ``FallbackDoubleCost`` so callers can tell it apart from a
real solution.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum

from .cost_model import (
    DOMESTIC_PLATFORM_FEE_JPY,
    ProfitDetails,
    compute_profit,
    customs_rate_for,
    rate_to_jpy,
    require_costing_data,
    resolve_overseas_schedule,
    resolve_purchase_price,
)
from .fees import minor_unit_decimals, parse_domestic_platform
from .lookup import PricingLookup, ProductInfo

logger = logging.getLogger(__name__)

FALLBACK_COST_MULTIPLIER = 2


class SolveStrategy(str, Enum):
    ANALYTIC = "AnalyticInversion"
    FALLBACK = "FallbackDoubleCost"


@dataclass(frozen=True)
class SolveResult:
    min_selling_price_local: float
    profit_details: ProfitDetails
    strategy: SolveStrategy
    required_price_jpy: float
    fixed_costs_jpy: float
    variable_rate: float
    margin_multiplier: float

    @property
    def is_degenerate(self) -> bool:
        return self.strategy is SolveStrategy.FALLBACK


def round_up_to_minor_unit(amount: float, currency: str) -> float:
    """Ceil to cents (whole yen for JPY) so the margin floor is never undershot."""
    decimals = minor_unit_decimals(currency)
    factor = 10 ** decimals
    # round() first strips float noise such as 158.49000000000001 * 100
    return round(math.ceil(round(amount * factor, 6)) / factor, decimals)


def solve_required_price_jpy(
    fixed_costs_jpy: float,
    variable_rate: float,
    min_margin: float,
) -> tuple[float, SolveStrategy]:
    """Closed-form solution of P = (F + P*r) * (1 + margin)."""
    if min_margin <= -1:
        raise ValueError(f"Minimum margin must be greater than -100%, got {min_margin}")
    multiplier = 1.0 + min_margin
    denominator = 1.0 - variable_rate * multiplier
    if denominator <= 0:
        return fixed_costs_jpy * FALLBACK_COST_MULTIPLIER, SolveStrategy.FALLBACK
    return fixed_costs_jpy * multiplier / denominator, SolveStrategy.ANALYTIC


def solve_min_selling_price(
    lookup: PricingLookup,
    product: ProductInfo,
    domestic_platform: str,
    overseas_platform: str,
    destination_country: str,
    min_margin: float,
    purchase_price_jpy: float | None = None,
) -> SolveResult:
    """Lowest local-currency price whose profit is at least ``min_margin`` of landed cost."""
    require_costing_data(product)
    purchase_jpy = resolve_purchase_price(product, purchase_price_jpy)
    parse_domestic_platform(domestic_platform)
    schedule = resolve_overseas_schedule(lookup, overseas_platform)
    exchange_rate = rate_to_jpy(lookup, schedule.currency)

    # 1. Costs that do not depend on the selling price
    shipping_jpy = lookup.get_shipping_cost(product.weight_kg, destination_country)
    fixed_fee_jpy = schedule.fixed_fee_local_currency * exchange_rate
    fixed_costs = purchase_jpy + shipping_jpy + DOMESTIC_PLATFORM_FEE_JPY + fixed_fee_jpy

    # 2. Rates applied to the selling price
    fee_rate = schedule.fee_rate_for(product.category)
    duty_rate = customs_rate_for(lookup, product, destination_country, purchase_jpy)
    variable_rate = fee_rate + duty_rate

    # 3. Invert
    required_jpy, strategy = solve_required_price_jpy(fixed_costs, variable_rate, min_margin)
    if strategy is SolveStrategy.FALLBACK:
        logger.warning(
            "Degenerate price inversion for %s on %s (rate=%.4f, margin=%.4f): "
            "falling back to %dx fixed costs",
            product.sku, schedule.platform, variable_rate, min_margin, FALLBACK_COST_MULTIPLIER,
        )

    # 4. Local currency, rounded up to the minor unit
    min_price_local = round_up_to_minor_unit(required_jpy / exchange_rate, schedule.currency)

    # 5. Breakdown at exactly the price we report
    details = compute_profit(
        lookup,
        product,
        domestic_platform,
        schedule.platform,
        destination_country,
        min_price_local,
        purchase_price_jpy=purchase_jpy,
    )

    return SolveResult(
        min_selling_price_local=min_price_local,
        profit_details=details,
        strategy=strategy,
        required_price_jpy=required_jpy,
        fixed_costs_jpy=fixed_costs,
        variable_rate=variable_rate,
        margin_multiplier=1.0 + min_margin,
    )
