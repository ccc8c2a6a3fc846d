"""Competitive listing price on top of the solved margin floor."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from .cost_model import ProfitDetails, compute_profit
from .fees import minor_unit, minor_unit_decimals
from .lookup import CompetitorPrice, PricingLookup, ProductInfo
from .solver import SolveResult, solve_min_selling_price

logger = logging.getLogger(__name__)

UNDERCUT = "UndercutLowestCompetitor"
MAINTAIN_MIN_PROFIT = "MaintainMinProfit"
NO_COMPETITORS = "NoCompetitorsFound_MaintainMinProfit"


@dataclass(frozen=True)
class PriceSelection:
    price: float
    strategy: str
    lowest_competitor: float | None = None


@dataclass(frozen=True)
class OptimalPrice:
    optimal_price: float
    strategy: str
    profit_details: ProfitDetails
    min_selling_price_local: float
    solve: SolveResult
    lowest_competitor: float | None = None

    @property
    def is_degenerate(self) -> bool:
        return self.solve.is_degenerate


def find_lowest_competitor_price(
    competitor_prices: Iterable[CompetitorPrice],
    currency: str,
) -> float | None:
    """Lowest positive price quoted in ``currency``; None when nothing comparable."""
    relevant = [
        cp.price for cp in competitor_prices
        if cp.currency.upper() == currency.upper() and cp.price > 0
    ]
    return min(relevant) if relevant else None


def select_optimal_price(
    min_selling_price_local: float,
    profit_details: ProfitDetails,
    competitor_prices: Iterable[CompetitorPrice],
) -> PriceSelection:
    """Undercut the cheapest competitor by one minor unit unless that breaks the floor.

    The margin floor is hard: the returned price is never below
    ``min_selling_price_local``.
    """
    currency = profit_details.overseas_currency
    lowest = find_lowest_competitor_price(competitor_prices, currency)

    if lowest is None:
        logger.info(
            "No competitors found. Setting price to minimum profit level (%s %s)",
            min_selling_price_local, currency,
        )
        return PriceSelection(min_selling_price_local, NO_COMPETITORS)

    undercut = round(lowest - minor_unit(currency), minor_unit_decimals(currency))
    if undercut >= min_selling_price_local:
        return PriceSelection(undercut, UNDERCUT, lowest_competitor=lowest)

    logger.warning(
        "Cannot undercut competitor (%s %s) while maintaining min profit. "
        "Setting price to min profit level (%s %s)",
        lowest, currency, min_selling_price_local, currency,
    )
    return PriceSelection(min_selling_price_local, MAINTAIN_MIN_PROFIT, lowest_competitor=lowest)


def determine_optimal_selling_price(
    lookup: PricingLookup,
    product: ProductInfo,
    domestic_platform: str,
    overseas_platform: str,
    destination_country: str,
    competitor_prices: list[CompetitorPrice] | None = None,
    min_margin: float = 0.05,
    purchase_price_jpy: float | None = None,
) -> OptimalPrice:
    """Solve the margin floor, then pick a competitive price above it.

    Competitor prices default to the latest observations for the SKU on the
    overseas platform. The returned breakdown is for the chosen price.
    """
    solve = solve_min_selling_price(
        lookup,
        product,
        domestic_platform,
        overseas_platform,
        destination_country,
        min_margin,
        purchase_price_jpy=purchase_price_jpy,
    )
    details = solve.profit_details

    if competitor_prices is None:
        competitor_prices = lookup.get_competitor_prices(product.sku, details.overseas_platform)

    selection = select_optimal_price(solve.min_selling_price_local, details, competitor_prices)

    if selection.price != solve.min_selling_price_local:
        details = compute_profit(
            lookup,
            product,
            domestic_platform,
            details.overseas_platform,
            destination_country,
            selection.price,
            purchase_price_jpy=details.domestic_purchase_price_jpy,
        )

    return OptimalPrice(
        optimal_price=selection.price,
        strategy=selection.strategy,
        profit_details=details,
        min_selling_price_local=solve.min_selling_price_local,
        solve=solve,
        lowest_competitor=selection.lowest_competitor,
    )
