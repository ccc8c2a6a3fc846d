"""Profit simulation, minimum price and optimal price endpoints."""

from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException

from ..config import settings
from ..pricing import ProfitCalculationError
from ..pricing.cost_model import ProfitDetails, compute_profit, load_product
from ..pricing.lookup import CompetitorPrice, DbLookup
from ..pricing.selector import determine_optimal_selling_price
from ..pricing.solver import solve_min_selling_price
from ..schemas import (
    MinPriceRequest,
    MinPriceResponse,
    OptimizeRequest,
    OptimizeResponse,
    ProfitDetailsResponse,
    ProfitRequest,
)
from .deps import get_lookup, pricing_http_error

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/profit", tags=["profit"])


def _details_response(details: ProfitDetails) -> ProfitDetailsResponse:
    return ProfitDetailsResponse(**asdict(details), total_cost_jpy=details.total_cost_jpy)


def _min_margin(value: float | None) -> float:
    return settings.default_min_margin if value is None else value


@router.post("/simulate", response_model=ProfitDetailsResponse)
def simulate_profit(body: ProfitRequest, lookup: DbLookup = Depends(get_lookup)):
    """Profit breakdown at a caller-chosen overseas selling price."""
    try:
        product = load_product(lookup, body.product_sku)
        details = compute_profit(
            lookup,
            product,
            body.domestic_platform,
            body.overseas_platform,
            body.destination_country_code,
            body.target_selling_price,
            purchase_price_jpy=body.manual_domestic_price,
        )
    except ProfitCalculationError as e:
        raise pricing_http_error(e) from e
    return _details_response(details)


@router.post("/min-price", response_model=MinPriceResponse)
def min_selling_price(body: MinPriceRequest, lookup: DbLookup = Depends(get_lookup)):
    try:
        product = load_product(lookup, body.product_sku)
        result = solve_min_selling_price(
            lookup,
            product,
            body.domestic_platform,
            body.overseas_platform,
            body.destination_country_code,
            _min_margin(body.min_profit_margin),
            purchase_price_jpy=body.manual_domestic_price,
        )
    except ProfitCalculationError as e:
        raise pricing_http_error(e) from e
    except ValueError as e:
        raise HTTPException(422, str(e)) from e

    return MinPriceResponse(
        min_selling_price_local=result.min_selling_price_local,
        currency=result.profit_details.overseas_currency,
        strategy=result.strategy.value,
        is_degenerate=result.is_degenerate,
        profit_details=_details_response(result.profit_details),
    )


@router.post("/optimize", response_model=OptimizeResponse)
def optimize_price(body: OptimizeRequest, lookup: DbLookup = Depends(get_lookup)):
    """Competitive price that still clears the margin floor.

    Without ``competitor_prices`` the latest stored observations for the SKU
    on the overseas platform are used.
    """
    competitors = None
    if body.competitor_prices is not None:
        competitors = [
            CompetitorPrice(price=c.price, currency=c.currency, platform=c.platform, listing_url=c.listing_url)
            for c in body.competitor_prices
        ]

    try:
        product = load_product(lookup, body.product_sku)
        result = determine_optimal_selling_price(
            lookup,
            product,
            body.domestic_platform,
            body.overseas_platform,
            body.destination_country_code,
            competitor_prices=competitors,
            min_margin=_min_margin(body.min_profit_margin),
            purchase_price_jpy=body.manual_domestic_price,
        )
    except ProfitCalculationError as e:
        raise pricing_http_error(e) from e
    except ValueError as e:
        raise HTTPException(422, str(e)) from e

    details = result.profit_details
    logger.info(
        "Optimal price %s on %s: %s %s (%s)",
        body.product_sku, details.overseas_platform, result.optimal_price,
        details.overseas_currency, result.strategy,
    )
    return OptimizeResponse(
        optimal_price=result.optimal_price,
        optimal_price_jpy=details.overseas_selling_price_jpy,
        currency=details.overseas_currency,
        strategy=result.strategy,
        min_selling_price_local=result.min_selling_price_local,
        solve_strategy=result.solve.strategy.value,
        is_degenerate=result.is_degenerate,
        lowest_competitor=result.lowest_competitor,
        profit_details=_details_response(details),
    )
