"""Coarse best-route screening for caller-supplied overseas prices."""

from __future__ import annotations

from dataclasses import replace

from fastapi import APIRouter, Depends, HTTPException

from ..pricing.fees import DEFAULT_FEE_SCHEDULES, FeeSchedule
from ..pricing.routes import RouteAssumptions, build_candidate, select_best_route
from ..schemas import BestRouteRequest, BestRouteResponse, RouteCandidateIn, RouteResponse
from .deps import get_rate_service

router = APIRouter(prefix="/api/routes", tags=["routes"])


def _schedule_for(candidate: RouteCandidateIn) -> FeeSchedule | None:
    """Default fee table for the platform, with any caller overrides applied."""
    default = DEFAULT_FEE_SCHEDULES.get(candidate.platform)
    if candidate.fee_rate is None and candidate.fixed_fee is None:
        return default
    base = default or FeeSchedule(platform=candidate.platform, currency="USD", base_fee_percentage=0.0)
    return replace(
        base,
        base_fee_percentage=base.base_fee_percentage if candidate.fee_rate is None else candidate.fee_rate,
        fixed_fee_local_currency=base.fixed_fee_local_currency if candidate.fixed_fee is None else candidate.fixed_fee,
    )


@router.post("/best", response_model=BestRouteResponse)
async def best_route(body: BestRouteRequest, rates=Depends(get_rate_service)):
    if not body.candidates:
        raise HTTPException(422, "At least one overseas candidate is required")

    exchange_rate = body.exchange_rate
    if exchange_rate is None:
        exchange_rate, _source = await rates.resolve_usd_jpy()

    candidates = [
        build_candidate(c.platform, c.price, exchange_rate, schedule=_schedule_for(c))
        for c in body.candidates
    ]

    assumptions = RouteAssumptions.from_settings()
    if body.min_profit_jpy is not None:
        assumptions = replace(assumptions, min_profit_jpy=body.min_profit_jpy)

    route = select_best_route(body.domestic_price_jpy, candidates, assumptions)
    if route is None:
        return BestRouteResponse(found=False, exchange_rate=exchange_rate)

    return BestRouteResponse(
        found=True,
        exchange_rate=exchange_rate,
        route=RouteResponse(
            platform=route.platform,
            price=route.candidate.price,
            revenue_jpy=route.revenue_jpy,
            platform_fee_jpy=route.platform_fee_jpy,
            customs_jpy=route.customs_jpy,
            shipping_jpy=route.shipping_jpy,
            profit_jpy=route.profit_jpy,
            margin=route.margin,
            approximate=route.approximate,
        ),
    )
