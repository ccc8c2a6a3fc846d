"""Coarse multi-platform route screening.

Given one domestic listing and the observed (median) prices on several
overseas platforms, estimate profit per platform and keep the best one.
Shipping and customs are flat approximations, so results are a screening
signal only and carry ``approximate=True``; use the cost model for a
precise breakdown.

    revenue  = price * rate
    fee      = revenue * fee_rate + fixed_fee * rate
    customs  = revenue * customs_rate  if price > de_minimis else 0
    profit   = revenue - fee - domestic_price - shipping_estimate - customs
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..config import settings
from .fees import DEFAULT_FEE_SCHEDULES, OVERSEAS_PRIORITY, FeeSchedule


@dataclass(frozen=True)
class RouteAssumptions:
    min_profit_jpy: float = 1100
    shipping_estimate_jpy: float = 3500
    customs_rate: float = 0.05
    de_minimis_usd: float = 800.0

    @classmethod
    def from_settings(cls) -> "RouteAssumptions":
        return cls(
            min_profit_jpy=settings.route_min_profit_jpy,
            shipping_estimate_jpy=settings.route_shipping_estimate_jpy,
            customs_rate=settings.route_customs_rate,
            de_minimis_usd=settings.route_de_minimis_usd,
        )


@dataclass(frozen=True)
class OverseasCandidate:
    platform: str
    price: float  # observed median, USD
    fee_rate: float
    exchange_rate_to_jpy: float
    fixed_fee_local: float = 0.0
    data_source: str = ""
    search_url: str = ""


@dataclass(frozen=True)
class RouteEvaluation:
    candidate: OverseasCandidate
    domestic_price_jpy: float
    revenue_jpy: float
    platform_fee_jpy: float
    customs_jpy: float
    shipping_jpy: float
    profit_jpy: float
    approximate: bool = field(default=True, init=False)

    @property
    def platform(self) -> str:
        return self.candidate.platform

    @property
    def margin(self) -> float:
        return self.profit_jpy / self.revenue_jpy if self.revenue_jpy > 0 else 0.0


def build_candidate(
    platform: str,
    price: float,
    exchange_rate_to_jpy: float,
    schedule: FeeSchedule | None = None,
    data_source: str = "",
    search_url: str = "",
) -> OverseasCandidate:
    """Candidate using ``schedule`` or the platform's default fee table."""
    schedule = schedule or DEFAULT_FEE_SCHEDULES.get(platform)
    fee_rate = schedule.base_fee_percentage if schedule else 0.0
    fixed_fee = schedule.fixed_fee_local_currency if schedule else 0.0
    return OverseasCandidate(
        platform=platform,
        price=price,
        fee_rate=fee_rate,
        exchange_rate_to_jpy=exchange_rate_to_jpy,
        fixed_fee_local=fixed_fee,
        data_source=data_source,
        search_url=search_url,
    )


def evaluate_route(
    domestic_price_jpy: float,
    candidate: OverseasCandidate,
    assumptions: RouteAssumptions,
) -> RouteEvaluation | None:
    if candidate.price <= 0 or candidate.exchange_rate_to_jpy <= 0:
        return None
    revenue = candidate.price * candidate.exchange_rate_to_jpy
    fee = revenue * candidate.fee_rate + candidate.fixed_fee_local * candidate.exchange_rate_to_jpy
    customs = revenue * assumptions.customs_rate if candidate.price > assumptions.de_minimis_usd else 0.0
    profit = revenue - fee - domestic_price_jpy - assumptions.shipping_estimate_jpy - customs
    return RouteEvaluation(
        candidate=candidate,
        domestic_price_jpy=domestic_price_jpy,
        revenue_jpy=revenue,
        platform_fee_jpy=fee,
        customs_jpy=customs,
        shipping_jpy=assumptions.shipping_estimate_jpy,
        profit_jpy=profit,
    )


def _priority(platform: str) -> tuple[int, str]:
    names = [p.value for p in OVERSEAS_PRIORITY]
    if platform in names:
        return names.index(platform), platform
    return len(names), platform


def select_best_route(
    domestic_price_jpy: float,
    candidates: list[OverseasCandidate],
    assumptions: RouteAssumptions | None = None,
) -> RouteEvaluation | None:
    """Most profitable overseas platform for one domestic listing, or None.

    Candidates with no positive price are skipped. Equal profits go to the
    platform listed first in ``OVERSEAS_PRIORITY`` (then by name), regardless
    of input order. The winner is only returned when its profit reaches
    ``assumptions.min_profit_jpy``.
    """
    assumptions = assumptions or RouteAssumptions.from_settings()
    evaluations = [
        ev for ev in (evaluate_route(domestic_price_jpy, c, assumptions) for c in candidates)
        if ev is not None
    ]
    if not evaluations:
        return None

    best = min(evaluations, key=lambda ev: (-ev.profit_jpy, _priority(ev.platform)))
    if best.profit_jpy < assumptions.min_profit_jpy:
        return None
    return best
