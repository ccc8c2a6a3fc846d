"""Keyword recommendations: which domestic listings resell profitably overseas.

For each candidate keyword, every domestic and overseas source is queried
concurrently. Overseas prices collapse to a median per platform; each
domestic listing is then screened against all overseas platforms with the
coarse route selector. A failing source only removes its own listings.
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from ..cache import TtlCache
from ..config import settings
from ..pricing.fees import DEFAULT_FEE_SCHEDULES, FeeSchedule
from ..pricing.routes import RouteAssumptions, build_candidate, select_best_route
from .sources import ListingSource, MarketListing, search_url

logger = logging.getLogger(__name__)

MEDIAN_SAMPLE_SIZE = 5
_CACHE_KEY = "recommendations"


def median_usd(listings: list[MarketListing]) -> float:
    """Upper median of the first five positive USD prices; 0 when none."""
    prices = [x.price for x in listings if x.currency.upper() == "USD" and x.price > 0][:MEDIAN_SAMPLE_SIZE]
    if not prices:
        return 0.0
    prices.sort()
    return prices[len(prices) // 2]


@dataclass
class RecommendedProduct:
    keyword: str
    title: str
    domestic_price: float
    domestic_platform: str
    domestic_data_source: str
    domestic_url: str
    overseas_price: float
    overseas_platform: str
    overseas_data_source: str
    overseas_search_url: str
    estimated_profit_jpy: int
    profit_margin: float
    image_url: str
    exchange_rate: float
    best_combination: str
    overseas_medians: dict[str, float] = field(default_factory=dict)
    approximate: bool = True


@dataclass
class RecommendationResult:
    keywords: list[str]
    products: list[RecommendedProduct]
    exchange_rate: float
    exchange_rate_source: str
    generated_at: datetime
    skipped_keywords: list[str] = field(default_factory=list)
    from_cache: bool = False


class RecommendationAggregator:
    def __init__(
        self,
        domestic_sources: list[ListingSource],
        overseas_sources: list[ListingSource],
        rate_service,
        keywords: list[str] | None = None,
        assumptions: RouteAssumptions | None = None,
        fee_schedules: dict[str, FeeSchedule] | None = None,
        cache: TtlCache | None = None,
    ) -> None:
        self._domestic = domestic_sources
        self._overseas = overseas_sources
        self._rates = rate_service
        self._keywords = keywords if keywords is not None else list(settings.recommend_keywords)
        self._assumptions = assumptions or RouteAssumptions.from_settings()
        self._fee_schedules = fee_schedules or DEFAULT_FEE_SCHEDULES
        self._cache = cache or TtlCache(settings.recommend_cache_ttl)

    async def recommend(self, force: bool = False) -> RecommendationResult:
        """Cached recommendation run; ``force`` recomputes regardless of age."""
        if not force:
            cached = self._cache.get(_CACHE_KEY)
            if cached is not None:
                return replace(cached, from_cache=True)

        rate, rate_source = await self._rates.resolve_usd_jpy()

        keywords: list[str] = []
        skipped: list[str] = []
        products: list[RecommendedProduct] = []
        for keyword in self._keywords:
            try:
                found = await self.screen_keyword(keyword, rate)
            except Exception as e:
                logger.warning("Skip keyword '%s': %s", keyword, e)
                skipped.append(keyword)
                continue
            if found:
                keywords.append(keyword)
                products.extend(found[: settings.recommend_max_per_keyword])

        products.sort(key=lambda p: p.estimated_profit_jpy, reverse=True)
        result = RecommendationResult(
            keywords=keywords,
            products=products[: settings.recommend_max_total],
            exchange_rate=rate,
            exchange_rate_source=rate_source,
            generated_at=datetime.now(timezone.utc),
            skipped_keywords=skipped,
        )
        self._cache.set(_CACHE_KEY, result)
        logger.info(
            "Recommendations: %d products from %d/%d keywords (1 USD = %s JPY, %s)",
            len(result.products), len(keywords), len(self._keywords), rate, rate_source,
        )
        return result

    async def screen_keyword(self, keyword: str, usd_jpy: float) -> list[RecommendedProduct]:
        """Profitable products for one keyword, best first."""
        sources = [*self._domestic, *self._overseas]
        results = await asyncio.gather(
            *(s.fetch(keyword) for s in sources),
            return_exceptions=True,
        )

        fetched: dict[str, list[MarketListing]] = {}
        for source, result in zip(sources, results):
            if isinstance(result, BaseException):
                logger.warning("Source %s failed for '%s': %s", source.platform, keyword, result)
                fetched[source.platform] = []
            else:
                fetched[source.platform] = result

        medians = {s.platform: median_usd(fetched[s.platform]) for s in self._overseas}
        if not any(medians.values()):
            return []

        candidates = [
            build_candidate(
                platform,
                price,
                usd_jpy,
                schedule=self._fee_schedules.get(platform),
                data_source=_data_source(fetched[platform]),
                search_url=search_url(platform, keyword),
            )
            for platform, price in medians.items()
        ]

        found: list[RecommendedProduct] = []
        for listing in self._domestic_listings(fetched):
            route = select_best_route(listing.price, candidates, self._assumptions)
            if route is None:
                continue
            found.append(RecommendedProduct(
                keyword=keyword,
                title=listing.title,
                domestic_price=listing.price,
                domestic_platform=listing.platform,
                domestic_data_source=listing.data_source,
                domestic_url=listing.listing_url or "#",
                overseas_price=route.candidate.price,
                overseas_platform=route.platform,
                overseas_data_source=route.candidate.data_source,
                overseas_search_url=route.candidate.search_url,
                estimated_profit_jpy=math.floor(route.profit_jpy),
                profit_margin=round(route.margin, 4),
                image_url=listing.image_url,
                exchange_rate=usd_jpy,
                best_combination=f"{listing.platform} → {route.platform}",
                overseas_medians={k: v for k, v in medians.items() if v > 0},
            ))

        found.sort(key=lambda p: p.estimated_profit_jpy, reverse=True)
        return found

    def _domestic_listings(self, fetched: dict[str, list[MarketListing]]) -> list[MarketListing]:
        limit = settings.recommend_listings_per_platform
        listings: list[MarketListing] = []
        for source in self._domestic:
            usable = [x for x in fetched.get(source.platform, []) if x.price > 0 and x.title]
            listings.extend(usable[:limit])
        return listings


def _data_source(listings: list[MarketListing]) -> str:
    return listings[0].data_source if listings else ""
