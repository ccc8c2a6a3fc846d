"""Tests for keyword recommendation aggregation."""

from unittest.mock import AsyncMock, patch

import pytest

from ekkyo.cache import TtlCache
from ekkyo.models import MarketPrice
from ekkyo.recommend.aggregator import RecommendationAggregator, median_usd
from ekkyo.recommend.sources import MarketListing, MarketPriceSource, default_sources, search_url


class FakeSource:
    def __init__(self, platform, listings=None, error=None):
        self.platform = platform
        self.listings = listings or []
        self.error = error
        self.calls: list[str] = []

    async def fetch(self, keyword):
        self.calls.append(keyword)
        if self.error:
            raise self.error
        return list(self.listings)


def _domestic(*items, platform="Mercari"):
    return [
        MarketListing(platform=platform, price=price, currency="JPY", title=title, listing_url=f"https://jp.test/{title}")
        for title, price in items
    ]


def _overseas(platform, *prices, currency="USD"):
    return [MarketListing(platform=platform, price=p, currency=currency, data_source="api") for p in prices]


@pytest.fixture()
def rates():
    service = AsyncMock()
    service.resolve_usd_jpy = AsyncMock(return_value=(150.0, "live"))
    return service


def _aggregator(domestic, overseas, rates, keywords=("カード",)):
    return RecommendationAggregator(
        domestic, overseas, rates, keywords=list(keywords), cache=TtlCache(600),
    )


class TestMedian:
    def test_upper_median(self):
        assert median_usd(_overseas("eBay", 40.0, 10.0, 30.0, 20.0)) == 30.0

    def test_first_five_only(self):
        assert median_usd(_overseas("eBay", 1.0, 2.0, 3.0, 4.0, 5.0, 100.0)) == 3.0

    def test_usd_and_positive_only(self):
        listings = _overseas("eBay", 0.0, 50.0) + _overseas("eBay", 999.0, currency="EUR")
        assert median_usd(listings) == 50.0

    def test_empty(self):
        assert median_usd([]) == 0.0


class TestScreenKeyword:
    @pytest.mark.asyncio
    async def test_profitable_listing(self, rates):
        mercari = FakeSource("Mercari", _domestic(("Card A", 5000)))
        ebay = FakeSource("eBay", _overseas("eBay", 100.0, 120.0, 80.0))
        stockx = FakeSource("StockX")
        agg = _aggregator([mercari], [ebay, stockx], rates)

        found = await agg.screen_keyword("カード", 150.0)
        assert len(found) == 1
        p = found[0]
        # median 100 USD: 15000 - 1980 fee - 5000 - 3500 shipping
        assert p.overseas_platform == "eBay"
        assert p.overseas_price == 100.0
        assert p.estimated_profit_jpy == 4520
        assert p.profit_margin == 0.3013
        assert p.best_combination == "Mercari → eBay"
        assert p.overseas_medians == {"eBay": 100.0}
        assert p.overseas_data_source == "api"
        assert p.overseas_search_url.startswith("https://www.ebay.com/sch/")
        assert p.approximate is True

    @pytest.mark.asyncio
    async def test_unprofitable_dropped(self, rates):
        mercari = FakeSource("Mercari", _domestic(("Expensive", 14000)))
        ebay = FakeSource("eBay", _overseas("eBay", 100.0))
        agg = _aggregator([mercari], [ebay], rates)
        assert await agg.screen_keyword("カード", 150.0) == []

    @pytest.mark.asyncio
    async def test_failing_source_degrades(self, rates):
        mercari = FakeSource("Mercari", _domestic(("Card A", 5000)))
        ebay = FakeSource("eBay", error=RuntimeError("blocked"))
        stockx = FakeSource("StockX", _overseas("StockX", 100.0))
        agg = _aggregator([mercari], [ebay, stockx], rates)

        found = await agg.screen_keyword("カード", 150.0)
        assert [p.overseas_platform for p in found] == ["StockX"]

    @pytest.mark.asyncio
    async def test_no_overseas_prices(self, rates):
        mercari = FakeSource("Mercari", _domestic(("Card A", 5000)))
        agg = _aggregator([mercari], [FakeSource("eBay")], rates)
        assert await agg.screen_keyword("カード", 150.0) == []

    @pytest.mark.asyncio
    async def test_unusable_domestic_listings_skipped(self, rates):
        listings = _domestic(("Card A", 5000), ("", 3000), ("Free", 0))
        agg = _aggregator([FakeSource("Mercari", listings)], [FakeSource("eBay", _overseas("eBay", 100.0))], rates)
        found = await agg.screen_keyword("カード", 150.0)
        assert [p.title for p in found] == ["Card A"]


class TestRecommend:
    @pytest.mark.asyncio
    async def test_caps_and_order(self, rates):
        items = [(f"Card {i}", 1000 + i * 500) for i in range(5)]
        mercari = FakeSource("Mercari", _domestic(*items))
        ebay = FakeSource("eBay", _overseas("eBay", 100.0))
        agg = _aggregator([mercari], [ebay], rates)

        result = await agg.recommend()
        assert result.keywords == ["カード"]
        assert result.exchange_rate == 150.0
        assert result.exchange_rate_source == "live"
        # top 3 per keyword, cheapest domestic first
        assert [p.title for p in result.products] == ["Card 0", "Card 1", "Card 2"]
        profits = [p.estimated_profit_jpy for p in result.products]
        assert profits == sorted(profits, reverse=True)

    @pytest.mark.asyncio
    async def test_cached(self, rates):
        mercari = FakeSource("Mercari", _domestic(("Card A", 5000)))
        ebay = FakeSource("eBay", _overseas("eBay", 100.0))
        agg = _aggregator([mercari], [ebay], rates)

        first = await agg.recommend()
        second = await agg.recommend()
        assert not first.from_cache
        assert second.from_cache
        assert second.products == first.products
        assert len(ebay.calls) == 1
        rates.resolve_usd_jpy.assert_awaited_once()

        forced = await agg.recommend(force=True)
        assert not forced.from_cache
        assert len(ebay.calls) == 2

    @pytest.mark.asyncio
    async def test_failing_keyword_skipped(self, rates):
        mercari = FakeSource("Mercari", _domestic(("Card A", 5000)))
        ebay = FakeSource("eBay", _overseas("eBay", 100.0))
        agg = _aggregator([mercari], [ebay], rates, keywords=("good", "bad"))

        real = agg.screen_keyword

        async def flaky(keyword, usd_jpy):
            if keyword == "bad":
                raise ValueError("parse failure")
            return await real(keyword, usd_jpy)

        with patch.object(agg, "screen_keyword", side_effect=flaky):
            result = await agg.recommend()
        assert result.keywords == ["good"]
        assert result.skipped_keywords == ["bad"]
        assert len(result.products) == 1

    @pytest.mark.asyncio
    async def test_keyword_without_results_not_listed(self, rates):
        agg = _aggregator([FakeSource("Mercari")], [FakeSource("eBay", _overseas("eBay", 100.0))], rates)
        result = await agg.recommend()
        assert result.keywords == []
        assert result.products == []


class TestSources:
    @pytest.mark.asyncio
    async def test_market_price_source(self, db):
        db.add_all([
            MarketPrice(keyword="カード", platform="eBay", price=100.0, currency="USD", title="A"),
            MarketPrice(keyword="カード", platform="Amazon", price=90.0, currency="USD", title="B"),
            MarketPrice(keyword="フィギュア", platform="eBay", price=80.0, currency="USD", title="C"),
        ])
        db.commit()
        source = MarketPriceSource("eBay", session_factory=lambda: db)
        listings = await source.fetch("カード")
        assert [(x.title, x.price) for x in listings] == [("A", 100.0)]

    def test_default_sources(self):
        domestic, overseas = default_sources(lambda: None)
        assert [s.platform for s in domestic] == ["Mercari", "Yahoo Auctions", "Rakuma", "PayPay Fleamarket"]
        assert [s.platform for s in overseas] == ["eBay", "Amazon", "StockX", "Mercari US"]

    def test_search_url_quotes_keyword(self):
        assert search_url("StockX", "ポケモン カード") == "https://stockx.com/search?s=%E3%83%9D%E3%82%B1%E3%83%A2%E3%83%B3%20%E3%82%AB%E3%83%BC%E3%83%89"
        assert search_url("Etsy", "x") == ""
