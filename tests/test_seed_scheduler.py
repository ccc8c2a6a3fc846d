"""Tests for reference-data seeding and the refresh scheduler."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from ekkyo.fx import ExchangeRateApiError
from ekkyo.models import Platform, ShippingRate, ShippingZone
from ekkyo.pricing.lookup import pick_shipping_band
from ekkyo.scheduler import RefreshScheduler
from ekkyo.seed import DEFAULT_SHIPPING_BANDS, seed_reference_data


class TestSeed:
    def test_seed_all(self, db):
        added = seed_reference_data(db)
        assert db.query(Platform).count() == 8
        assert db.query(ShippingZone).count() == 2
        assert db.query(ShippingRate).count() == sum(len(b) for b in DEFAULT_SHIPPING_BANDS.values())
        assert added == 8 + 2 + db.query(ShippingRate).count()

        ebay = db.query(Platform).filter_by(name="eBay").one()
        assert (ebay.kind, ebay.currency, ebay.base_fee_percentage) == ("overseas", "USD", 0.129)
        mercari = db.query(Platform).filter_by(name="Mercari").one()
        assert (mercari.kind, mercari.currency) == ("domestic", "JPY")

    def test_idempotent(self, db):
        seed_reference_data(db)
        assert seed_reference_data(db) == 0

    def test_existing_rows_untouched(self, seeded_db):
        seed_reference_data(seeded_db)
        # scenario USA zone keeps its own bands
        usa = seeded_db.query(ShippingZone).filter_by(name="USA").one()
        assert len(usa.rates) == 2
        assert seeded_db.query(Platform).count() == 8

    def test_bands_contiguous(self, db):
        seed_reference_data(db)
        zone = db.query(ShippingZone).filter_by(name="USA").one()
        for weight in (0.1, 0.5, 0.99, 1.0, 4.9, 5.0, 40.0):
            assert pick_shipping_band(list(zone.rates), weight) is not None


class TestRefreshScheduler:
    @pytest.mark.asyncio
    async def test_refresh_failure_logged(self):
        rates = MagicMock()
        rates.refresh = AsyncMock(side_effect=ExchangeRateApiError("down"))
        await RefreshScheduler(rates)._refresh_rates()
        rates.refresh.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_warmup_forces_recompute(self):
        aggregator = MagicMock()
        aggregator.recommend = AsyncMock(side_effect=RuntimeError("boom"))
        await RefreshScheduler(MagicMock(), aggregator)._warm_recommendations()
        aggregator.recommend.assert_awaited_once_with(force=True)

    @pytest.mark.asyncio
    async def test_lifecycle(self):
        scheduler = RefreshScheduler(MagicMock(), MagicMock())
        scheduler.start()
        assert scheduler.running
        jobs = {job.id for job in scheduler._scheduler.get_jobs()}
        assert jobs == {"rate_refresh", "recommend_warmup"}
        scheduler.pause()
        assert not scheduler.running
        scheduler.resume()
        assert scheduler.running
        scheduler.shutdown()
        assert not scheduler.running
