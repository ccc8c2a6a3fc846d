"""Tests for the DB-backed pricing lookup."""

from datetime import datetime, timedelta, timezone

import pytest

from ekkyo.models import CustomsDuty, MarketPrice, ShippingRate, ShippingZone
from ekkyo.pricing import NoShippingRateFound
from ekkyo.pricing.lookup import pick_duty_rule, pick_shipping_band, zone_for_country


class TestProductsAndFees:
    def test_product(self, db_lookup):
        product = db_lookup.get_product("SKU-001")
        assert product.weight_kg == 1.0
        assert product.hs_code == "9504"
        assert product.purchase_price == 15000

    def test_missing_product(self, db_lookup):
        assert db_lookup.get_product("NOPE") is None

    def test_fee_schedule(self, db_lookup):
        schedule = db_lookup.get_fee_schedule("eBay")
        assert schedule.base_fee_percentage == 0.129
        assert schedule.fixed_fee_local_currency == 0.30
        assert schedule.currency == "USD"

    def test_unseeded_platform(self, db_lookup):
        assert db_lookup.get_fee_schedule("StockX") is None


class TestExchangeRates:
    def test_direct(self, db_lookup):
        assert db_lookup.get_exchange_rate("USD", "JPY") == 150.0

    def test_inverse(self, db_lookup):
        assert db_lookup.get_exchange_rate("JPY", "USD") == pytest.approx(1 / 150)

    def test_identity(self, db_lookup):
        assert db_lookup.get_exchange_rate("usd", "USD") == 1.0

    def test_unknown_pair(self, db_lookup):
        assert db_lookup.get_exchange_rate("EUR", "JPY") is None


class TestShipping:
    def test_band(self, db_lookup):
        assert db_lookup.get_shipping_cost(1.0, "US") == 3500

    def test_upper_bound_exclusive(self, db_lookup):
        assert db_lookup.get_shipping_cost(2.0, "US") == 9800

    def test_unbounded_top_band(self, db_lookup):
        assert db_lookup.get_shipping_cost(30.0, "USA") == 9800

    def test_unknown_country_uses_default_zone(self, db_lookup):
        assert db_lookup.get_shipping_cost(1.0, "JP") == 3500

    def test_missing_zone(self, db_lookup):
        with pytest.raises(NoShippingRateFound):
            db_lookup.get_shipping_cost(1.0, "GB")

    def test_weight_not_covered(self, seeded_db, db_lookup):
        zone = ShippingZone(name="Europe")
        zone.rates = [ShippingRate(min_weight_kg=0.0, max_weight_kg=1.0, cost_jpy=3200)]
        seeded_db.add(zone)
        seeded_db.commit()
        assert db_lookup.get_shipping_cost(0.5, "DE") == 3200
        with pytest.raises(NoShippingRateFound):
            db_lookup.get_shipping_cost(1.5, "DE")

    def test_zone_mapping(self):
        assert zone_for_country("us") == "USA"
        assert zone_for_country("FR") == "Europe"
        assert zone_for_country("") == "USA"

    def test_pick_band_unsorted(self):
        bands = [
            ShippingRate(min_weight_kg=1.0, max_weight_kg=None, cost_jpy=9000),
            ShippingRate(min_weight_kg=0.0, max_weight_kg=1.0, cost_jpy=2000),
        ]
        assert pick_shipping_band(bands, 0.2).cost_jpy == 2000
        assert pick_shipping_band(bands, 1.0).cost_jpy == 9000


class TestCustomsDuty:
    @pytest.fixture()
    def duties(self, seeded_db):
        seeded_db.add_all([
            CustomsDuty(hs_code_prefix="95", country_code="US", duty_percentage=0.02),
            CustomsDuty(hs_code_prefix="9504", country_code="US", duty_percentage=0.05, max_value_usd=800),
            CustomsDuty(hs_code_prefix="9504", country_code="US", duty_percentage=0.08, min_value_usd=2000),
        ])
        seeded_db.commit()

    def test_most_specific_prefix(self, duties, db_lookup):
        assert db_lookup.get_customs_duty_rate("950450", "US", 100.0) == 0.05

    def test_bracket_upper_inclusive(self, duties, db_lookup):
        assert db_lookup.get_customs_duty_rate("9504", "US", 800.0) == 0.05

    def test_second_bracket(self, duties, db_lookup):
        assert db_lookup.get_customs_duty_rate("9504", "US", 2500.0) == 0.08

    def test_falls_through_to_shorter_prefix(self, duties, db_lookup):
        # 1000 USD is outside both 9504 brackets
        assert db_lookup.get_customs_duty_rate("9504", "US", 1000.0) == 0.02

    def test_no_rule_is_zero(self, duties, db_lookup):
        assert db_lookup.get_customs_duty_rate("9504", "GB", 100.0) == 0.0
        assert db_lookup.get_customs_duty_rate("8471", "US", 100.0) == 0.0

    def test_pick_rule_pure(self):
        rules = [CustomsDuty(id=1, hs_code_prefix="85", country_code="US", duty_percentage=0.03)]
        assert pick_duty_rule(rules, "8517", 10.0).duty_percentage == 0.03
        assert pick_duty_rule(rules, "9504", 10.0) is None


class TestCompetitorPrices:
    def test_latest_scraped_only(self, seeded_db, db_lookup):
        now = datetime.now(timezone.utc)
        for i in range(12):
            seeded_db.add(MarketPrice(
                product_sku="SKU-001", platform="eBay", price=200.0 + i, currency="USD",
                scraped_at=now - timedelta(minutes=i),
            ))
        seeded_db.add(MarketPrice(
            product_sku="SKU-001", platform="eBay", price=1.0, currency="USD", data_source="manual",
        ))
        seeded_db.add(MarketPrice(product_sku="SKU-001", platform="Amazon", price=2.0, currency="USD"))
        seeded_db.commit()

        prices = db_lookup.get_competitor_prices("SKU-001", "eBay")
        assert len(prices) == 10
        assert [p.price for p in prices] == [200.0 + i for i in range(10)]
        assert all(p.platform == "eBay" for p in prices)
