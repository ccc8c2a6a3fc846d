"""Test fixtures: in-memory DB, seeded reference data and a static pricing lookup."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from ekkyo import models
from ekkyo.cache import TtlCache
from ekkyo.database import Base
from ekkyo.fx.service import ExchangeRateService
from ekkyo.pricing import NoShippingRateFound
from ekkyo.pricing.fees import DEFAULT_FEE_SCHEDULES
from ekkyo.pricing.lookup import DbLookup, ProductInfo

SCENARIO_SKU = "SKU-001"


class StaticLookup:
    """PricingLookup over plain dicts."""

    def __init__(
        self,
        products=None,
        schedules=None,
        rates=None,
        shipping_jpy=3500.0,
        duty_rate=0.0,
        competitors=None,
    ):
        self.products = {p.sku: p for p in products or []}
        self.schedules = dict(DEFAULT_FEE_SCHEDULES if schedules is None else schedules)
        self.rates = {("USD", "JPY"): 150.0} if rates is None else rates
        self.shipping_jpy = shipping_jpy
        self.duty_rate = duty_rate
        self.competitors = competitors or {}
        self.duty_calls: list[float] = []

    def get_product(self, sku):
        return self.products.get(sku)

    def get_fee_schedule(self, platform):
        return self.schedules.get(platform)

    def get_exchange_rate(self, from_currency, to_currency):
        if from_currency.upper() == to_currency.upper():
            return 1.0
        return self.rates.get((from_currency.upper(), to_currency.upper()))

    def get_shipping_cost(self, weight_kg, country_code):
        if self.shipping_jpy is None:
            raise NoShippingRateFound(f"No shipping rate for {weight_kg}kg to {country_code}")
        return self.shipping_jpy

    def get_customs_duty_rate(self, hs_code, country_code, value_usd):
        self.duty_calls.append(value_usd)
        return self.duty_rate

    def get_competitor_prices(self, sku, platform):
        return list(self.competitors.get((sku, platform), []))


@pytest.fixture()
def product():
    # 1kg, HS 9504, bought for 15,000 JPY
    return ProductInfo(
        sku=SCENARIO_SKU,
        category="toys",
        weight_kg=1.0,
        hs_code="9504",
        purchase_price=15000.0,
    )


@pytest.fixture()
def lookup(product):
    return StaticLookup(products=[product])


@pytest.fixture()
def db():
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine)()
    yield session
    session.close()


def seed_scenario(db):
    """Scenario reference data: eBay fees, 1 USD = 150 JPY, 3,500 JPY for 1kg to the US."""
    db.add(models.Product(
        sku=SCENARIO_SKU, title="Board game", category="toys",
        weight_kg=1.0, hs_code="9504", purchase_price=15000,
    ))
    db.add(models.Platform(
        name="eBay", kind="overseas", currency="USD",
        base_fee_percentage=0.129, fixed_fee_local_currency=0.30,
    ))
    db.add(models.Platform(
        name="Mercari", kind="domestic", currency="JPY",
        base_fee_percentage=0.10, fixed_fee_local_currency=0.0,
    ))
    db.add(models.ExchangeRate(from_currency="USD", to_currency="JPY", rate=150.0, source="seed"))
    zone = models.ShippingZone(name="USA")
    zone.rates = [
        models.ShippingRate(min_weight_kg=0.0, max_weight_kg=2.0, cost_jpy=3500),
        models.ShippingRate(min_weight_kg=2.0, max_weight_kg=None, cost_jpy=9800),
    ]
    db.add(zone)
    db.commit()


@pytest.fixture()
def seeded_db(db):
    seed_scenario(db)
    return db


@pytest.fixture()
def rate_service(db):
    return ExchangeRateService(session_factory=lambda: db, cache=TtlCache(300))


@pytest.fixture()
def db_lookup(seeded_db, rate_service):
    return DbLookup(seeded_db, rate_service)
