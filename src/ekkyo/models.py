from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

from sqlalchemy import CheckConstraint, DateTime, Float, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .database import Base


class Product(Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    sku: Mapped[str] = mapped_column(Text, unique=True, index=True)
    title: Mapped[str] = mapped_column(Text, default="")
    category: Mapped[str] = mapped_column(Text, default="")
    weight_kg: Mapped[float | None] = mapped_column(Float, nullable=True)
    hs_code: Mapped[str | None] = mapped_column(Text, nullable=True)
    purchase_price: Mapped[float | None] = mapped_column(Float, nullable=True)  # JPY

    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, onupdate=_utcnow)


class Platform(Base):
    __tablename__ = "platforms"
    __table_args__ = (
        CheckConstraint(
            "base_fee_percentage >= 0 AND base_fee_percentage <= 1",
            name="ck_platform_fee_range",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(Text, unique=True, index=True)
    kind: Mapped[str] = mapped_column(Text, default="overseas")  # domestic / overseas
    currency: Mapped[str] = mapped_column(Text, default="USD")
    base_fee_percentage: Mapped[float] = mapped_column(Float, default=0.0)  # 0-1
    fixed_fee_local_currency: Mapped[float] = mapped_column(Float, default=0.0)

    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, onupdate=_utcnow)


class ExchangeRate(Base):
    __tablename__ = "exchange_rates"
    __table_args__ = (
        UniqueConstraint("from_currency", "to_currency", name="uq_exchange_rate_pair"),
        CheckConstraint("rate > 0", name="ck_exchange_rate_positive"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    from_currency: Mapped[str] = mapped_column(Text)
    to_currency: Mapped[str] = mapped_column(Text)
    rate: Mapped[float] = mapped_column(Float)
    source: Mapped[str] = mapped_column(Text, default="manual")  # live / manual / seed
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, onupdate=_utcnow)


class ShippingZone(Base):
    __tablename__ = "shipping_zones"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(Text, unique=True, index=True)

    rates: Mapped[list["ShippingRate"]] = relationship(back_populates="zone", cascade="all, delete-orphan")


class ShippingRate(Base):
    __tablename__ = "shipping_rates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    shipping_zone_id: Mapped[int] = mapped_column(Integer, ForeignKey("shipping_zones.id"))
    min_weight_kg: Mapped[float] = mapped_column(Float, default=0.0)  # inclusive
    max_weight_kg: Mapped[float | None] = mapped_column(Float, nullable=True)  # exclusive, NULL = no upper bound
    cost_jpy: Mapped[float] = mapped_column(Float)

    zone: Mapped["ShippingZone"] = relationship(back_populates="rates")


class CustomsDuty(Base):
    __tablename__ = "customs_duties"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    hs_code_prefix: Mapped[str] = mapped_column(Text, index=True)
    country_code: Mapped[str] = mapped_column(Text, index=True)
    duty_percentage: Mapped[float] = mapped_column(Float, default=0.0)  # 0-1
    min_value_usd: Mapped[float | None] = mapped_column(Float, nullable=True)
    max_value_usd: Mapped[float | None] = mapped_column(Float, nullable=True)


class MarketPrice(Base):
    __tablename__ = "market_prices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    keyword: Mapped[str] = mapped_column(Text, default="", index=True)
    product_sku: Mapped[str | None] = mapped_column(Text, nullable=True, index=True)
    platform: Mapped[str] = mapped_column(Text, index=True)
    title: Mapped[str] = mapped_column(Text, default="")
    price: Mapped[float] = mapped_column(Float)
    currency: Mapped[str] = mapped_column(Text, default="USD")
    listing_url: Mapped[str] = mapped_column(Text, default="")
    image_url: Mapped[str] = mapped_column(Text, default="")
    data_source: Mapped[str] = mapped_column(Text, default="scraped")  # scraped / api / manual
    scraped_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)
