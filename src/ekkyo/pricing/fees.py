"""Platform identifiers and fee schedules.

Domestic platforms are where the item is bought; overseas platforms are
where it is resold. Amazon's referral fee depends on the product category,
so its rate comes from ``AMAZON_CATEGORY_FEES`` instead of the stored
schedule.
"""

from __future__ import annotations

import logging
import unicodedata
from dataclasses import dataclass
from enum import Enum

from . import PlatformNotConfigured

logger = logging.getLogger(__name__)


class DomesticPlatform(str, Enum):
    MERCARI = "Mercari"
    YAHOO_AUCTIONS = "Yahoo Auctions"
    RAKUMA = "Rakuma"
    PAYPAY_FLEAMARKET = "PayPay Fleamarket"


class OverseasPlatform(str, Enum):
    EBAY = "eBay"
    AMAZON = "Amazon"
    STOCKX = "StockX"
    MERCARI_US = "Mercari US"


# 表記ゆれ (exact match only)
_DOMESTIC_ALIASES = {
    "mercari": DomesticPlatform.MERCARI,
    "メルカリ": DomesticPlatform.MERCARI,
    "yahoo auctions": DomesticPlatform.YAHOO_AUCTIONS,
    "yahoo": DomesticPlatform.YAHOO_AUCTIONS,
    "ヤフオク": DomesticPlatform.YAHOO_AUCTIONS,
    "rakuma": DomesticPlatform.RAKUMA,
    "ラクマ": DomesticPlatform.RAKUMA,
    "paypay fleamarket": DomesticPlatform.PAYPAY_FLEAMARKET,
    "paypayフリマ": DomesticPlatform.PAYPAY_FLEAMARKET,
}

_OVERSEAS_ALIASES = {
    "ebay": OverseasPlatform.EBAY,
    "amazon": OverseasPlatform.AMAZON,
    "stockx": OverseasPlatform.STOCKX,
    "mercari us": OverseasPlatform.MERCARI_US,
}

# Route screening order, also the tie-break when two platforms yield the same profit
OVERSEAS_PRIORITY = (
    OverseasPlatform.EBAY,
    OverseasPlatform.AMAZON,
    OverseasPlatform.STOCKX,
    OverseasPlatform.MERCARI_US,
)


def _normalize(value: str) -> str:
    return " ".join(unicodedata.normalize("NFKC", value).strip().lower().split())


def parse_domestic_platform(value: str | DomesticPlatform) -> DomesticPlatform:
    if isinstance(value, DomesticPlatform):
        return value
    platform = _DOMESTIC_ALIASES.get(_normalize(value or ""))
    if platform is None:
        raise PlatformNotConfigured(f"Unknown domestic platform: {value!r}")
    return platform


def parse_overseas_platform(value: str | OverseasPlatform) -> OverseasPlatform:
    if isinstance(value, OverseasPlatform):
        return value
    platform = _OVERSEAS_ALIASES.get(_normalize(value or ""))
    if platform is None:
        raise PlatformNotConfigured(f"Unknown overseas platform: {value!r}")
    return platform


# --- Amazon category fees ---


class AmazonCategory(str, Enum):
    ELECTRONICS = "electronics"
    JEWELRY = "jewelry"
    FOOTWEAR = "footwear"
    APPAREL = "apparel"
    BOOKS = "books"
    BEAUTY = "beauty"
    SPORTS = "sports"
    TOYS_GAMES = "toys_games"
    WATCHES = "watches"
    OTHER = "other"


AMAZON_CATEGORY_FEES: dict[AmazonCategory, float] = {
    AmazonCategory.ELECTRONICS: 0.08,
    AmazonCategory.JEWELRY: 0.20,
    AmazonCategory.FOOTWEAR: 0.15,
    AmazonCategory.APPAREL: 0.17,
    AmazonCategory.BOOKS: 0.15,
    AmazonCategory.BEAUTY: 0.08,
    AmazonCategory.SPORTS: 0.15,
    AmazonCategory.TOYS_GAMES: 0.15,
    AmazonCategory.WATCHES: 0.16,
    AmazonCategory.OTHER: 0.15,
}
AMAZON_DEFAULT_FEE = AMAZON_CATEGORY_FEES[AmazonCategory.OTHER]

_AMAZON_CATEGORY_ALIASES: dict[str, AmazonCategory] = {
    "electronics": AmazonCategory.ELECTRONICS,
    "camera": AmazonCategory.ELECTRONICS,
    "cameras": AmazonCategory.ELECTRONICS,
    "家電": AmazonCategory.ELECTRONICS,
    "電子機器": AmazonCategory.ELECTRONICS,
    "カメラ": AmazonCategory.ELECTRONICS,
    "jewelry": AmazonCategory.JEWELRY,
    "jewellery": AmazonCategory.JEWELRY,
    "ジュエリー": AmazonCategory.JEWELRY,
    "宝飾品": AmazonCategory.JEWELRY,
    "footwear": AmazonCategory.FOOTWEAR,
    "shoes": AmazonCategory.FOOTWEAR,
    "靴": AmazonCategory.FOOTWEAR,
    "シューズ": AmazonCategory.FOOTWEAR,
    "apparel": AmazonCategory.APPAREL,
    "clothing": AmazonCategory.APPAREL,
    "fashion": AmazonCategory.APPAREL,
    "衣類": AmazonCategory.APPAREL,
    "アパレル": AmazonCategory.APPAREL,
    "ファッション": AmazonCategory.APPAREL,
    "books": AmazonCategory.BOOKS,
    "book": AmazonCategory.BOOKS,
    "本": AmazonCategory.BOOKS,
    "書籍": AmazonCategory.BOOKS,
    "beauty": AmazonCategory.BEAUTY,
    "cosmetics": AmazonCategory.BEAUTY,
    "美容": AmazonCategory.BEAUTY,
    "コスメ": AmazonCategory.BEAUTY,
    "sports": AmazonCategory.SPORTS,
    "outdoors": AmazonCategory.SPORTS,
    "スポーツ": AmazonCategory.SPORTS,
    "アウトドア": AmazonCategory.SPORTS,
    "toys_games": AmazonCategory.TOYS_GAMES,
    "toys": AmazonCategory.TOYS_GAMES,
    "games": AmazonCategory.TOYS_GAMES,
    "toys & games": AmazonCategory.TOYS_GAMES,
    "おもちゃ": AmazonCategory.TOYS_GAMES,
    "ゲーム": AmazonCategory.TOYS_GAMES,
    "watches": AmazonCategory.WATCHES,
    "watch": AmazonCategory.WATCHES,
    "時計": AmazonCategory.WATCHES,
    "腕時計": AmazonCategory.WATCHES,
}


def resolve_amazon_category(category: str | None) -> AmazonCategory:
    if not category:
        return AmazonCategory.OTHER
    resolved = _AMAZON_CATEGORY_ALIASES.get(_normalize(category))
    if resolved is None:
        logger.debug("Unmapped Amazon category %r, using default fee", category)
        return AmazonCategory.OTHER
    return resolved


def amazon_fee_rate(category: str | None) -> float:
    return AMAZON_CATEGORY_FEES[resolve_amazon_category(category)]


@dataclass(frozen=True)
class FeeSchedule:
    platform: str
    currency: str
    base_fee_percentage: float
    fixed_fee_local_currency: float = 0.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.base_fee_percentage <= 1.0:
            raise ValueError(
                f"Fee percentage for {self.platform} must be in [0, 1], got {self.base_fee_percentage}"
            )

    def fee_rate_for(self, category: str | None) -> float:
        """Percentage fee for a product; Amazon overrides by category."""
        if self.platform == OverseasPlatform.AMAZON.value:
            return amazon_fee_rate(category)
        return self.base_fee_percentage


# Coarse defaults used for seeding and route screening
DEFAULT_FEE_SCHEDULES: dict[str, FeeSchedule] = {
    OverseasPlatform.EBAY.value: FeeSchedule(OverseasPlatform.EBAY.value, "USD", 0.129, 0.30),
    OverseasPlatform.AMAZON.value: FeeSchedule(OverseasPlatform.AMAZON.value, "USD", AMAZON_DEFAULT_FEE),
    OverseasPlatform.STOCKX.value: FeeSchedule(OverseasPlatform.STOCKX.value, "USD", 0.12),  # 取引9% + 決済3%
    OverseasPlatform.MERCARI_US.value: FeeSchedule(OverseasPlatform.MERCARI_US.value, "USD", 0.10),
    DomesticPlatform.MERCARI.value: FeeSchedule(DomesticPlatform.MERCARI.value, "JPY", 0.10),
    DomesticPlatform.YAHOO_AUCTIONS.value: FeeSchedule(DomesticPlatform.YAHOO_AUCTIONS.value, "JPY", 0.10),
    DomesticPlatform.RAKUMA.value: FeeSchedule(DomesticPlatform.RAKUMA.value, "JPY", 0.066),
    DomesticPlatform.PAYPAY_FLEAMARKET.value: FeeSchedule(DomesticPlatform.PAYPAY_FLEAMARKET.value, "JPY", 0.05),
}


def minor_unit(currency: str) -> float:
    """Smallest price step: whole yen for JPY, cents otherwise."""
    return 1.0 if currency.upper() == "JPY" else 0.01


def minor_unit_decimals(currency: str) -> int:
    return 0 if currency.upper() == "JPY" else 2
