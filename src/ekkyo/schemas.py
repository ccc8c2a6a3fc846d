from datetime import datetime

from pydantic import BaseModel, Field


# --- Product ---

class ProductCreate(BaseModel):
    sku: str = Field(min_length=1)
    title: str = ""
    category: str = ""
    weight_kg: float | None = Field(default=None, gt=0)
    hs_code: str | None = None
    purchase_price: float | None = Field(default=None, gt=0)


class ProductUpdate(BaseModel):
    title: str | None = None
    category: str | None = None
    weight_kg: float | None = Field(default=None, gt=0)
    hs_code: str | None = None
    purchase_price: float | None = Field(default=None, gt=0)


class ProductResponse(BaseModel):
    id: int
    sku: str
    title: str
    category: str
    weight_kg: float | None
    hs_code: str | None
    purchase_price: float | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProductListResponse(BaseModel):
    products: list[ProductResponse]
    total: int


# --- Profit ---

class ProfitRequest(BaseModel):
    product_sku: str
    domestic_platform: str
    overseas_platform: str
    destination_country_code: str = Field(min_length=2)
    target_selling_price: float
    manual_domestic_price: float | None = None


class ProfitDetailsResponse(BaseModel):
    estimated_profit_jpy: float
    profit_margin: float
    domestic_purchase_price_jpy: float
    overseas_selling_price_local: float
    overseas_selling_price_jpy: float
    exchange_rate: float
    international_shipping_cost_jpy: float
    customs_duty_jpy: float
    domestic_platform_fee_jpy: float
    overseas_platform_fee_jpy: float
    overseas_platform: str
    overseas_currency: str
    overseas_fee_rate: float
    customs_duty_rate: float
    total_cost_jpy: float


class MinPriceRequest(BaseModel):
    product_sku: str
    domestic_platform: str
    overseas_platform: str
    destination_country_code: str = Field(min_length=2)
    min_profit_margin: float | None = Field(default=None, gt=-1)
    manual_domestic_price: float | None = None


class MinPriceResponse(BaseModel):
    min_selling_price_local: float
    currency: str
    strategy: str  # AnalyticInversion / FallbackDoubleCost
    is_degenerate: bool
    profit_details: ProfitDetailsResponse


class CompetitorPriceIn(BaseModel):
    price: float
    currency: str = "USD"
    platform: str = ""
    listing_url: str = ""


class OptimizeRequest(MinPriceRequest):
    competitor_prices: list[CompetitorPriceIn] | None = None  # None = use stored observations


class OptimizeResponse(BaseModel):
    optimal_price: float
    optimal_price_jpy: float
    currency: str
    strategy: str
    min_selling_price_local: float
    solve_strategy: str
    is_degenerate: bool
    lowest_competitor: float | None
    profit_details: ProfitDetailsResponse


# --- Routes ---

class RouteCandidateIn(BaseModel):
    platform: str
    price: float
    fee_rate: float | None = Field(default=None, ge=0, le=1)
    fixed_fee: float | None = Field(default=None, ge=0)


class BestRouteRequest(BaseModel):
    domestic_price_jpy: float = Field(gt=0)
    candidates: list[RouteCandidateIn]
    exchange_rate: float | None = Field(default=None, gt=0)  # None = current USD->JPY
    min_profit_jpy: float | None = None


class RouteResponse(BaseModel):
    platform: str
    price: float
    revenue_jpy: float
    platform_fee_jpy: float
    customs_jpy: float
    shipping_jpy: float
    profit_jpy: float
    margin: float
    approximate: bool = True


class BestRouteResponse(BaseModel):
    found: bool
    exchange_rate: float
    route: RouteResponse | None = None


# --- Recommendations ---

class RecommendedProductResponse(BaseModel):
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
    overseas_medians: dict[str, float]
    approximate: bool

    model_config = {"from_attributes": True}


class RecommendationsResponse(BaseModel):
    keywords: list[str]
    products: list[RecommendedProductResponse]
    exchange_rate: float
    exchange_rate_source: str
    generated_at: datetime
    skipped_keywords: list[str]
    from_cache: bool


# --- Exchange rates ---

class ExchangeRateUpsert(BaseModel):
    from_currency: str = Field(min_length=3, max_length=3)
    to_currency: str = Field(min_length=3, max_length=3)
    rate: float = Field(gt=0)


class ExchangeRateResponse(BaseModel):
    from_currency: str
    to_currency: str
    rate: float
    source: str
    updated_at: datetime

    model_config = {"from_attributes": True}


class RateRefreshResponse(BaseModel):
    rates: dict[str, float]
    refreshed_at: datetime | None


# --- Reference data ---

class PlatformResponse(BaseModel):
    name: str
    kind: str
    currency: str
    base_fee_percentage: float
    fixed_fee_local_currency: float

    model_config = {"from_attributes": True}


class PlatformUpdate(BaseModel):
    kind: str | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    base_fee_percentage: float | None = Field(default=None, ge=0, le=1)
    fixed_fee_local_currency: float | None = Field(default=None, ge=0)


class ShippingRateCreate(BaseModel):
    zone: str
    min_weight_kg: float = Field(ge=0)
    max_weight_kg: float | None = None
    cost_jpy: float = Field(ge=0)


class ShippingRateResponse(BaseModel):
    id: int
    zone: str
    min_weight_kg: float
    max_weight_kg: float | None
    cost_jpy: float


class CustomsDutyCreate(BaseModel):
    hs_code_prefix: str = Field(min_length=1)
    country_code: str = Field(min_length=2)
    duty_percentage: float = Field(ge=0, le=1)
    min_value_usd: float | None = None
    max_value_usd: float | None = None


class CustomsDutyResponse(CustomsDutyCreate):
    id: int

    model_config = {"from_attributes": True}


# --- Market prices ---

class MarketPriceCreate(BaseModel):
    platform: str
    price: float = Field(gt=0)
    currency: str = "USD"
    keyword: str = ""
    product_sku: str | None = None
    title: str = ""
    listing_url: str = ""
    image_url: str = ""
    data_source: str = "scraped"


class MarketPriceResponse(MarketPriceCreate):
    id: int
    scraped_at: datetime

    model_config = {"from_attributes": True}


# --- System ---

class ServiceStatus(BaseModel):
    name: str
    status: str  # ok / error / disabled
    detail: str = ""


class HealthResponse(BaseModel):
    status: str = "ok"
    scheduler_running: bool = False
    product_count: int = 0
    services: list[ServiceStatus] = []
