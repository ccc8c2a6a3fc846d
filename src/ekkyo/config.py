from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server
    host: str = "127.0.0.1"
    port: int = 8002

    database_url: str = "sqlite:///./ekkyo.db"
    seed_on_startup: bool = True

    # Exchange rates
    exchange_rate_api_url: str = "https://open.er-api.com/v6/latest"
    exchange_rate_timeout: float = 5.0
    exchange_rate_cache_ttl: int = 300        # 為替レートのメモ化 (秒)
    exchange_rate_refresh_interval: int = 900  # ライブ取得間隔 (秒)
    exchange_rate_currencies: list[str] = ["USD"]
    fallback_usd_jpy_rate: float = 149.0      # おすすめ試算専用の最終フォールバック

    # Pricing
    default_min_margin: float = 0.05          # 最低利益率 (0.05 = 5%)

    # Route screening (概算: 精密計算とは別物)
    route_min_profit_jpy: int = 1100
    route_shipping_estimate_jpy: int = 3500
    route_customs_rate: float = 0.05
    route_de_minimis_usd: float = 800.0

    # Recommendations
    recommend_keywords: list[str] = [
        "ポケモンカード",
        "任天堂スイッチ",
        "ゲームボーイ",
        "フィギュア",
    ]
    recommend_cache_ttl: int = 600
    recommend_max_per_keyword: int = 3
    recommend_max_total: int = 15
    recommend_listings_per_platform: int = 10
    recommend_warmup_enabled: bool = True

    # Auth
    api_key: str = ""  # Set to enable API key auth; empty = no auth

    # Log
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
