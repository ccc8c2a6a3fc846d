"""FastAPI application with lifespan-managed rate service and scheduler."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .api.router import api_router
from .auth import ApiKeyMiddleware
from .config import settings
from .database import SessionLocal, init_db
from .fx.client import ExchangeRateClient
from .fx.service import ExchangeRateService
from .recommend.aggregator import RecommendationAggregator
from .recommend.sources import default_sources
from .scheduler import RefreshScheduler
from .seed import seed_reference_data

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Shared state accessible by API endpoints
app_state: dict = {}


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Initializing database...")
    init_db()

    if settings.seed_on_startup:
        db = SessionLocal()
        try:
            seed_reference_data(db)
        finally:
            db.close()

    client = ExchangeRateClient()
    rates = ExchangeRateService(client=client)
    app_state["rates"] = rates

    domestic, overseas = default_sources()
    recommender = RecommendationAggregator(domestic, overseas, rates)
    app_state["recommender"] = recommender

    scheduler = RefreshScheduler(rates, recommender)
    scheduler.start()
    app_state["scheduler"] = scheduler

    logger.info("Ekkyo started")
    yield

    # Shutdown
    scheduler.shutdown()
    await client.close()
    app_state.clear()
    logger.info("Ekkyo stopped")


app = FastAPI(
    title="Ekkyo",
    description="国内フリマ→海外マーケットプレイス越境転売の利益計算・価格最適化",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(ApiKeyMiddleware)
app.include_router(api_router)
