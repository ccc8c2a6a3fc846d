"""APScheduler jobs: live exchange-rate refresh and recommendation warm-up."""

from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from .config import settings
from .fx import ExchangeRateApiError

logger = logging.getLogger(__name__)


class RefreshScheduler:
    def __init__(self, rate_service, aggregator=None) -> None:
        self.rate_service = rate_service
        self.aggregator = aggregator
        self._scheduler = AsyncIOScheduler()
        self.running = False

    def start(self) -> None:
        self._scheduler.add_job(
            self._refresh_rates,
            "interval",
            seconds=settings.exchange_rate_refresh_interval,
            id="rate_refresh",
            replace_existing=True,
        )
        if self.aggregator is not None and settings.recommend_warmup_enabled:
            self._scheduler.add_job(
                self._warm_recommendations,
                "interval",
                seconds=settings.recommend_cache_ttl,
                id="recommend_warmup",
                replace_existing=True,
            )
        self._scheduler.start()
        self.running = True
        logger.info("Refresh scheduler started")

    def pause(self) -> None:
        self._scheduler.pause()
        self.running = False
        logger.info("Refresh scheduler paused")

    def resume(self) -> None:
        self._scheduler.resume()
        self.running = True
        logger.info("Refresh scheduler resumed")

    def shutdown(self) -> None:
        self._scheduler.shutdown(wait=False)
        self.running = False
        logger.info("Refresh scheduler shut down")

    async def _refresh_rates(self) -> None:
        try:
            await self.rate_service.refresh()
        except ExchangeRateApiError as e:
            logger.warning("Scheduled exchange rate refresh failed: %s", e)
        except Exception as e:
            logger.exception("Error refreshing exchange rates: %s", e)

    async def _warm_recommendations(self) -> None:
        try:
            await self.aggregator.recommend(force=True)
        except Exception as e:
            logger.exception("Error warming recommendations: %s", e)
