"""Aggregate all API routers."""

from fastapi import APIRouter

from . import market, products, profit, rates, recommendations, reference, routes, system

api_router = APIRouter()
api_router.include_router(products.router)
api_router.include_router(profit.router)
api_router.include_router(routes.router)
api_router.include_router(recommendations.router)
api_router.include_router(rates.router)
api_router.include_router(reference.router)
api_router.include_router(market.router)
api_router.include_router(system.router)
