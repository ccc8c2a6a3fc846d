"""Keyword recommendation endpoint."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends

from ..schemas import RecommendationsResponse
from .deps import get_aggregator

router = APIRouter(prefix="/api/recommendations", tags=["recommendations"])


@router.get("", response_model=RecommendationsResponse)
async def get_recommendations(refresh: bool = False, aggregator=Depends(get_aggregator)):
    result = await aggregator.recommend(force=refresh)
    return RecommendationsResponse(**asdict(result))
