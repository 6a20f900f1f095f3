"""AI Insights — generate and list model-written insights for a farm.

Invariants:
    - POST returns 404 for an unknown farm with no AI call and no write
    - POST returns 200 {"insights": [...]} with the stored, normalized rows
    - Failures after the farm lookup return 500 INSIGHT_GENERATION_FAILED
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from farmops.config import Settings, get_settings
from farmops.infrastructure.anthropic_client import (
    ResilientAnthropicClient, get_ai_client,
)
from farmops.infrastructure.database import get_db
from farmops.schemas.insight import (
    InsightGenerateRequest, InsightListResponse, InsightResponse,
)
from farmops.services.insight_service import (
    generate_farm_insights, list_farm_insights,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/ai/insights", tags=["ai-insights"])


@router.post("", response_model=InsightListResponse)
async def generate_insights(
    body: InsightGenerateRequest,
    db: AsyncSession = Depends(get_db),
    ai_client: ResilientAnthropicClient = Depends(get_ai_client),
    settings: Settings = Depends(get_settings),
):
    """Generate insights for a farm and store them."""
    rows = await generate_farm_insights(
        db, ai_client, body.farm_id,
        model=settings.insight_model,
        max_tokens=settings.insight_max_tokens,
    )
    return InsightListResponse(
        insights=[InsightResponse.model_validate(r) for r in rows],
    )


@router.get("", response_model=InsightListResponse)
async def list_insights(
    farm_id: UUID = Query(..., alias="farmId"),
    db: AsyncSession = Depends(get_db),
):
    """Stored insights for a farm, newest first."""
    rows = await list_farm_insights(db, farm_id)
    return InsightListResponse(
        insights=[InsightResponse.model_validate(r) for r in rows],
    )
