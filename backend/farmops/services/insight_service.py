"""Insight Service — farm lookup → AI call → normalization → persistence.

Invariants:
    - Missing farm raises ResourceNotFoundError before any AI call or write
    - Every stored row passed through normalize_insights
    - One commit per generation; all rows share one created_at timestamp
    - Any failure after the farm lookup surfaces as InsightGenerationError (500)

Design Decisions:
    - No retry at this level: the AI client owns transport retries, the handler
      reports everything else as a 500 with best-effort details
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from farmops.core.errors import (
    ErrorContext, FarmOpsError, InsightGenerationError, ResourceNotFoundError,
)
from farmops.core.insight_normalization import normalize_insights
from farmops.core.insight_payload import parse_insight_payload
from farmops.core.insight_prompt import build_farm_snapshot, build_insight_messages
from farmops.infrastructure.anthropic_client import (
    ResilientAnthropicClient, extract_text,
)
from farmops.models import AIInsight, Crop, Farm, Livestock

logger = logging.getLogger(__name__)


async def get_farm_or_404(db: AsyncSession, farm_id: UUID) -> Farm:
    farm = await db.get(Farm, farm_id)
    if farm is None:
        raise ResourceNotFoundError("Farm", str(farm_id))
    return farm


async def generate_farm_insights(
    db: AsyncSession,
    ai_client: ResilientAnthropicClient,
    farm_id: UUID,
    *,
    model: str,
    max_tokens: int,
) -> list[AIInsight]:
    """Generate, normalize and store insights for one farm."""
    farm = await get_farm_or_404(db, farm_id)
    try:
        return await _generate(db, ai_client, farm, model, max_tokens)
    except Exception as e:
        await db.rollback()
        logger.error(
            f"Error generating insights: {e}", exc_info=True,
            extra={"farm_id": str(farm_id)},
        )
        details = e.message if isinstance(e, FarmOpsError) else str(e)
        raise InsightGenerationError(
            details or "Unknown error",
            context=ErrorContext(resource_id=str(farm_id)),
        )


async def _generate(
    db: AsyncSession,
    ai_client: ResilientAnthropicClient,
    farm: Farm,
    model: str,
    max_tokens: int,
) -> list[AIInsight]:
    crops = (await db.execute(
        select(Crop).where(Crop.farm_id == farm.id),
    )).scalars().all()
    livestock = (await db.execute(
        select(Livestock).where(Livestock.farm_id == farm.id),
    )).scalars().all()

    now = datetime.now(timezone.utc)
    snapshot = build_farm_snapshot(
        farm.to_dict(),
        [c.to_dict() for c in crops],
        [a.to_dict() for a in livestock],
        now,
    )
    system, messages = build_insight_messages(snapshot)
    response = await ai_client.create_message(
        model=model, max_tokens=max_tokens, system=system, messages=messages,
        context=ErrorContext(resource_id=str(farm.id)),
    )

    records = normalize_insights(
        parse_insight_payload(extract_text(response)),
        farm_id=farm.id, organization_id=farm.organization_id, now=now,
    )
    rows = [
        AIInsight(metadata_=r.pop("metadata"), **r) for r in records
    ]
    db.add_all(rows)
    await db.commit()
    logger.info(
        "Insights stored",
        extra={"farm_id": str(farm.id), "insight_count": len(rows)},
    )
    return rows


async def list_farm_insights(db: AsyncSession, farm_id: UUID) -> list[AIInsight]:
    await get_farm_or_404(db, farm_id)
    result = await db.execute(
        select(AIInsight)
        .where(AIInsight.farm_id == farm_id)
        .order_by(AIInsight.created_at.desc()),
    )
    return list(result.scalars().all())
