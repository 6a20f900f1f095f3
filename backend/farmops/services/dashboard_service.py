"""Dashboard Service — loads an organization's rows and hands them to core/dashboard_metrics.

Invariants:
    - Every query is scoped by organization_id
    - Aggregation happens in core (pure); this module only does IO
"""

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from farmops.core.dashboard_metrics import (
    compute_crop_performance,
    compute_financial_overview,
    compute_livestock_analytics,
    compute_resource_utilization,
)
from farmops.models import Crop, FarmInput, Livestock, Loan


async def _rows(db: AsyncSession, model, organization_id: UUID) -> list[dict]:
    result = await db.execute(
        select(model).where(model.organization_id == organization_id),
    )
    return [row.to_dict() for row in result.scalars().all()]


async def crop_performance(db: AsyncSession, organization_id: UUID) -> list[dict]:
    return compute_crop_performance(await _rows(db, Crop, organization_id))


async def financial_overview(
    db: AsyncSession, organization_id: UUID, months: int = 6,
) -> dict:
    return compute_financial_overview(
        await _rows(db, FarmInput, organization_id),
        await _rows(db, Livestock, organization_id),
        await _rows(db, Loan, organization_id),
        months=months,
    )


async def livestock_analytics(db: AsyncSession, organization_id: UUID) -> dict:
    return compute_livestock_analytics(
        await _rows(db, Livestock, organization_id),
        datetime.now(timezone.utc),
    )


async def resource_utilization(db: AsyncSession, organization_id: UUID) -> dict:
    return compute_resource_utilization(
        await _rows(db, FarmInput, organization_id),
    )
