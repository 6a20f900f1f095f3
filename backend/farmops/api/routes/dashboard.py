"""Dashboard — per-organization analytics for the dashboard charts.

Invariants:
    - Auth required (401); caller must belong to organizationId (403)
    - Read-only: aggregation only, no writes
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from farmops.api.auth import require_user
from farmops.infrastructure.database import get_db
from farmops.infrastructure.supabase_auth import AuthenticatedUser
from farmops.services import dashboard_service
from farmops.services.access_control import require_organization_member

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


async def member_organization(
    organization_id: UUID = Query(..., alias="organizationId"),
    user: AuthenticatedUser = Depends(require_user),
    db: AsyncSession = Depends(get_db),
) -> UUID:
    """Resolve organizationId, enforcing membership of the caller."""
    await require_organization_member(db, user.id, organization_id)
    return organization_id


@router.get("/crops")
async def crops(
    organization_id: UUID = Depends(member_organization),
    db: AsyncSession = Depends(get_db),
):
    return {"crops": await dashboard_service.crop_performance(db, organization_id)}


@router.get("/financial")
async def financial(
    organization_id: UUID = Depends(member_organization),
    db: AsyncSession = Depends(get_db),
):
    return await dashboard_service.financial_overview(db, organization_id)


@router.get("/livestock")
async def livestock(
    organization_id: UUID = Depends(member_organization),
    db: AsyncSession = Depends(get_db),
):
    return await dashboard_service.livestock_analytics(db, organization_id)


@router.get("/resources")
async def resources(
    organization_id: UUID = Depends(member_organization),
    db: AsyncSession = Depends(get_db),
):
    return await dashboard_service.resource_utilization(db, organization_id)
