"""Growth Stages — organization-scoped CRUD for crop growth stage definitions.

Invariants:
    - Every method requires an authenticated user (401)
    - List returns the stages of the caller's organization only (403 if none)
    - Single-stage operations: 404 when missing, then 403 unless member of its organization
    - organization_id is fixed at creation
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from farmops.api.auth import require_user
from farmops.core.errors import AccessDeniedError, ResourceNotFoundError
from farmops.infrastructure.database import get_db
from farmops.infrastructure.supabase_auth import AuthenticatedUser
from farmops.models import GrowthStage
from farmops.schemas.growth import (
    GrowthStageCreate, GrowthStageResponse, GrowthStageUpdate,
)
from farmops.services.access_control import (
    get_user_organization, require_organization_member,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/growth/stages", tags=["growth-stages"])


async def get_stage_or_404(db: AsyncSession, stage_id: UUID) -> GrowthStage:
    stage = await db.get(GrowthStage, stage_id)
    if stage is None:
        raise ResourceNotFoundError("Growth stage", str(stage_id))
    return stage


@router.get("", response_model=list[GrowthStageResponse])
async def list_stages(
    crop_type_id: UUID | None = Query(None, alias="cropTypeId"),
    user: AuthenticatedUser = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    """Stages of the caller's organization in lifecycle order."""
    organization_id = await get_user_organization(db, user.id)
    if organization_id is None:
        raise AccessDeniedError("Not a member of any organization")

    query = select(GrowthStage).where(
        GrowthStage.organization_id == organization_id,
    )
    if crop_type_id:
        query = query.where(GrowthStage.crop_type_id == crop_type_id)
    result = await db.execute(query.order_by(GrowthStage.order.asc()))
    return result.scalars().all()


@router.get("/{stage_id}", response_model=GrowthStageResponse)
async def get_stage(
    stage_id: UUID,
    user: AuthenticatedUser = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    stage = await get_stage_or_404(db, stage_id)
    await require_organization_member(db, user.id, stage.organization_id)
    return stage


@router.post(
    "", response_model=GrowthStageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_stage(
    body: GrowthStageCreate,
    user: AuthenticatedUser = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    await require_organization_member(db, user.id, body.organization_id)
    stage = GrowthStage(
        **body.model_dump(),
        created_by=user.id,
        updated_by=user.id,
    )
    db.add(stage)
    await db.commit()
    await db.refresh(stage)
    logger.info(
        f"Growth stage {stage.id} created", extra={"user_id": str(user.id)},
    )
    return stage


@router.put("/{stage_id}", response_model=GrowthStageResponse)
async def update_stage(
    stage_id: UUID,
    body: GrowthStageUpdate,
    user: AuthenticatedUser = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    stage = await get_stage_or_404(db, stage_id)
    await require_organization_member(db, user.id, stage.organization_id)

    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(stage, field, value)
    stage.updated_by = user.id
    stage.updated_at = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(stage)
    return stage


@router.delete("/{stage_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_stage(
    stage_id: UUID,
    user: AuthenticatedUser = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    stage = await get_stage_or_404(db, stage_id)
    await require_organization_member(db, user.id, stage.organization_id)
    await db.delete(stage)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
