"""Access Control — organization-membership checks against organization_members.

Invariants:
    - A user may touch a resource iff they are a member of its organization
    - Crop organization = owning farm's organization, else the crop's own organization_id
    - Unknown crops/farms resolve to "no access" (False), never to an exception

Design Decisions:
    - Boolean helpers plus require_* variants: routes decide 403 vs 404 ordering
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from farmops.core.errors import AccessDeniedError
from farmops.models import Crop, Farm, OrganizationMember


async def is_organization_member(
    db: AsyncSession, user_id: UUID, organization_id: UUID | None,
) -> bool:
    if organization_id is None:
        return False
    result = await db.execute(
        select(OrganizationMember.id).where(
            OrganizationMember.user_id == user_id,
            OrganizationMember.organization_id == organization_id,
        ).limit(1),
    )
    return result.scalar_one_or_none() is not None


async def get_user_organization(db: AsyncSession, user_id: UUID) -> UUID | None:
    """The user's first organization (oldest membership), or None."""
    result = await db.execute(
        select(OrganizationMember.organization_id)
        .where(OrganizationMember.user_id == user_id)
        .order_by(OrganizationMember.created_at)
        .limit(1),
    )
    return result.scalar_one_or_none()


async def crop_organization(db: AsyncSession, crop_id: UUID) -> UUID | None:
    crop = await db.get(Crop, crop_id)
    if crop is None:
        return None
    if crop.farm_id is not None:
        farm = await db.get(Farm, crop.farm_id)
        if farm is not None:
            return farm.organization_id
    return crop.organization_id


async def verify_crop_access(
    db: AsyncSession, user_id: UUID, crop_id: UUID,
) -> bool:
    organization_id = await crop_organization(db, crop_id)
    return await is_organization_member(db, user_id, organization_id)


async def require_organization_member(
    db: AsyncSession, user_id: UUID, organization_id: UUID | None,
) -> None:
    if not await is_organization_member(db, user_id, organization_id):
        raise AccessDeniedError()


async def require_crop_access(
    db: AsyncSession, user_id: UUID, crop_id: UUID,
) -> None:
    if not await verify_crop_access(db, user_id, crop_id):
        raise AccessDeniedError()
