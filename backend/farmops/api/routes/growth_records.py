"""Growth Records — CRUD for crop growth checkpoints, scoped by crop access.

Invariants:
    - Every method requires an authenticated user (401 before anything else)
    - Access = membership in the organization owning the record's crop (else 403)
    - Missing record → 404 before the access check
    - crop_id, created_by and created_at never change after insert
    - Responses nest the record's growth stage

Design Decisions:
    - Query-string addressing (?id=, ?cropId=) matches the dashboard client
    - Image cleanup on delete is best-effort: storage failures are logged, not surfaced
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from farmops.api.auth import require_user
from farmops.core.errors import (
    RequestValidationFailed, ResourceNotFoundError, StorageError,
)
from farmops.core.storage_paths import object_path_from_public_url
from farmops.infrastructure.database import get_db
from farmops.infrastructure.supabase_auth import AuthenticatedUser
from farmops.infrastructure.supabase_storage import (
    SupabaseStorageClient, get_storage,
)
from farmops.models import GrowthRecord, GrowthStage
from farmops.schemas.growth import (
    GrowthRecordCreate, GrowthRecordResponse, GrowthRecordUpdate,
)
from farmops.services.access_control import require_crop_access

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/growth/records", tags=["growth-records"])


async def get_record_or_404(db: AsyncSession, record_id: UUID) -> GrowthRecord:
    result = await db.execute(
        select(GrowthRecord)
        .where(GrowthRecord.id == record_id)
        .execution_options(populate_existing=True),
    )
    record = result.scalar_one_or_none()
    if record is None:
        raise ResourceNotFoundError("Growth record", str(record_id))
    return record


async def _check_stage(db: AsyncSession, stage_id: UUID | None) -> None:
    if stage_id is not None and await db.get(GrowthStage, stage_id) is None:
        raise RequestValidationFailed(
            f"Growth stage '{stage_id}' does not exist", "stage_id",
        )


@router.get("")
async def get_records(
    record_id: UUID | None = Query(None, alias="id"),
    crop_id: UUID | None = Query(None, alias="cropId"),
    user: AuthenticatedUser = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    """One record (?id=) or all records of a crop (?cropId=), newest first."""
    if record_id:
        record = await get_record_or_404(db, record_id)
        await require_crop_access(db, user.id, record.crop_id)
        return GrowthRecordResponse.model_validate(record)
    if crop_id:
        await require_crop_access(db, user.id, crop_id)
        result = await db.execute(
            select(GrowthRecord)
            .where(GrowthRecord.crop_id == crop_id)
            .order_by(GrowthRecord.start_date.desc()),
        )
        return [
            GrowthRecordResponse.model_validate(r)
            for r in result.scalars().all()
        ]
    raise RequestValidationFailed("Missing cropId or id parameter", "cropId")


@router.post(
    "", response_model=GrowthRecordResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_record(
    body: GrowthRecordCreate,
    crop_id: UUID | None = Query(None, alias="cropId"),
    user: AuthenticatedUser = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    crop_id = crop_id or body.crop_id
    if crop_id is None:
        raise RequestValidationFailed("cropId is required", "cropId")
    await require_crop_access(db, user.id, crop_id)
    await _check_stage(db, body.stage_id)

    record = GrowthRecord(
        **body.model_dump(exclude={"crop_id"}),
        crop_id=crop_id,
        created_by=user.id,
        updated_by=user.id,
    )
    db.add(record)
    await db.commit()
    logger.info(
        f"Growth record {record.id} created",
        extra={"user_id": str(user.id)},
    )
    return GrowthRecordResponse.model_validate(
        await get_record_or_404(db, record.id),
    )


@router.put("", response_model=GrowthRecordResponse)
async def update_record(
    body: GrowthRecordUpdate,
    record_id: UUID | None = Query(None, alias="id"),
    user: AuthenticatedUser = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    if record_id is None:
        raise RequestValidationFailed("Record ID is required", "id")
    record = await get_record_or_404(db, record_id)
    await require_crop_access(db, user.id, record.crop_id)

    updates = body.model_dump(exclude_unset=True)
    if "stage_id" in updates:
        await _check_stage(db, updates["stage_id"])
    start = updates.get("start_date", record.start_date)
    end = updates.get("end_date", record.end_date)
    if end is not None and end < start:
        raise RequestValidationFailed(
            "end_date cannot be before start_date", "end_date",
        )

    for field, value in updates.items():
        setattr(record, field, value)
    record.updated_by = user.id
    record.updated_at = datetime.now(timezone.utc)
    await db.commit()
    return GrowthRecordResponse.model_validate(
        await get_record_or_404(db, record_id),
    )


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def delete_record(
    record_id: UUID | None = Query(None, alias="id"),
    user: AuthenticatedUser = Depends(require_user),
    db: AsyncSession = Depends(get_db),
    storage: SupabaseStorageClient = Depends(get_storage),
):
    if record_id is None:
        raise RequestValidationFailed("Record ID is required", "id")
    record = await get_record_or_404(db, record_id)
    await require_crop_access(db, user.id, record.crop_id)

    paths = [
        path for path in (
            object_path_from_public_url(url, storage.bucket)
            for url in record.images or []
        )
        if path
    ]
    await db.delete(record)
    await db.commit()

    if paths:
        try:
            await storage.remove(paths)
        except StorageError as e:
            logger.warning(
                f"Could not remove images of growth record {record_id}: {e.message}",
            )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
