"""Uploads — stores growth-record images in Supabase Storage and returns their public URL.

Invariants:
    - Missing file → 400 before any storage call
    - Object name is generated server-side (client filename only contributes its extension)
    - Any storage failure → 500 "Failed to upload file"
"""

import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile

from farmops.core.errors import RequestValidationFailed, StorageError
from farmops.core.storage_paths import build_object_path
from farmops.infrastructure.supabase_storage import (
    SupabaseStorageClient, get_storage,
)
from farmops.schemas.upload import UploadResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/upload", tags=["uploads"])


@router.post("/growth-records", response_model=UploadResponse)
async def upload_growth_record_image(
    file: UploadFile | None = File(None),
    path: str | None = Form(None),
    storage: SupabaseStorageClient = Depends(get_storage),
):
    if file is None:
        raise RequestValidationFailed("No file provided", "file")

    object_path = build_object_path(file.filename, path)
    content = await file.read()
    try:
        await storage.upload(object_path, content, file.content_type)
    except StorageError as e:
        raise StorageError("Failed to upload file", e.operation)
    return UploadResponse(url=storage.public_url(object_path))
