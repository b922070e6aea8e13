"""
File upload endpoints.

Uploads are written to the filesystem storage and served under /uploads.
Gallery uploads are all-or-nothing: when any file of a request is rejected
or fails to store, the files already written for that request are removed again.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile, status
from sqlalchemy.orm import Session

from vending_info.api.deps import AuthContext, require_auth, require_machine_owner_or_admin
from vending_info.core.config import settings
from vending_info.core.limiter import limiter
from vending_info.core.schemas.auth import MessageResponse
from vending_info.core.schemas.upload import (
    GalleryUploadResponse,
    Photo,
    UploadedFile,
    UploadResponse,
)
from vending_info.core.utils.file_storage import (
    KIND_CATEGORIES,
    FileStorage,
    StoredFile,
    UploadValidationError,
    get_file_storage,
)
from vending_info.db.models.machine import Photo as PhotoModel
from vending_info.db.models.machine import VendingMachine
from vending_info.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


async def _store_upload(storage: FileStorage, category: str, upload: UploadFile) -> StoredFile:
    # One byte past the limit is enough to tell the file is too large
    data = await upload.read(storage.max_size + 1)
    try:
        return storage.save(
            category,
            upload.filename or "",
            upload.content_type or "application/octet-stream",
            data,
        )
    except UploadValidationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/single", response_model=UploadResponse)
@limiter.limit(settings.rate_limit_upload_endpoints)
async def upload_single(
    request: Request,
    file: UploadFile = File(...),
    kind: str = Query("general", description="logo, product or general"),
    auth: AuthContext = Depends(require_auth),
    storage: FileStorage = Depends(get_file_storage),
) -> UploadResponse:
    """Upload one logo, product photo or general machine image"""
    category = KIND_CATEGORIES.get(kind)
    if category is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown upload kind '{kind}'. Use one of: {', '.join(KIND_CATEGORIES)}",
        )

    stored = await _store_upload(storage, category, file)
    logger.info("File uploaded", extra={"user_id": auth.user.id, "kind": kind})
    return UploadResponse(
        message="File uploaded successfully",
        file=UploadedFile.model_validate(stored),
    )


@router.post("/gallery/{machine_id}", response_model=GalleryUploadResponse)
@limiter.limit(settings.rate_limit_upload_endpoints)
async def upload_gallery(
    request: Request,
    machine_id: int,
    files: List[UploadFile] = File(...),
    caption: Optional[str] = Form(None),
    auth: AuthContext = Depends(require_machine_owner_or_admin),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage),
) -> GalleryUploadResponse:
    """Add images or videos to a machine's gallery"""
    machine = db.get(VendingMachine, machine_id)
    if not machine:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Machine with ID {machine_id} not found",
        )

    if len(files) > settings.MAX_GALLERY_FILES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"At most {settings.MAX_GALLERY_FILES} files can be uploaded at once",
        )

    stored_files: List[StoredFile] = []
    try:
        for upload in files:
            stored_files.append(await _store_upload(storage, "gallery", upload))

        photos = [
            PhotoModel(
                machine_id=machine.id,
                url=stored.url,
                caption=caption or None,
                media_type=stored.media_type,
                original_name=stored.original_name,
                file_size=stored.size,
                storage_path=stored.storage_path,
            )
            for stored in stored_files
        ]
        db.add_all(photos)
        db.commit()
    except Exception:
        db.rollback()
        for stored in stored_files:
            storage.delete(stored.storage_path)
        raise

    for photo in photos:
        db.refresh(photo)

    logger.info("Gallery files uploaded", extra={
        "user_id": auth.user.id,
        "machine_id": machine.id,
        "count": len(photos),
    })
    return GalleryUploadResponse(
        message="Gallery files uploaded successfully",
        photos=[Photo.model_validate(photo) for photo in photos],
    )


@router.delete("/gallery/{photo_id}", response_model=MessageResponse)
@limiter.limit(settings.rate_limit_write_endpoints)
async def delete_gallery_item(
    request: Request,
    photo_id: int,
    auth: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage),
) -> MessageResponse:
    """Remove a gallery entry and its file (machine owner or admin)"""
    photo = db.get(PhotoModel, photo_id)
    if not photo:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Photo with ID {photo_id} not found",
        )

    if not auth.is_admin and photo.machine.owner_id != auth.user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied",
        )

    storage_path = photo.storage_path
    db.delete(photo)
    db.commit()

    if storage_path:
        storage.delete(storage_path)
    return MessageResponse(message="Photo deleted successfully")
