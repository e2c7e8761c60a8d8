"""
Assessment Files API

Photos and documents attached to a claim: list, bulk upload and zip download
of all photos.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session

from crashify.api.v1.endpoints.assessments import get_live_assessment
from crashify.core.audit_service import audit_service
from crashify.core.config import settings
from crashify.core.dependencies import require_permission
from crashify.core.photo_archive_service import archive_name, photo_archive_service
from crashify.core.storage_service import StorageError, storage_service
from crashify.db.base import get_db
from crashify.models.uploaded_file import UploadedFile
from crashify.models.user import User
from crashify.schemas.assessment import UploadedFileResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{assessment_id}/files")
def list_files(
    assessment_id: UUID,
    current_user: User = Depends(require_permission("assessments.read")),
    db: Session = Depends(get_db),
):
    get_live_assessment(db, assessment_id)
    files = (
        db.query(UploadedFile)
        .filter(UploadedFile.assessment_id == assessment_id)
        .order_by(UploadedFile.uploaded_at.desc())
        .all()
    )
    return {"data": [UploadedFileResponse.model_validate(f) for f in files]}


@router.post("/{assessment_id}/files")
async def upload_files(
    assessment_id: UUID,
    request: Request,
    files: List[UploadFile] = File(...),
    current_user: User = Depends(require_permission("assessments.update")),
    db: Session = Depends(get_db),
):
    """
    Upload 1 to MAX_UPLOAD_FILES files.

    Every file is tried; oversize or failing files are reported in `results`
    and do not abort the rest.
    """
    assessment = get_live_assessment(db, assessment_id)

    if not files:
        raise HTTPException(status_code=400, detail="No files provided")
    if len(files) > settings.MAX_UPLOAD_FILES:
        raise HTTPException(status_code=400, detail=f"Maximum {settings.MAX_UPLOAD_FILES} files allowed")

    results = []
    for upload in files:
        file_name = upload.filename or "upload"
        content = await upload.read()

        if len(content) > settings.max_file_size_bytes:
            results.append({
                "fileName": file_name,
                "success": False,
                "error": f"File exceeds {settings.MAX_FILE_SIZE_MB}MB limit",
            })
            continue

        storage_path = storage_service.build_path(assessment.id, file_name)
        try:
            file_url = storage_service.save(storage_path, content)
        except StorageError as e:
            logger.error(f"[Files] Upload failed for {file_name}: {e}")
            results.append({"fileName": file_name, "success": False, "error": "Failed to store file"})
            continue

        record = UploadedFile(
            assessment_id=assessment.id,
            file_name=file_name,
            file_url=file_url,
            file_type=upload.content_type or "application/octet-stream",
            file_size=len(content),
            storage_path=storage_path,
            processing_status="uploaded",
        )
        db.add(record)
        db.commit()
        db.refresh(record)

        results.append({
            "fileName": file_name,
            "success": True,
            "file": UploadedFileResponse.model_validate(record).model_dump(mode="json"),
        })

    uploaded = sum(1 for r in results if r["success"])
    failed = len(results) - uploaded

    audit_service.log_event(
        db, "files_uploaded", resource_type="assessment", resource_id=assessment.id,
        user_id=current_user.id, details={"uploaded": uploaded, "failed": failed},
        request=request,
    )
    logger.info(f"[Files] {assessment.id}: {uploaded} uploaded, {failed} failed")

    return {"success": uploaded > 0, "uploaded": uploaded, "failed": failed, "results": results}


@router.get("/{assessment_id}/files/zip")
def download_photos_zip(
    assessment_id: UUID,
    request: Request,
    current_user: User = Depends(require_permission("assessments.read")),
    db: Session = Depends(get_db),
):
    """All photos of the assessment, oldest first, as CarDamage_{id}.zip."""
    assessment = get_live_assessment(db, assessment_id)
    photos = (
        db.query(UploadedFile)
        .filter(UploadedFile.assessment_id == assessment.id, UploadedFile.file_type.like("image/%"))
        .order_by(UploadedFile.uploaded_at.asc())
        .all()
    )
    if not photos:
        raise HTTPException(status_code=404, detail="No photos found for this assessment")

    content, added = photo_archive_service.build(photos)
    if not added:
        raise HTTPException(status_code=500, detail="Failed to read photos from storage")

    audit_service.log_event(
        db, "photos_zip_downloaded", resource_type="assessment", resource_id=assessment.id,
        user_id=current_user.id, details={"photo_count": added}, request=request,
    )

    return Response(
        content=content,
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{archive_name(assessment.id)}"'},
    )
