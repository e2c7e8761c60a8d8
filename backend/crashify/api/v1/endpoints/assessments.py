import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, File, Form, HTTPException, Query, Request, UploadFile
from pydantic import ValidationError
from sqlalchemy import func
from sqlalchemy.orm import Session

from crashify.core.audit_service import audit_service
from crashify.core.dependencies import require_permission
from crashify.core.email_service import EmailAttachment
from crashify.core.report_dispatch_service import (
    DispatchRequest,
    DispatchValidationError,
    report_dispatch_service,
)
from crashify.core.validation import MAX_DOCUMENT_SIZE_BYTES, is_pdf, is_valid_email
from crashify.db.base import get_db
from crashify.models.assessment import ASSESSMENT_TYPES, Assessment
from crashify.models.uploaded_file import UploadedFile
from crashify.models.user import User
from crashify.schemas.assessment import (
    AssessmentCreate,
    AssessmentDetail,
    AssessmentDetailResponse,
    AssessmentListResponse,
    AssessmentResponse,
    AssessmentStats,
    AssessmentSummary,
    AssessmentUpdate,
    MarkEnteredRequest,
    Pagination,
    UploadedFileResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Columns that may never be cleared through PATCH
REQUIRED_FIELDS = {
    "company_name", "your_name", "your_email", "your_phone", "make", "model",
    "assessment_type", "status", "owner_info", "location_info", "damage_areas",
    "authority_confirmed", "privacy_consent", "email_report_consent", "sms_updates",
}


def get_live_assessment(db: Session, assessment_id: UUID) -> Assessment:
    """Fetch a non-deleted assessment or raise 404."""
    assessment = (
        db.query(Assessment)
        .filter(Assessment.id == assessment_id, Assessment.deleted_at.is_(None))
        .first()
    )
    if not assessment:
        raise HTTPException(status_code=404, detail="Assessment not found")
    return assessment


@router.post("", status_code=201)
def create_assessment(
    form: AssessmentCreate,
    request: Request,
    db: Session = Depends(get_db),
):
    """Public intake form submission."""
    if not is_valid_email(form.your_email):
        raise HTTPException(status_code=400, detail="Invalid email address")

    assessment_type = form.assessment_type if form.assessment_type in ASSESSMENT_TYPES else "Desktop Assessment"

    assessment = Assessment(
        company_name=form.company_name.strip(),
        your_name=form.your_name.strip(),
        your_email=form.your_email.strip(),
        your_phone=form.your_phone.strip(),
        your_role=form.your_role or None,
        department=form.department or None,
        assessment_type=assessment_type,
        claim_reference=form.claim_reference or None,
        policy_number=form.policy_number or None,
        incident_date=form.incident_date or None,
        incident_location=form.incident_location or None,
        vehicle_type=form.vehicle_type or None,
        year=form.year,
        make=form.make.strip(),
        model=form.model.strip(),
        registration=form.registration.upper() if form.registration else None,
        vin=form.vin.upper() if form.vin else None,
        color=form.color or None,
        odometer=form.odometer,
        insurance_value_type=form.insurance_value_type or None,
        insurance_value_amount=form.insurance_value_amount,
        owner_info=form.owner_info or {},
        # Location only matters when an assessor drives out
        location_info=(form.location_info or {}) if assessment_type == "Onsite Assessment" else {},
        incident_description=form.incident_description or None,
        damage_areas=list(form.damage_areas),
        special_instructions=form.special_instructions or None,
        internal_notes=form.internal_notes or None,
        authority_confirmed=form.authority_confirmed,
        privacy_consent=form.privacy_consent,
        email_report_consent=form.email_report_consent,
        sms_updates=form.sms_updates,
        status="pending",
    )
    db.add(assessment)
    db.commit()
    db.refresh(assessment)

    audit_service.log_event(
        db, "assessment_created", resource_type="assessment", resource_id=assessment.id,
        details={"assessment_type": assessment_type, "company_name": assessment.company_name},
        request=request,
    )
    logger.info(f"[Assessments] New {assessment_type} from {assessment.company_name}: {assessment.id}")

    return {
        "success": True,
        "assessment": {
            "id": str(assessment.id),
            "status": assessment.status,
            "created_at": assessment.created_at,
        },
        "message": "Assessment created successfully",
    }


@router.get("", response_model=AssessmentListResponse)
def list_assessments(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100, alias="pageSize"),
    status: Optional[str] = None,
    assessment_type: Optional[str] = Query(None, alias="type"),
    company: Optional[str] = None,
    current_user: User = Depends(require_permission("assessments.read")),
    db: Session = Depends(get_db),
):
    """Page of claim summaries, newest first."""
    query = db.query(Assessment).filter(Assessment.deleted_at.is_(None))
    if status:
        query = query.filter(Assessment.status == status)
    if assessment_type:
        query = query.filter(Assessment.assessment_type == assessment_type)
    if company:
        query = query.filter(Assessment.company_name.ilike(f"%{company}%"))

    total = query.count()
    rows = (
        query.order_by(Assessment.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )

    return AssessmentListResponse(
        data=[AssessmentSummary.model_validate(r) for r in rows],
        pagination=Pagination(
            page=page,
            pageSize=page_size,
            total=total,
            totalPages=math.ceil(total / page_size) if total else 0,
        ),
    )


@router.get("/stats")
def get_stats(
    current_user: User = Depends(require_permission("assessments.read")),
    db: Session = Depends(get_db),
):
    """Dashboard counters."""
    live = db.query(Assessment).filter(Assessment.deleted_at.is_(None))

    by_status = dict(
        live.with_entities(Assessment.status, func.count(Assessment.id))
        .group_by(Assessment.status)
        .all()
    )
    by_type = dict(
        live.with_entities(Assessment.assessment_type, func.count(Assessment.id))
        .group_by(Assessment.assessment_type)
        .all()
    )
    week_ago = datetime.now(timezone.utc) - timedelta(days=7)
    recent = live.filter(Assessment.created_at >= week_ago).count()

    stats = AssessmentStats(
        total=sum(by_status.values()),
        pending=by_status.get("pending", 0),
        processing=by_status.get("processing", 0),
        completed=by_status.get("completed", 0),
        desktop=by_type.get("Desktop Assessment", 0),
        onsite=by_type.get("Onsite Assessment", 0),
        recentSubmissions=recent,
    )
    return {"data": stats}


@router.get("/{assessment_id}", response_model=AssessmentDetailResponse)
def get_assessment(
    assessment_id: UUID,
    current_user: User = Depends(require_permission("assessments.read")),
    db: Session = Depends(get_db),
):
    """Single assessment with its files."""
    assessment = get_live_assessment(db, assessment_id)
    files = (
        db.query(UploadedFile)
        .filter(UploadedFile.assessment_id == assessment.id)
        .order_by(UploadedFile.uploaded_at.desc())
        .all()
    )
    return AssessmentDetailResponse(
        data=AssessmentDetail(
            assessment=AssessmentResponse.model_validate(assessment),
            files=[UploadedFileResponse.model_validate(f) for f in files],
        )
    )


@router.patch("/{assessment_id}")
def update_assessment(
    assessment_id: UUID,
    updates: Dict[str, Any] = Body(...),
    current_user: User = Depends(require_permission("assessments.update")),
    db: Session = Depends(get_db),
):
    """
    Partial update of any editable field.

    `id`, `created_at` and `deleted_at` (and any unknown key) are ignored.
    Status is a free label: any of the four values may replace any other.
    """
    try:
        parsed = AssessmentUpdate.model_validate(updates)
    except ValidationError as e:
        raise HTTPException(
            status_code=400,
            detail="; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()),
        )

    changes = parsed.model_dump(exclude_unset=True)
    cleared = sorted(k for k, v in changes.items() if v is None and k in REQUIRED_FIELDS)
    if cleared:
        raise HTTPException(status_code=400, detail=f"Field(s) cannot be empty: {', '.join(cleared)}")

    assessment = get_live_assessment(db, assessment_id)
    previous_status = assessment.status

    for key, value in changes.items():
        setattr(assessment, key, value)

    now = datetime.now(timezone.utc)
    assessment.updated_at = now
    if changes.get("status") == "completed" and previous_status != "completed":
        assessment.completed_at = now

    db.commit()
    db.refresh(assessment)

    if "status" in changes and changes["status"] != previous_status:
        logger.info(f"[Assessments] {assessment.id} status {previous_status} -> {assessment.status} by {current_user.email}")

    return {"success": True, "data": AssessmentResponse.model_validate(assessment)}


@router.delete("/{assessment_id}")
def delete_assessment(
    assessment_id: UUID,
    request: Request,
    current_user: User = Depends(require_permission("assessments.delete")),
    db: Session = Depends(get_db),
):
    """Soft delete; the record disappears from every listing."""
    assessment = get_live_assessment(db, assessment_id)
    assessment.deleted_at = datetime.now(timezone.utc)
    db.commit()

    audit_service.log_event(
        db, "assessment_deleted", resource_type="assessment", resource_id=assessment.id,
        user_id=current_user.id, request=request,
    )
    return {"success": True}


@router.post("/{assessment_id}/iq-helper/mark-entered")
def mark_entered_in_iq(
    assessment_id: UUID,
    body: MarkEnteredRequest,
    request: Request,
    current_user: User = Depends(require_permission("assessments.update")),
    db: Session = Depends(get_db),
):
    """Record that the claim has been keyed into IQ Controls."""
    assessment = get_live_assessment(db, assessment_id)
    old_status = assessment.status
    now = datetime.now(timezone.utc)

    assessment.status = "processing"
    assessment.updated_at = now
    reference = (body.iqReference or "").strip()
    if reference:
        note = f"[IQ Controls] Reference: {reference} - Entered at {now.strftime('%d/%m/%Y, %H:%M:%S')}"
        assessment.internal_notes = f"{assessment.internal_notes}\n\n{note}" if assessment.internal_notes else note

    db.commit()
    db.refresh(assessment)

    audit_service.log_event(
        db, "marked_entered_iq_controls", resource_type="assessment", resource_id=assessment.id,
        user_id=current_user.id,
        details={
            "old_status": old_status,
            "new_status": "processing",
            "iq_reference": reference or None,
            "entered_at": now.isoformat(),
        },
        request=request,
    )
    logger.info(f"[IQHelper] {assessment.id} marked as entered (ref={reference or '-'})")

    return {
        "success": True,
        "data": AssessmentResponse.model_validate(assessment),
        "message": "Assessment marked as entered in IQ Controls",
    }


@router.post("/{assessment_id}/send-emails")
async def send_assessment_emails(
    assessment_id: UUID,
    request: Request,
    repair_authority: Optional[UploadFile] = File(None),
    assessed_quote: Optional[UploadFile] = File(None),
    assessment_report: Optional[UploadFile] = File(None),
    repairer_email: str = Form(""),
    repairer_name: str = Form(""),
    insurance_email: str = Form(""),
    insurance_name: str = Form(""),
    additional_notes: str = Form(""),
    current_user: User = Depends(require_permission("reports.send")),
    db: Session = Depends(get_db),
):
    """
    Email the finished paperwork to the repairer and/or insurer.

    Documents must be PDFs of at most 10MB. The insurer mail carries the
    assessment photos as a zip when any exist. The assessment is marked
    completed once dispatch runs.
    """
    assessment = get_live_assessment(db, assessment_id)

    documents = {}
    uploads = {
        "repair_authority": repair_authority,
        "assessed_quote": assessed_quote,
        "assessment_report": assessment_report,
    }
    for slot, upload in uploads.items():
        if upload is None or not upload.filename:
            continue
        if not is_pdf(upload.filename, upload.content_type):
            raise HTTPException(status_code=400, detail=f"{upload.filename} must be a PDF")
        content = await upload.read()
        if len(content) > MAX_DOCUMENT_SIZE_BYTES:
            raise HTTPException(status_code=400, detail=f"{upload.filename} exceeds the 10MB limit")
        documents[slot] = EmailAttachment(upload.filename, content)

    dispatch_request = DispatchRequest(
        documents=documents,
        repairer_email=repairer_email.strip(),
        repairer_name=repairer_name.strip(),
        insurance_email=insurance_email.strip(),
        insurance_name=insurance_name.strip(),
        additional_notes=additional_notes.strip(),
    )
    try:
        results = await report_dispatch_service.dispatch(db, assessment, dispatch_request)
    except DispatchValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    sent = [r for r in results if r.success]
    all_sent = len(sent) == len(results)
    audit_service.log_event(
        db, "emails_sent", resource_type="assessment", resource_id=assessment.id,
        user_id=current_user.id,
        details={
            "recipients": [r.recipient for r in results],
            "sent": len(sent),
            "documents": sorted(documents),
        },
        request=request,
        success=all_sent,
    )

    if all_sent:
        message = "All emails sent successfully"
    elif sent:
        message = "Some emails failed to send"
    else:
        message = "No emails were sent"

    return {
        "success": all_sent,
        "results": [{"recipient": r.recipient, "success": r.success, "error": r.error} for r in results],
        "message": message,
    }
