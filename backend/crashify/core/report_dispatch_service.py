"""
Report Dispatch Service

Sends the finished assessment paperwork:
- Repairer: repair authority + assessed quote
- Insurer: assessment report + photos zip (when photos exist)

Each sent mail is recorded in email_logs. A recipient failure is reported in
the results and does not stop the other mail. Once dispatch has been
attempted the assessment is marked completed.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from crashify.core.email_service import EmailAttachment, EmailService, OutgoingEmail, email_service
from crashify.core.email_templates import render_insurer_email, render_repairer_email, vehicle_display
from crashify.core.photo_archive_service import PhotoArchiveService, archive_name, photo_archive_service
from crashify.core.validation import is_valid_email
from crashify.models.assessment import Assessment
from crashify.models.email_log import EmailLog
from crashify.models.uploaded_file import UploadedFile

logger = logging.getLogger(__name__)

DOCUMENT_SLOTS = ("repair_authority", "assessed_quote", "assessment_report")
DEFAULT_FILENAMES = {
    "repair_authority": "Repair_Authority.pdf",
    "assessed_quote": "Assessed_Quote.pdf",
    "assessment_report": "Assessment_Report.pdf",
}


class DispatchValidationError(ValueError):
    """Request is missing documents or recipients."""


@dataclass
class DispatchRequest:
    documents: Dict[str, EmailAttachment] = field(default_factory=dict)
    repairer_email: str = ""
    repairer_name: str = ""
    insurance_email: str = ""
    insurance_name: str = ""
    additional_notes: str = ""


@dataclass
class RecipientResult:
    recipient: str
    success: bool
    error: Optional[str] = None


def validate_dispatch(req: DispatchRequest) -> None:
    """Same rules the console enforces before submitting."""
    if "repair_authority" not in req.documents and "assessment_report" not in req.documents:
        raise DispatchValidationError("Please upload at least Repair Authority or Assessment Report")
    if not req.repairer_email and not req.insurance_email:
        raise DispatchValidationError("Please provide at least one recipient email address")
    if req.repairer_email and not is_valid_email(req.repairer_email):
        raise DispatchValidationError("Invalid repairer email address")
    if req.insurance_email and not is_valid_email(req.insurance_email):
        raise DispatchValidationError("Invalid insurance email address")


class ReportDispatchService:

    def __init__(self, mailer: EmailService = email_service, archiver: PhotoArchiveService = photo_archive_service):
        self.mailer = mailer
        self.archiver = archiver

    async def dispatch(self, db: Session, assessment: Assessment, req: DispatchRequest) -> List[RecipientResult]:
        validate_dispatch(req)
        results: List[RecipientResult] = []
        vehicle = vehicle_display(assessment)

        # Repairer mail
        repairer_docs = [req.documents[s] for s in ("repair_authority", "assessed_quote") if s in req.documents]
        if req.repairer_email and repairer_docs:
            subject = f"Repair Authority - {vehicle}"
            html = render_repairer_email(
                assessment,
                [d.filename for d in repairer_docs],
                req.additional_notes,
            )
            result = await self.mailer.send(OutgoingEmail(
                to=req.repairer_email, subject=subject, html=html, attachments=repairer_docs,
            ))
            results.append(RecipientResult(req.repairer_email, result.success, result.error))
            if result.success:
                self._log_email(db, assessment, "repairer", req.repairer_email, req.repairer_name,
                                subject, html, repairer_docs, result.message_id)

        # Insurer mail
        report = req.documents.get("assessment_report")
        if req.insurance_email and report:
            attachments = [report]
            photos = (
                db.query(UploadedFile)
                .filter(UploadedFile.assessment_id == assessment.id, UploadedFile.file_type.like("image/%"))
                .order_by(UploadedFile.uploaded_at.asc())
                .all()
            )
            if photos:
                content, added = self.archiver.build(photos)
                if added:
                    attachments.append(EmailAttachment(archive_name(assessment.id), content))

            subject = f"Assessment Report - Claim {assessment.claim_reference or assessment.id}"
            html = render_insurer_email(
                assessment,
                [a.filename for a in attachments],
                req.additional_notes,
                recipient_name=req.insurance_name or None,
            )
            result = await self.mailer.send(OutgoingEmail(
                to=req.insurance_email, subject=subject, html=html, attachments=attachments,
            ))
            results.append(RecipientResult(req.insurance_email, result.success, result.error))
            if result.success:
                self._log_email(db, assessment, "insurer", req.insurance_email, req.insurance_name,
                                subject, html, attachments, result.message_id)

        now = datetime.now(timezone.utc)
        assessment.status = "completed"
        assessment.completed_at = now
        assessment.updated_at = now
        db.commit()
        db.refresh(assessment)

        sent = sum(1 for r in results if r.success)
        logger.info(f"[SendEmails] Assessment {assessment.id}: {sent}/{len(results)} emails sent")
        return results

    def _log_email(self, db, assessment, recipient_type, email, name, subject, html, attachments, message_id):
        db.add(EmailLog(
            assessment_id=assessment.id,
            recipient_type=recipient_type,
            recipient_email=email,
            recipient_name=name or None,
            subject=subject,
            body_html=html,
            attachments=[{"filename": a.filename} for a in attachments],
            status="sent",
            message_id=message_id,
        ))


report_dispatch_service = ReportDispatchService()
