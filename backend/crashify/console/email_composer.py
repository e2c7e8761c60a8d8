"""
Email Automation Composer

Collects the PDFs and recipients for the report emails of one assessment.
Documents are checked when attached; recipients and the document
combination are checked again before sending.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from crashify.console.api_client import AdminApiClient, ApiError, UploadItem
from crashify.console.assessment_detail import ReloadCallback, run_callback
from crashify.console.toast import ToastCenter
from crashify.core.validation import MAX_DOCUMENT_SIZE_BYTES, is_pdf, is_valid_email

logger = logging.getLogger(__name__)

# slots double as the multipart field names
DOCUMENT_SLOTS = ("repair_authority", "assessed_quote", "assessment_report")
DOCUMENT_LABELS = {
    "repair_authority": "Repair Authority",
    "assessed_quote": "Assessed Quote",
    "assessment_report": "Assessment Report",
}


class EmailComposer:

    def __init__(
        self,
        client: AdminApiClient,
        toasts: ToastCenter,
        assessment: Dict[str, Any],
        confirm: Optional[Callable[[str], bool]] = None,
        on_close: Optional[ReloadCallback] = None,
        on_refresh: Optional[ReloadCallback] = None,
    ):
        self.client = client
        self.toasts = toasts
        self.assessment_id = str(assessment["id"])
        self.confirm = confirm or (lambda message: False)
        self.on_close = on_close
        self.on_refresh = on_refresh

        self.documents: Dict[str, UploadItem] = {}
        self.busy = False
        self.closed = False
        self.results: List[Dict[str, Any]] = []

        owner = assessment.get("owner_info") or {}
        self.repairer_name = f"{owner.get('firstName') or ''} {owner.get('lastName') or ''}".strip()
        self.repairer_email = owner.get("email") or ""
        self.insurance_name = assessment.get("company_name") or ""
        self.insurance_email = assessment.get("your_email") or ""
        self.additional_notes = ""

    def attach(self, slot: str, item: UploadItem) -> bool:
        """Stage a PDF for a slot. Anything else is refused with a toast."""
        if slot not in DOCUMENT_SLOTS:
            raise ValueError(f"Unknown document slot: {slot}")
        label = DOCUMENT_LABELS[slot]
        if not is_pdf(item.name, item.content_type):
            self.toasts.error(f"{label} must be a PDF file")
            return False
        if item.size > MAX_DOCUMENT_SIZE_BYTES:
            self.toasts.error(f"{label} must be less than 10MB")
            return False
        self.documents[slot] = item
        return True

    def detach(self, slot: str) -> None:
        self.documents.pop(slot, None)

    def validation_errors(self) -> List[str]:
        errors = []
        if "repair_authority" not in self.documents and "assessment_report" not in self.documents:
            errors.append("Please upload at least Repair Authority or Assessment Report")
        repairer = self.repairer_email.strip()
        insurance = self.insurance_email.strip()
        if not repairer and not insurance:
            errors.append("Please provide at least one recipient email address")
        if repairer and not is_valid_email(repairer):
            errors.append("Invalid repairer email address")
        if insurance and not is_valid_email(insurance):
            errors.append("Invalid insurance email address")
        return errors

    @property
    def can_submit(self) -> bool:
        return not self.busy and not self.validation_errors()

    async def submit(self) -> bool:
        if self.busy:
            return False
        errors = self.validation_errors()
        if errors:
            self.toasts.error(errors[0])
            return False
        if not self.confirm("Send these documents now? The assessment will be marked as completed."):
            return False

        fields = {
            "repairer_email": self.repairer_email.strip(),
            "repairer_name": self.repairer_name.strip(),
            "insurance_email": self.insurance_email.strip(),
            "insurance_name": self.insurance_name.strip(),
            "additional_notes": self.additional_notes.strip(),
        }
        documents = dict(self.documents)

        self.busy = True
        try:
            result = await self.client.send_emails(self.assessment_id, documents, fields)
        except ApiError as e:
            logger.error(f"[EmailComposer] Send failed for {self.assessment_id}: {e.message}")
            self.toasts.error(f"Failed to send emails: {e.message}")
            return False
        finally:
            self.busy = False

        self.results = result.get("results", [])
        failed = [r for r in self.results if not r.get("success")]
        if failed and len(failed) == len(self.results):
            self.toasts.error(f"Failed to send emails: {failed[0].get('error') or 'unknown error'}")
            return False
        if failed:
            # the assessment is already completed server-side
            first = failed[0]
            self.toasts.warning(
                f"{result.get('message')}: {first['recipient']} ({first.get('error') or 'unknown error'})"
            )
        else:
            self.toasts.success(result.get("message") or "All emails sent successfully")
        self.closed = True
        await run_callback(self.on_close)
        await run_callback(self.on_refresh)
        return True
