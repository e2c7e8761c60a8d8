"""
Assessment Detail View

Holds one claim and its files while an admin reviews it. Every editable
field is edited on its own: view -> editing -> saving -> view. A failed save
keeps the field in editing with the staged value intact.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from crashify.console.api_client import AdminApiClient, ApiError, UploadItem
from crashify.console.formatting import status_label
from crashify.console.toast import ToastCenter
from crashify.core.validation import is_accepted_upload

logger = logging.getLogger(__name__)

STATUSES = ("pending", "processing", "completed", "cancelled")
JSON_FIELDS = ("owner_info", "location_info")

EDITABLE_FIELDS = (
    "company_name", "your_name", "your_email", "your_phone", "your_role", "department",
    "assessment_type", "claim_reference", "policy_number", "incident_date", "incident_location",
    "vehicle_type", "year", "make", "model", "registration", "vin", "color", "odometer",
    "insurance_value_type", "insurance_value_amount",
    "incident_description", "damage_areas", "special_instructions", "internal_notes",
    "authority_confirmed", "privacy_consent", "email_report_consent", "sms_updates",
) + JSON_FIELDS

ReloadCallback = Callable[[], Union[Awaitable[Any], Any]]


@dataclass
class FieldEditor:
    field: str
    state: str = "view"  # view | editing | saving
    staged: Any = None

    @property
    def disabled(self) -> bool:
        return self.state == "saving"


async def run_callback(callback: Optional[ReloadCallback]) -> None:
    if callback is None:
        return
    result = callback()
    if inspect.isawaitable(result):
        await result


class AssessmentDetailView:

    def __init__(
        self,
        client: AdminApiClient,
        toasts: ToastCenter,
        assessment_id: str,
        confirm: Optional[Callable[[str], bool]] = None,
        on_reload: Optional[ReloadCallback] = None,
        on_close: Optional[ReloadCallback] = None,
    ):
        self.client = client
        self.toasts = toasts
        self.assessment_id = str(assessment_id)
        self.confirm = confirm or (lambda message: False)
        self.on_reload = on_reload
        self.on_close = on_close

        self.record: Optional[Dict[str, Any]] = None
        self.files: List[Dict[str, Any]] = []
        self.loading = False
        self.error: Optional[str] = None
        self.busy = False
        self.closed = False
        self.status_editing = False
        self.editors: Dict[str, FieldEditor] = {f: FieldEditor(f) for f in EDITABLE_FIELDS}

    @property
    def status_label(self) -> str:
        return status_label(self.record.get("status")) if self.record else ""

    async def load(self) -> bool:
        """Fetch the record and its files together."""
        self.loading = True
        try:
            record, files = await asyncio.gather(
                self.client.get_assessment(self.assessment_id),
                self.client.list_files(self.assessment_id),
            )
        except ApiError as e:
            self.error = e.message
            return False
        finally:
            self.loading = False

        self.record = record
        self.files = files
        self.error = None
        return True

    async def reload_files(self) -> None:
        try:
            self.files = await self.client.list_files(self.assessment_id)
        except ApiError as e:
            self.toasts.error(f"Failed to load files: {e.message}")

    # ============================================================
    # FIELD EDITING
    # ============================================================

    def start_edit(self, field: str) -> FieldEditor:
        editor = self.editors[field]
        if editor.state == "view":
            editor.staged = (self.record or {}).get(field)
            editor.state = "editing"
        return editor

    def stage(self, field: str, value: Any) -> None:
        editor = self.editors[field]
        if editor.state != "editing":
            raise ValueError(f"{field} is not being edited")
        editor.staged = value

    def cancel_edit(self, field: str) -> None:
        editor = self.editors[field]
        if editor.state == "editing":
            editor.staged = None
            editor.state = "view"

    async def save_field(self, field: str) -> bool:
        """PATCH the staged value, changed or not."""
        editor = self.editors[field]
        if editor.state != "editing":
            return False
        return await self._patch(editor, {field: editor.staged})

    async def save_json_field(self, field: str, partial: Dict[str, Any]) -> bool:
        """Shallow-merge `partial` into owner_info/location_info and save."""
        if field not in JSON_FIELDS:
            raise ValueError(f"{field} is not a JSON field")
        editor = self.start_edit(field)
        if editor.state != "editing":
            return False
        merged = {**((self.record or {}).get(field) or {}), **partial}
        editor.staged = merged
        return await self._patch(editor, {field: merged})

    async def _patch(self, editor: FieldEditor, updates: Dict[str, Any]) -> bool:
        editor.state = "saving"
        try:
            updated = await self.client.update_assessment(self.assessment_id, updates)
        except ApiError as e:
            logger.error(f"[AssessmentDetail] Failed to save {editor.field}: {e.message}")
            self.toasts.error(f"Failed to save: {e.message}")
            editor.state = "editing"
            return False

        self.record = updated
        editor.staged = None
        editor.state = "view"
        self.toasts.success("Changes saved")
        return True

    # ============================================================
    # STATUS
    # ============================================================

    def toggle_status_edit(self) -> bool:
        self.status_editing = not self.status_editing
        return self.status_editing

    async def change_status(self, status: str) -> bool:
        """Any of the four statuses may replace any other."""
        if not self.status_editing or self.busy:
            return False
        if status not in STATUSES:
            self.toasts.error(f"Invalid status: {status}")
            return False

        self.busy = True
        try:
            self.record = await self.client.update_assessment(self.assessment_id, {"status": status})
        except ApiError as e:
            self.toasts.error(f"Failed to update status: {e.message}")
            return False
        finally:
            self.busy = False

        self.status_editing = False
        self.toasts.success(f"Status updated to {self.status_label}")
        return True

    # ============================================================
    # DELETE
    # ============================================================

    async def delete(self) -> bool:
        if self.busy:
            return False
        if not self.confirm("Are you sure you want to delete this assessment? This action cannot be undone."):
            return False

        self.busy = True
        try:
            await self.client.delete_assessment(self.assessment_id)
        except ApiError as e:
            self.toasts.error(f"Failed to delete assessment: {e.message}")
            return False
        finally:
            self.busy = False

        self.toasts.success("Assessment deleted")
        self.closed = True
        await run_callback(self.on_close)
        await run_callback(self.on_reload)
        return True

    # ============================================================
    # FILES
    # ============================================================

    async def upload_files(self, items: List[UploadItem]) -> int:
        """Upload the accepted files; returns how many the server stored."""
        if self.busy:
            return 0
        accepted = [i for i in items if is_accepted_upload(i.name, i.content_type)]
        if len(accepted) < len(items):
            self.toasts.warning(f"{len(items) - len(accepted)} file(s) skipped: unsupported type")
        if not accepted:
            return 0

        self.busy = True
        try:
            result = await self.client.upload_files(self.assessment_id, accepted)
        except ApiError as e:
            self.toasts.error(f"Upload failed: {e.message}")
            return 0
        finally:
            self.busy = False

        uploaded = result.get("uploaded", 0)
        await self.reload_files()
        self.toasts.success(f"{uploaded} file(s) uploaded successfully")
        if result.get("failed"):
            self.toasts.warning(f"{result['failed']} file(s) failed to upload")
        return uploaded

    @staticmethod
    def download_url(file: Dict[str, Any]) -> str:
        return file["file_url"]

    async def download_all_zip(self, dest_dir: Union[str, Path]) -> Optional[Path]:
        """Save CarDamage_{id}.zip into `dest_dir`."""
        if self.busy:
            return None
        self.busy = True
        try:
            content = await self.client.download_zip(self.assessment_id)
        except ApiError as e:
            self.toasts.error(f"Failed to download photos: {e.message}")
            return None
        finally:
            self.busy = False

        path = Path(dest_dir) / f"CarDamage_{self.assessment_id}.zip"
        try:
            path.write_bytes(content)
        except OSError as e:
            logger.error(f"[AssessmentDetail] Could not save {path}: {e}")
            self.toasts.error(f"Failed to save photos: {e.strerror or e}")
            return None
        self.toasts.success("Photos downloaded")
        return path
