"""
IQ Helper

Side-by-side field list used while keying a claim into IQ Controls by hand.
Each value can be copied to the clipboard; the copied marker clears after
two seconds.
"""

import logging
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Union

from crashify.console.api_client import AdminApiClient, ApiError
from crashify.console.assessment_detail import ReloadCallback, run_callback
from crashify.console.formatting import format_currency, format_date, format_odometer, status_label
from crashify.console.toast import ToastCenter

logger = logging.getLogger(__name__)

COPIED_INDICATOR_SECONDS = 2.0


class MirroredField(NamedTuple):
    key: str
    label: str
    display: str
    copy_value: str


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)


class IQHelper:

    def __init__(
        self,
        client: AdminApiClient,
        toasts: ToastCenter,
        assessment_id: str,
        clipboard: Callable[[str], None],
        confirm: Optional[Callable[[str], bool]] = None,
        on_close: Optional[ReloadCallback] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.toasts = toasts
        self.assessment_id = str(assessment_id)
        self.clipboard = clipboard
        self.confirm = confirm or (lambda message: False)
        self.on_close = on_close
        self._clock = clock

        self.assessment: Optional[Dict[str, Any]] = None
        self.files: List[Dict[str, Any]] = []
        self.error: Optional[str] = None
        self.busy = False
        self.closed = False
        self._copied: Dict[str, float] = {}

    async def load(self) -> bool:
        try:
            self.assessment = await self.client.get_assessment(self.assessment_id)
            self.files = await self.client.list_files(self.assessment_id)
        except ApiError as e:
            self.error = e.message
            return False
        self.error = None
        return True

    def fields(self) -> List[MirroredField]:
        """Every mirrored field in IQ Controls entry order."""
        a = self.assessment or {}
        owner = a.get("owner_info") or {}
        location = a.get("location_info") or {}

        rows = [
            ("claim_reference", "Claim Number", _text(a.get("claim_reference"))),
            ("policy_number", "Policy Number", _text(a.get("policy_number"))),
            ("incident_date", "Date of Loss", format_date(a.get("incident_date"))),
            ("incident_location", "Incident Location", _text(a.get("incident_location"))),
            ("assessment_type", "Assessment Type", _text(a.get("assessment_type"))),
            ("status", "Status", status_label(a.get("status"))),
            ("created_at", "Submitted", format_date(a.get("created_at"))),
            ("company_name", "Insurer / Company", _text(a.get("company_name"))),
            ("your_name", "Contact Name", _text(a.get("your_name"))),
            ("your_email", "Contact Email", _text(a.get("your_email"))),
            ("your_phone", "Contact Phone", _text(a.get("your_phone"))),
            ("owner_name", "Owner Name",
             f"{owner.get('firstName') or ''} {owner.get('lastName') or ''}".strip()),
            ("owner_email", "Owner Email", _text(owner.get("email"))),
            ("owner_phone", "Owner Phone", _text(owner.get("mobile") or owner.get("phone"))),
            ("owner_address", "Owner Address", _text(owner.get("address"))),
            ("year", "Year", _text(a.get("year"))),
            ("make", "Make", _text(a.get("make"))),
            ("model", "Model", _text(a.get("model"))),
            ("registration", "Registration", _text(a.get("registration"))),
            ("vin", "VIN", _text(a.get("vin"))),
            ("color", "Colour", _text(a.get("color"))),
            ("odometer", "Odometer", format_odometer(a.get("odometer"))),
            ("vehicle_type", "Vehicle Type", _text(a.get("vehicle_type"))),
            ("insurance_value_type", "Value Type", _text(a.get("insurance_value_type"))),
            ("insurance_value_amount", "Sum Insured", format_currency(a.get("insurance_value_amount"))),
            ("location_address", "Inspection Address", _text(location.get("address"))),
            ("incident_description", "Incident Description", _text(a.get("incident_description"))),
            ("damage_areas", "Damage Areas", _text(a.get("damage_areas"))),
            ("special_instructions", "Special Instructions", _text(a.get("special_instructions"))),
        ]
        return [MirroredField(key, label, value, value) for key, label, value in rows]

    def copy(self, key: str) -> bool:
        field = next((f for f in self.fields() if f.key == key), None)
        if field is None or not field.copy_value:
            return False
        self.clipboard(field.copy_value)
        self._copied[key] = self._clock()
        return True

    def is_copied(self, key: str) -> bool:
        copied_at = self._copied.get(key)
        if copied_at is None:
            return False
        if self._clock() - copied_at >= COPIED_INDICATOR_SECONDS:
            del self._copied[key]
            return False
        return True

    async def download_photos_zip(self, dest_dir: Union[str, Path]) -> Optional[Path]:
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
            logger.error(f"[IQHelper] Could not save {path}: {e}")
            self.toasts.error(f"Failed to save photos: {e.strerror or e}")
            return None
        self.toasts.success("Photos downloaded")
        return path

    async def mark_as_entered(self, iq_reference: Optional[str] = None) -> bool:
        if self.busy:
            return False
        if not self.confirm("Mark this assessment as entered in IQ Controls?"):
            return False

        self.busy = True
        try:
            result = await self.client.mark_entered(self.assessment_id, (iq_reference or "").strip() or None)
        except ApiError as e:
            logger.error(f"[IQHelper] Mark entered failed for {self.assessment_id}: {e.message}")
            self.toasts.error(f"Failed to mark as entered: {e.message}")
            return False
        finally:
            self.busy = False

        self.assessment = result.get("data", self.assessment)
        self.toasts.success(result.get("message") or "Assessment marked as entered in IQ Controls")
        self.closed = True
        await run_callback(self.on_close)
        return True
