import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from crashify.console.api_client import AdminApiClient, ApiError
from crashify.console.toast import ToastCenter

logger = logging.getLogger(__name__)


@dataclass
class EmailFilterForm:
    """Add-rule form. Domain and address are mutually exclusive."""
    type: str = "blacklist"
    email_domain: str = ""
    email_address: str = ""
    reason: str = ""

    def set_domain(self, value: str) -> None:
        self.email_domain = value
        self.email_address = ""

    def set_address(self, value: str) -> None:
        self.email_address = value
        self.email_domain = ""

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"type": self.type, "reason": self.reason.strip() or None}
        if self.email_domain.strip():
            payload["email_domain"] = self.email_domain.strip()
        elif self.email_address.strip():
            payload["email_address"] = self.email_address.strip()
        else:
            raise ValueError("Either email_domain or email_address is required")
        return payload

    def reset(self) -> None:
        self.email_domain = ""
        self.email_address = ""
        self.reason = ""


class EmailFiltersView:
    """Whitelist and blacklist sections of the settings tab."""

    def __init__(self, client: AdminApiClient, toasts: ToastCenter,
                 confirm: Optional[Callable[[str], bool]] = None):
        self.client = client
        self.toasts = toasts
        self.confirm = confirm or (lambda message: False)

        self.filters: List[Dict[str, Any]] = []
        self.form = EmailFilterForm()
        self.loading = False
        self.busy = False
        self.error: Optional[str] = None

    @property
    def whitelist(self) -> List[Dict[str, Any]]:
        return [f for f in self.filters if f["type"] == "whitelist"]

    @property
    def blacklist(self) -> List[Dict[str, Any]]:
        return [f for f in self.filters if f["type"] == "blacklist"]

    async def load(self) -> bool:
        self.loading = True
        try:
            self.filters = await self.client.list_email_filters()
        except ApiError as e:
            self.error = e.message
            return False
        finally:
            self.loading = False
        self.error = None
        return True

    async def create(self) -> bool:
        if self.busy:
            return False
        try:
            payload = self.form.to_payload()
        except ValueError as e:
            self.toasts.error(str(e))
            return False

        self.busy = True
        try:
            await self.client.create_email_filter(payload)
        except ApiError as e:
            self.toasts.error(f"Failed to add filter: {e.message}")
            return False
        finally:
            self.busy = False

        self.toasts.success(f"Added to {self.form.type}")
        self.form.reset()
        await self.load()
        return True

    async def toggle_active(self, filter_id: str) -> bool:
        current = next((f for f in self.filters if f["id"] == filter_id), None)
        if current is None or self.busy:
            return False

        self.busy = True
        try:
            updated = await self.client.update_email_filter(filter_id, {"is_active": not current["is_active"]})
        except ApiError as e:
            self.toasts.error(f"Failed to update filter: {e.message}")
            return False
        finally:
            self.busy = False

        self.filters = [updated if f["id"] == filter_id else f for f in self.filters]
        return True

    async def remove(self, filter_id: str) -> bool:
        if self.busy or not self.confirm("Remove this email filter?"):
            return False

        self.busy = True
        try:
            await self.client.delete_email_filter(filter_id)
        except ApiError as e:
            self.toasts.error(f"Failed to delete filter: {e.message}")
            return False
        finally:
            self.busy = False

        self.toasts.success("Filter removed")
        await self.load()
        return True
