"""
Admin Dashboard Shell

Role-gated tab router. Tab data is fetched when a tab is first activated,
not up front.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from crashify.console.api_client import AdminApiClient, ApiError
from crashify.console.claims_list import ClaimsListView
from crashify.console.email_filters import EmailFiltersView
from crashify.console.toast import ToastCenter

logger = logging.getLogger(__name__)

MENU = (
    ("overview", "Overview", ("admin", "manager", "reviewer")),
    ("claims", "Claims", ("admin", "manager", "reviewer")),
    ("users", "Users", ("admin", "manager")),
    ("settings", "Settings", ("admin",)),
)


class DashboardShell:

    def __init__(
        self,
        client: AdminApiClient,
        toasts: ToastCenter,
        user: Dict[str, Any],
        confirm: Optional[Callable[[str], bool]] = None,
    ):
        self.client = client
        self.toasts = toasts
        self.user = user
        self.confirm = confirm or (lambda message: False)

        self.active_tab: Optional[str] = None
        self.stats: Optional[Dict[str, Any]] = None
        self.claims: Optional[ClaimsListView] = None
        self.email_filters: Optional[EmailFiltersView] = None
        self.users: List[Dict[str, Any]] = []
        self.users_loaded = False
        self.error: Optional[str] = None

    @property
    def role(self) -> str:
        return self.user.get("role", "")

    def menu(self) -> List[str]:
        return [tab for tab, _label, roles in MENU if self.role in roles]

    async def activate(self, tab: str) -> bool:
        """Switch tabs, loading the tab's data on first visit."""
        if tab not in self.menu():
            logger.warning(f"[Dashboard] {self.user.get('email')} ({self.role}) cannot open {tab}")
            return False
        self.active_tab = tab

        if tab == "overview" and self.stats is None:
            await self.load_stats()
        elif tab == "claims" and self.claims is None:
            self.claims = ClaimsListView(self.client, self.toasts, confirm=self.confirm)
            await self.claims.load(1)
        elif tab == "users" and not self.users_loaded:
            await self.load_users()
        elif tab == "settings" and self.email_filters is None:
            self.email_filters = EmailFiltersView(self.client, self.toasts, confirm=self.confirm)
            await self.email_filters.load()
        return True

    async def load_stats(self) -> None:
        try:
            self.stats = await self.client.get_stats()
        except ApiError as e:
            self.error = e.message
            self.toasts.error(f"Failed to load statistics: {e.message}")

    async def load_users(self) -> None:
        try:
            result = await self.client.list_users()
        except ApiError as e:
            self.toasts.error(f"Failed to load users: {e.message}")
            return
        self.users = result["users"]
        self.users_loaded = True

    async def delete_user(self, user_id: str) -> bool:
        """Optimistic removal; a failure restores the list and reloads it."""
        if not self.confirm("Are you sure you want to delete this user?"):
            return False

        previous = list(self.users)
        self.users = [u for u in self.users if u["id"] != user_id]
        try:
            await self.client.delete_user(user_id)
        except ApiError as e:
            self.users = previous
            self.toasts.error(f"Failed to delete user: {e.message}")
            await self.load_users()
            return False

        self.toasts.success("User deleted successfully")
        return True

    async def logout(self) -> None:
        try:
            await self.client.logout()
        except ApiError as e:
            logger.warning(f"[Dashboard] Logout failed: {e.message}")
        self.user = {}
        self.active_tab = None
