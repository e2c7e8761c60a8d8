import logging
from typing import Any, Callable, Dict, List, Optional

from crashify.console.api_client import AdminApiClient, ApiError
from crashify.console.assessment_detail import AssessmentDetailView
from crashify.console.toast import ToastCenter

logger = logging.getLogger(__name__)


class ClaimsListView:
    """
    One page of claim summaries.

    Every page change is a fresh fetch. A failed fetch sets `error` and keeps
    the rows that were already shown.
    """

    def __init__(
        self,
        client: AdminApiClient,
        toasts: ToastCenter,
        page_size: int = 20,
        confirm: Optional[Callable[[str], bool]] = None,
    ):
        self.client = client
        self.toasts = toasts
        self.page_size = page_size
        self.confirm = confirm

        self.rows: List[Dict[str, Any]] = []
        self.page = 1
        self.total = 0
        self.total_pages = 0
        self.loading = False
        self.error: Optional[str] = None

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    async def load(self, page: Optional[int] = None) -> bool:
        if self.loading:
            return False
        target = page if page is not None else self.page

        self.loading = True
        try:
            result = await self.client.list_assessments(page=target, page_size=self.page_size)
            rows = list(result["data"])
            pagination = result["pagination"]
            page, total, total_pages = pagination["page"], pagination["total"], pagination["totalPages"]
        except ApiError as e:
            logger.error(f"[ClaimsList] Failed to load page {target}: {e.message}")
            self.error = e.message
            return False
        except (KeyError, TypeError):
            self.error = "Invalid response from server"
            return False
        finally:
            self.loading = False

        self.rows = rows
        self.page = page
        self.total = total
        self.total_pages = total_pages
        self.error = None
        return True

    async def refresh(self) -> bool:
        return await self.load(self.page)

    async def next_page(self) -> bool:
        if not self.has_next:
            return False
        return await self.load(self.page + 1)

    async def previous_page(self) -> bool:
        if not self.has_previous:
            return False
        return await self.load(self.page - 1)

    def open(self, claim_id: str) -> AssessmentDetailView:
        """Detail view for a row; a delete there reloads this page."""
        return AssessmentDetailView(
            self.client,
            self.toasts,
            claim_id,
            confirm=self.confirm,
            on_reload=self.refresh,
        )
