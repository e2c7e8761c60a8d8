"""
Admin API Client

Async client the console view-models use to talk to the Crashify API.
Every non-2xx response, transport failure or unreadable body surfaces as
ApiError with a human readable message.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Request failed; `message` is what the user sees."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass
class UploadItem:
    """A file picked by the user, already read into memory."""
    name: str
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)


class AdminApiClient:
    """
    Thin wrapper over httpx.AsyncClient.

    Pass `client` to reuse an existing AsyncClient (tests mount the app with
    httpx.ASGITransport). Cookies set by the API, such as the signed CSRF
    cookie, live in that client's jar.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        api_prefix: str = "/api",
        token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_prefix = api_prefix.rstrip("/")
        self.token = token
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=30.0)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()

    def _url(self, path: str) -> str:
        return f"{self.api_prefix}{path}"

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if extra:
            headers.update(extra)
        return headers

    async def _request(self, method: str, path: str, headers: Optional[Dict[str, str]] = None, **kwargs) -> httpx.Response:
        client = await self._get_client()
        try:
            response = await client.request(method, self._url(path), headers=self._headers(headers), **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"[ApiClient] {method} {path} failed: {e}")
            raise ApiError(f"Network error: {e}") from e

        if response.is_error:
            raise ApiError(self._error_message(response), response.status_code)
        return response

    async def _json(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        response = await self._request(method, path, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            raise ApiError("Invalid response from server", response.status_code) from e

    @staticmethod
    def _pluck(data: Any, *keys: str) -> Any:
        """Walk nested keys of a response body; a missing level is a bad response."""
        try:
            for key in keys:
                data = data[key]
        except (KeyError, TypeError, IndexError) as e:
            raise ApiError("Invalid response from server") from e
        return data

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get("error") or body.get("detail")
            if isinstance(message, str) and message:
                return message
        return response.reason_phrase or f"HTTP {response.status_code}"

    # ============================================================
    # AUTH / USERS
    # ============================================================

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """Sign in and keep the bearer token for later calls. Returns the user."""
        data = await self._json("POST", "/auth/login", json={"email": email, "password": password})
        user = self._pluck(data, "user")
        self.token = self._pluck(data, "access_token")
        return user

    async def logout(self) -> None:
        await self._json("POST", "/auth/logout")
        self.token = None

    async def session(self) -> Dict[str, Any]:
        data = await self._json("GET", "/auth/session")
        return self._pluck(data, "user")

    async def list_users(self, page: int = 1, limit: int = 50, role: Optional[str] = None,
                         search: Optional[str] = None) -> Dict[str, Any]:
        params: Dict[str, Any] = {"page": page, "limit": limit}
        if role:
            params["role"] = role
        if search:
            params["search"] = search
        return await self._json("GET", "/auth/users/list", params=params)

    async def create_user(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = await self._json("POST", "/auth/users/create", json=payload)
        return self._pluck(data, "user")

    async def update_user(self, user_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = await self._json("PATCH", f"/auth/users/{user_id}", json=payload)
        return self._pluck(data, "user")

    async def delete_user(self, user_id: str) -> None:
        await self._json("DELETE", f"/auth/users/{user_id}")

    # ============================================================
    # ASSESSMENTS
    # ============================================================

    async def list_assessments(self, page: int = 1, page_size: int = 20, status: Optional[str] = None,
                               assessment_type: Optional[str] = None, company: Optional[str] = None) -> Dict[str, Any]:
        params: Dict[str, Any] = {"page": page, "pageSize": page_size}
        if status:
            params["status"] = status
        if assessment_type:
            params["type"] = assessment_type
        if company:
            params["company"] = company
        return await self._json("GET", "/assessments", params=params)

    async def get_assessment(self, assessment_id: str) -> Dict[str, Any]:
        data = await self._json("GET", f"/assessments/{assessment_id}")
        return self._pluck(data, "data", "assessment")

    async def update_assessment(self, assessment_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        data = await self._json("PATCH", f"/assessments/{assessment_id}", json=updates)
        return self._pluck(data, "data")

    async def delete_assessment(self, assessment_id: str) -> None:
        await self._json("DELETE", f"/assessments/{assessment_id}")

    async def get_stats(self) -> Dict[str, Any]:
        data = await self._json("GET", "/assessments/stats")
        return self._pluck(data, "data")

    async def mark_entered(self, assessment_id: str, iq_reference: Optional[str] = None) -> Dict[str, Any]:
        return await self._json(
            "POST",
            f"/assessments/{assessment_id}/iq-helper/mark-entered",
            json={"iqReference": iq_reference or None},
        )

    async def send_emails(self, assessment_id: str, documents: Dict[str, UploadItem],
                          fields: Dict[str, str]) -> Dict[str, Any]:
        """`documents` maps form field name (repair_authority, ...) to the PDF."""
        files = [(key, (doc.name, doc.content, doc.content_type)) for key, doc in documents.items()]
        return await self._json("POST", f"/assessments/{assessment_id}/send-emails", data=fields, files=files)

    # ============================================================
    # FILES
    # ============================================================

    async def list_files(self, assessment_id: str) -> List[Dict[str, Any]]:
        data = await self._json("GET", f"/assessments/{assessment_id}/files")
        return self._pluck(data, "data")

    async def upload_files(self, assessment_id: str, items: List[UploadItem]) -> Dict[str, Any]:
        files = [("files", (item.name, item.content, item.content_type)) for item in items]
        return await self._json("POST", f"/assessments/{assessment_id}/files", files=files)

    async def download_zip(self, assessment_id: str) -> bytes:
        response = await self._request("GET", f"/assessments/{assessment_id}/files/zip")
        return response.content

    # ============================================================
    # EMAIL FILTERS (mutations carry a CSRF token)
    # ============================================================

    async def csrf_token(self) -> str:
        data = await self._json("GET", "/csrf-token")
        return self._pluck(data, "token")

    async def list_email_filters(self, filter_type: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {"type": filter_type} if filter_type else None
        data = await self._json("GET", "/admin/email-filters", params=params)
        return self._pluck(data, "data")

    async def check_email(self, email: str) -> Dict[str, Any]:
        return await self._json("GET", "/admin/email-filters/check", params={"email": email})

    async def create_email_filter(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        token = await self.csrf_token()
        data = await self._json("POST", "/admin/email-filters", json=payload, headers={"x-csrf-token": token})
        return self._pluck(data, "data")

    async def update_email_filter(self, filter_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        token = await self.csrf_token()
        data = await self._json("PATCH", f"/admin/email-filters/{filter_id}", json=payload,
                                headers={"x-csrf-token": token})
        return self._pluck(data, "data")

    async def delete_email_filter(self, filter_id: str) -> None:
        token = await self.csrf_token()
        await self._json("DELETE", f"/admin/email-filters/{filter_id}", headers={"x-csrf-token": token})

    # ============================================================
    # PUBLIC
    # ============================================================

    async def send_contact(self, payload: Dict[str, str]) -> Dict[str, Any]:
        return await self._json("POST", "/sendEmail", json=payload)
