import logging
import secrets
import time
from pathlib import Path
from typing import Optional

from crashify.core.config import settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when a stored object cannot be written or read."""


class StorageService:
    """Local bucket for claim photos and documents, served under PUBLIC_FILES_URL."""

    def __init__(self, root: Optional[str] = None, public_url: Optional[str] = None):
        self.root = Path(root or settings.STORAGE_DIR)
        self.public_url = (public_url or settings.PUBLIC_FILES_URL).rstrip("/")

    def build_path(self, assessment_id, file_name: str) -> str:
        """Unique object key: {assessment_id}/{millis}-{random}.{ext}"""
        ext = file_name.rsplit(".", 1)[-1].lower() if "." in file_name else "bin"
        unique = f"{int(time.time() * 1000)}-{secrets.token_hex(4)}"
        return f"{assessment_id}/{unique}.{ext}"

    def _resolve(self, storage_path: str) -> Path:
        path = (self.root / storage_path).resolve()
        if self.root.resolve() not in path.parents:
            raise StorageError(f"Path escapes storage root: {storage_path}")
        return path

    def save(self, storage_path: str, content: bytes) -> str:
        """Write an object and return its public URL."""
        path = self._resolve(storage_path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        except OSError as e:
            raise StorageError(f"Failed to store {storage_path}: {e}") from e
        logger.info(f"[Storage] Saved {storage_path} ({len(content)} bytes)")
        return self.url_for(storage_path)

    def read(self, storage_path: str) -> bytes:
        path = self._resolve(storage_path)
        try:
            return path.read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to read {storage_path}: {e}") from e

    def url_for(self, storage_path: str) -> str:
        return f"{self.public_url}/{storage_path}"


storage_service = StorageService()
