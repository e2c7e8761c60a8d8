import io
import logging
import zipfile
from typing import Iterable, Tuple

from crashify.core.storage_service import StorageError, StorageService, storage_service
from crashify.models.uploaded_file import UploadedFile

logger = logging.getLogger(__name__)


def archive_name(assessment_id) -> str:
    return f"CarDamage_{assessment_id}.zip"


class PhotoArchiveService:
    """Bundles an assessment's photos into a zip named IMG_001.ext, IMG_002.ext, ..."""

    def __init__(self, storage: StorageService = storage_service):
        self.storage = storage

    def build(self, files: Iterable[UploadedFile]) -> Tuple[bytes, int]:
        """
        Build the archive in memory.

        Files that cannot be read are skipped. Numbering follows the input
        order, so a skipped file leaves a gap.

        Returns:
            (zip bytes, number of photos added)
        """
        buffer = io.BytesIO()
        added = 0
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
            for index, file in enumerate(files, start=1):
                try:
                    content = self.storage.read(file.storage_path)
                except StorageError as e:
                    logger.error(f"[ZipDownload] Skipping {file.file_name}: {e}")
                    continue
                ext = file.file_name.rsplit(".", 1)[-1] if "." in file.file_name else "jpg"
                zf.writestr(f"IMG_{index:03d}.{ext}", content)
                added += 1
        return buffer.getvalue(), added


photo_archive_service = PhotoArchiveService()
