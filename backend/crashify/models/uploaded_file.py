from sqlalchemy import Column, String, BigInteger, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from crashify.db.base import Base, JSONType


PROCESSING_STATUSES = ("uploaded", "processing", "processed", "failed")


class UploadedFile(Base):
    """Photo or document attached to an assessment."""
    __tablename__ = "uploaded_files"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    assessment_id = Column(UUID(as_uuid=True), ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False, index=True)

    file_name = Column(String(255), nullable=False)
    file_url = Column(String(1024), nullable=False)
    file_type = Column(String(100), nullable=False)  # MIME type
    file_size = Column(BigInteger, nullable=False)
    storage_path = Column(String(1024), nullable=False)
    processing_status = Column(String(20), default="uploaded", nullable=False)
    extra_data = Column(JSONType, nullable=True)

    uploaded_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    # Relationships
    assessment = relationship("Assessment", back_populates="files")

    @property
    def is_image(self) -> bool:
        return (self.file_type or "").startswith("image/")
