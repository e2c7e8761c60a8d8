from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from crashify.db.base import Base, JSONType


class EmailLog(Base):
    """Outgoing report email sent for an assessment."""
    __tablename__ = "email_logs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    assessment_id = Column(UUID(as_uuid=True), ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False, index=True)

    recipient_type = Column(String(20), nullable=False)  # 'repairer' or 'insurer'
    recipient_email = Column(String(255), nullable=False)
    recipient_name = Column(String(255), nullable=True)
    subject = Column(String(500), nullable=False)
    body_html = Column(Text, nullable=True)
    attachments = Column(JSONType, nullable=True)  # [{"filename": ...}]
    status = Column(String(20), default="sent", nullable=False)
    message_id = Column(String(255), nullable=True)

    sent_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    assessment = relationship("Assessment", back_populates="email_logs")
