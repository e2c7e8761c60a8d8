from sqlalchemy import Column, String, Boolean, ForeignKey, DateTime
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid

from crashify.db.base import Base, JSONType


class AuditLog(Base):
    """Record of a security- or workflow-relevant action."""

    __tablename__ = "audit_logs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    # What happened
    action = Column(String(100), nullable=False, index=True)  # 'assessment_created', 'emails_sent', ...
    resource_type = Column(String(50), nullable=True)
    resource_id = Column(String(64), nullable=True, index=True)
    details = Column(JSONType, nullable=True)
    success = Column(Boolean, default=True, nullable=False)

    # Request context
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(512), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    # Relationships
    user = relationship("User", back_populates="audit_logs")

    def __repr__(self):
        return f"<AuditLog {self.action} resource={self.resource_id}>"
