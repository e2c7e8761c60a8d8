from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Boolean
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from crashify.db.base import Base


FILTER_TYPES = ("whitelist", "blacklist")


class EmailFilter(Base):
    """Global allow/deny rule for inbound email senders."""
    __tablename__ = "email_filters"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    type = Column(String(20), nullable=False, index=True)

    # Exactly one of these is set
    email_domain = Column(String(255), nullable=True, index=True)
    email_address = Column(String(255), nullable=True, index=True)

    reason = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    creator = relationship("User", back_populates="email_filters")
