from sqlalchemy import Column, String, Integer, Numeric, DateTime, Boolean, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from crashify.db.base import Base, JSONType


ASSESSMENT_TYPES = ("Desktop Assessment", "Onsite Assessment")
ASSESSMENT_STATUSES = ("pending", "processing", "completed", "cancelled")


class Assessment(Base):
    """Vehicle damage assessment request (a claim)."""
    __tablename__ = "assessments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Submitter
    company_name = Column(String(255), nullable=False, index=True)
    your_name = Column(String(255), nullable=False)
    your_email = Column(String(255), nullable=False)
    your_phone = Column(String(50), nullable=False)
    your_role = Column(String(100), nullable=True)
    department = Column(String(100), nullable=True)

    # Claim
    assessment_type = Column(String(50), default="Desktop Assessment", nullable=False, index=True)
    claim_reference = Column(String(100), nullable=True)
    policy_number = Column(String(100), nullable=True)
    incident_date = Column(String(20), nullable=True)
    incident_location = Column(String(255), nullable=True)

    # Vehicle
    vehicle_type = Column(String(50), nullable=True)
    year = Column(Integer, nullable=True)
    make = Column(String(100), nullable=False)
    model = Column(String(100), nullable=False)
    registration = Column(String(20), nullable=True)
    vin = Column(String(20), nullable=True)
    color = Column(String(50), nullable=True)
    odometer = Column(Integer, nullable=True)
    insurance_value_type = Column(String(50), nullable=True)
    insurance_value_amount = Column(Numeric(12, 2), nullable=True)

    # Free-form blobs, merged shallowly on edit
    owner_info = Column(JSONType, default=dict, nullable=False)
    location_info = Column(JSONType, default=dict, nullable=False)

    # Incident
    incident_description = Column(Text, nullable=True)
    damage_areas = Column(JSONType, default=list, nullable=False)
    special_instructions = Column(Text, nullable=True)
    internal_notes = Column(Text, nullable=True)

    # Consents
    authority_confirmed = Column(Boolean, default=False, nullable=False)
    privacy_consent = Column(Boolean, default=False, nullable=False)
    email_report_consent = Column(Boolean, default=False, nullable=False)
    sms_updates = Column(Boolean, default=False, nullable=False)

    status = Column(String(20), default="pending", nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now())
    completed_at = Column(DateTime(timezone=True), nullable=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)

    # Relationships
    files = relationship("UploadedFile", back_populates="assessment", cascade="all, delete-orphan")
    email_logs = relationship("EmailLog", back_populates="assessment", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Assessment {self.id} {self.status}>"
