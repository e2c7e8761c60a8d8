from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, List, Literal, Optional, Union
from datetime import datetime
from decimal import Decimal, InvalidOperation
from uuid import UUID


AssessmentType = Literal["Desktop Assessment", "Onsite Assessment"]
AssessmentStatus = Literal["pending", "processing", "completed", "cancelled"]


def parse_amount(value: Union[str, float, int, Decimal, None]) -> Optional[float]:
    """Parse "$12,500.00" style amounts; blank means no amount."""
    if value is None:
        return None
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    cleaned = value.replace("$", "").replace(",", "").strip()
    if not cleaned:
        return None
    try:
        return float(Decimal(cleaned))
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {value}")


class AssessmentCreate(BaseModel):
    """Public submission form."""
    # Section 1 - submitter
    company_name: str = Field(..., min_length=1, max_length=255)
    your_name: str = Field(..., min_length=1, max_length=255)
    your_email: str = Field(..., min_length=3, max_length=255)
    your_phone: str = Field(..., min_length=6, max_length=50)
    your_role: Optional[str] = None
    department: Optional[str] = None

    # Section 2 - claim
    assessment_type: Optional[str] = "Desktop Assessment"
    claim_reference: Optional[str] = None
    policy_number: Optional[str] = None
    incident_date: Optional[str] = None
    incident_location: Optional[str] = None

    # Section 3 - vehicle
    vehicle_type: Optional[str] = None
    year: Optional[int] = Field(None, ge=1900, le=2100)
    make: str = Field(..., min_length=1, max_length=100)
    model: str = Field(..., min_length=1, max_length=100)
    registration: Optional[str] = None
    vin: Optional[str] = None
    color: Optional[str] = None
    odometer: Optional[int] = Field(None, ge=0)
    insurance_value_type: Optional[str] = None
    insurance_value_amount: Optional[Union[str, float]] = None

    # Sections 4-5
    owner_info: Optional[Dict[str, Any]] = None
    location_info: Optional[Dict[str, Any]] = None

    # Section 7
    incident_description: Optional[str] = None
    damage_areas: List[str] = Field(default_factory=list)
    special_instructions: Optional[str] = None
    internal_notes: Optional[str] = None

    # Section 8
    authority_confirmed: bool = False
    privacy_consent: bool = False
    email_report_consent: bool = False
    sms_updates: bool = False

    @field_validator("insurance_value_amount")
    @classmethod
    def _amount(cls, v):
        return parse_amount(v)


class AssessmentUpdate(BaseModel):
    """Partial update; only the keys sent are applied."""
    company_name: Optional[str] = None
    your_name: Optional[str] = None
    your_email: Optional[str] = None
    your_phone: Optional[str] = None
    your_role: Optional[str] = None
    department: Optional[str] = None
    assessment_type: Optional[AssessmentType] = None
    claim_reference: Optional[str] = None
    policy_number: Optional[str] = None
    incident_date: Optional[str] = None
    incident_location: Optional[str] = None
    vehicle_type: Optional[str] = None
    year: Optional[int] = None
    make: Optional[str] = None
    model: Optional[str] = None
    registration: Optional[str] = None
    vin: Optional[str] = None
    color: Optional[str] = None
    odometer: Optional[int] = None
    insurance_value_type: Optional[str] = None
    insurance_value_amount: Optional[Union[str, float]] = None
    owner_info: Optional[Dict[str, Any]] = None
    location_info: Optional[Dict[str, Any]] = None
    incident_description: Optional[str] = None
    damage_areas: Optional[List[str]] = None
    special_instructions: Optional[str] = None
    internal_notes: Optional[str] = None
    authority_confirmed: Optional[bool] = None
    privacy_consent: Optional[bool] = None
    email_report_consent: Optional[bool] = None
    sms_updates: Optional[bool] = None
    status: Optional[AssessmentStatus] = None

    class Config:
        extra = "ignore"

    @field_validator("insurance_value_amount")
    @classmethod
    def _amount(cls, v):
        return parse_amount(v)


class AssessmentResponse(BaseModel):
    id: UUID
    company_name: str
    your_name: str
    your_email: str
    your_phone: str
    your_role: Optional[str] = None
    department: Optional[str] = None
    assessment_type: str
    claim_reference: Optional[str] = None
    policy_number: Optional[str] = None
    incident_date: Optional[str] = None
    incident_location: Optional[str] = None
    vehicle_type: Optional[str] = None
    year: Optional[int] = None
    make: str
    model: str
    registration: Optional[str] = None
    vin: Optional[str] = None
    color: Optional[str] = None
    odometer: Optional[int] = None
    insurance_value_type: Optional[str] = None
    insurance_value_amount: Optional[float] = None
    owner_info: Dict[str, Any] = Field(default_factory=dict)
    location_info: Dict[str, Any] = Field(default_factory=dict)
    incident_description: Optional[str] = None
    damage_areas: List[str] = Field(default_factory=list)
    special_instructions: Optional[str] = None
    internal_notes: Optional[str] = None
    authority_confirmed: bool
    privacy_consent: bool
    email_report_consent: bool
    sms_updates: bool
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AssessmentSummary(BaseModel):
    """Row shown in the claims list."""
    id: UUID
    company_name: str
    your_name: str
    your_email: str
    assessment_type: str
    make: str
    model: str
    registration: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class Pagination(BaseModel):
    page: int
    pageSize: int
    total: int
    totalPages: int


class AssessmentListResponse(BaseModel):
    data: List[AssessmentSummary]
    pagination: Pagination


class UploadedFileResponse(BaseModel):
    id: UUID
    assessment_id: UUID
    file_name: str
    file_url: str
    file_type: str
    file_size: int
    storage_path: str
    processing_status: str
    uploaded_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AssessmentDetail(BaseModel):
    assessment: AssessmentResponse
    files: List[UploadedFileResponse] = Field(default_factory=list)


class AssessmentDetailResponse(BaseModel):
    data: AssessmentDetail


class AssessmentStats(BaseModel):
    total: int
    pending: int
    processing: int
    completed: int
    desktop: int
    onsite: int
    recentSubmissions: int


class MarkEnteredRequest(BaseModel):
    iqReference: Optional[str] = Field(None, max_length=100)
