from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from eduwise.core.enums import Gender, RegistrationStatus


class RegistrationCreate(BaseModel):
    """Public intake form."""

    applicant_name: str = Field(..., min_length=1, max_length=255)
    dob: date
    gender: Optional[Gender] = None
    phone: str = Field(..., min_length=5, max_length=30)
    email: Optional[EmailStr] = None
    desired_class: str = Field(..., min_length=1, max_length=100, examples=["Grade 9"])
    desired_section_id: Optional[UUID] = None
    subjects_selected: List[str] = Field(default_factory=list)
    report_card_url: Optional[str] = Field(None, max_length=500)
    application_letter_url: Optional[str] = Field(None, max_length=500)

    @field_validator("applicant_name", "desired_class")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()

    @field_validator("dob")
    @classmethod
    def dob_not_in_future(cls, value: date) -> date:
        if value > date.today():
            raise ValueError("dob cannot be in the future")
        return value


class RegistrationStatusUpdate(BaseModel):
    status: RegistrationStatus
    admin_note: Optional[str] = None


class RegistrationResponse(BaseModel):
    id: UUID
    applicant_name: str
    dob: date
    gender: Optional[str] = None
    phone: str
    email: Optional[str] = None
    desired_class: str
    desired_section_id: Optional[UUID] = None
    subjects_selected: List[str]
    report_card_url: Optional[str] = None
    application_letter_url: Optional[str] = None
    status: str
    admin_note: Optional[str] = None
    student_id: Optional[UUID] = None
    welcome_email_sent: bool
    reviewed_by: Optional[UUID] = None
    reviewed_at: Optional[datetime] = None
    submitted_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AuditEntryResponse(BaseModel):
    action: str
    from_status: Optional[str] = None
    to_status: Optional[str] = None
    performed_by: Optional[UUID] = None
    performed_by_role: Optional[str] = None
    remarks: Optional[str] = None
    timestamp: datetime

    class Config:
        from_attributes = True
