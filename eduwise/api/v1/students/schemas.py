from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from eduwise.core.enums import Gender, StudentStatus


class StudentCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = None
    dob: Optional[date] = None
    gender: Optional[Gender] = None
    grade_level: Optional[str] = Field(None, max_length=50)
    status: StudentStatus = StudentStatus.ACTIVE
    enrollment_date: Optional[date] = None
    guardian_name: Optional[str] = Field(None, max_length=255)
    guardian_phone: Optional[str] = Field(None, max_length=30)
    guardian_email: Optional[EmailStr] = None
    section_id: Optional[UUID] = None
    user_id: Optional[UUID] = Field(None, description="Login account of the student")
    guardian_user_id: Optional[UUID] = Field(None, description="Login account of the parent/guardian")


class StudentUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = None
    dob: Optional[date] = None
    gender: Optional[Gender] = None
    grade_level: Optional[str] = Field(None, max_length=50)
    status: Optional[StudentStatus] = None
    guardian_name: Optional[str] = Field(None, max_length=255)
    guardian_phone: Optional[str] = Field(None, max_length=30)
    guardian_email: Optional[EmailStr] = None
    section_id: Optional[UUID] = None
    user_id: Optional[UUID] = None
    guardian_user_id: Optional[UUID] = None


class StudentResponse(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    full_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    dob: Optional[date] = None
    gender: Optional[str] = None
    grade_level: Optional[str] = None
    status: str
    enrollment_date: date
    guardian_name: Optional[str] = None
    guardian_phone: Optional[str] = None
    guardian_email: Optional[str] = None
    section_id: Optional[UUID] = None
    user_id: Optional[UUID] = None
    guardian_user_id: Optional[UUID] = None
    registration_id: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
