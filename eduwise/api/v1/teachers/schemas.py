from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from eduwise.core.enums import TeacherStatus


class Qualifications(BaseModel):
    education: List[str] = Field(default_factory=list)
    certifications: List[str] = Field(default_factory=list)
    specializations: List[str] = Field(default_factory=list)


class TeacherCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=30)
    department: Optional[str] = Field(None, max_length=100)
    position: Optional[str] = Field(None, max_length=100)
    status: TeacherStatus = TeacherStatus.ACTIVE
    hire_date: Optional[date] = None
    teaching_hours: int = Field(0, ge=0, le=80)
    qualifications: Qualifications = Field(default_factory=Qualifications)
    user_id: Optional[UUID] = Field(None, description="Login account of the teacher")


class TeacherUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=30)
    department: Optional[str] = Field(None, max_length=100)
    position: Optional[str] = Field(None, max_length=100)
    status: Optional[TeacherStatus] = None
    hire_date: Optional[date] = None
    teaching_hours: Optional[int] = Field(None, ge=0, le=80)
    qualifications: Optional[Qualifications] = None
    user_id: Optional[UUID] = None


class TeacherResponse(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    full_name: str
    email: str
    phone: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    status: str
    hire_date: Optional[date] = None
    teaching_hours: int
    qualifications: Qualifications
    user_id: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
