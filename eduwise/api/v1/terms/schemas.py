from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from eduwise.core.enums import TermType


class TermCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    code: str = Field(..., min_length=1, max_length=20)
    type: TermType = TermType.semester
    academic_year: str = Field(..., min_length=4, max_length=20, examples=["2024-2025"])
    start_date: date
    end_date: date
    registration_start: Optional[date] = None
    registration_end: Optional[date] = None
    is_active: bool = True
    is_current: bool = False
    notes: Optional[str] = None


class TermUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    code: Optional[str] = Field(None, min_length=1, max_length=20)
    type: Optional[TermType] = None
    academic_year: Optional[str] = Field(None, min_length=4, max_length=20)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    registration_start: Optional[date] = None
    registration_end: Optional[date] = None
    is_active: Optional[bool] = None
    is_current: Optional[bool] = None
    notes: Optional[str] = None


class TermResponse(BaseModel):
    id: UUID
    name: str
    code: str
    type: str
    academic_year: str
    start_date: date
    end_date: date
    registration_start: Optional[date] = None
    registration_end: Optional[date] = None
    is_active: bool
    is_current: bool
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
