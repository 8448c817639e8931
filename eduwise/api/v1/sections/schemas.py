from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from eduwise.core.enums import SectionStatus


class SectionCreate(BaseModel):
    class_id: UUID = Field(..., description="Class this section belongs to")
    name: str = Field(..., min_length=1, max_length=50)
    capacity: int = Field(30, ge=1, le=100, description="Max students per section")
    room: Optional[str] = Field(None, max_length=50)
    teacher_id: Optional[UUID] = None
    status: SectionStatus = SectionStatus.active


class SectionBulkItem(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    capacity: int = Field(30, ge=1, le=100)
    room: Optional[str] = Field(None, max_length=50)


class SectionBulkCreate(BaseModel):
    class_id: UUID = Field(..., description="Class these sections belong to")
    sections: List[SectionBulkItem] = Field(..., min_length=1)


class SectionUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    capacity: Optional[int] = Field(None, ge=1, le=100)
    room: Optional[str] = Field(None, max_length=50)
    teacher_id: Optional[UUID] = None
    status: Optional[SectionStatus] = None


class SectionResponse(BaseModel):
    id: UUID
    class_id: UUID
    name: str
    capacity: int = Field(..., description="Max students per section")
    enrolled_students: int = Field(0, description="Students currently placed in this section")
    room: Optional[str] = None
    teacher_id: Optional[UUID] = None
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
