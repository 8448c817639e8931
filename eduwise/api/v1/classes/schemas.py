from datetime import datetime, time
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from eduwise.core.enums import ClassStatus, DayOfWeek


class ClassCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=255)
    course_id: UUID
    term_id: UUID
    section_label: Optional[str] = Field(None, max_length=10)
    teacher_id: Optional[UUID] = None
    room: Optional[str] = Field(None, max_length=50)
    building: Optional[str] = Field(None, max_length=100)
    capacity: int = Field(30, ge=1, le=500)
    status: ClassStatus = ClassStatus.active
    notes: Optional[str] = None


class ClassUpdate(BaseModel):
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    section_label: Optional[str] = Field(None, max_length=10)
    teacher_id: Optional[UUID] = None
    room: Optional[str] = Field(None, max_length=50)
    building: Optional[str] = Field(None, max_length=100)
    capacity: Optional[int] = Field(None, ge=1, le=500)
    status: Optional[ClassStatus] = None
    notes: Optional[str] = None


class ClassResponse(BaseModel):
    id: UUID
    code: str
    name: str
    course_id: UUID
    term_id: UUID
    section_label: Optional[str] = None
    teacher_id: Optional[UUID] = None
    room: Optional[str] = None
    building: Optional[str] = None
    capacity: int
    enrolled_count: int
    waitlist_count: int
    available_seats: int
    status: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ScheduleCreate(BaseModel):
    day_of_week: DayOfWeek
    start_time: time
    end_time: time
    room: Optional[str] = Field(None, max_length=50)
    building: Optional[str] = Field(None, max_length=100)

    @model_validator(mode="after")
    def validate_times(self) -> "ScheduleCreate":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class ScheduleUpdate(BaseModel):
    day_of_week: Optional[DayOfWeek] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    room: Optional[str] = Field(None, max_length=50)
    building: Optional[str] = Field(None, max_length=100)


class ScheduleResponse(BaseModel):
    id: UUID
    class_id: UUID
    day_of_week: str
    start_time: time
    end_time: time
    room: Optional[str] = None
    building: Optional[str] = None

    class Config:
        from_attributes = True


class EnrollRequest(BaseModel):
    student_ids: List[UUID] = Field(..., min_length=1)


class EnrollResponse(BaseModel):
    class_id: UUID
    enrolled: List[UUID]
    enrolled_count: int
    capacity: int


class RosterEntry(BaseModel):
    student_id: UUID
    first_name: str
    last_name: str
    email: Optional[str] = None
    grade_level: Optional[str] = None
    enrolled_at: datetime
