from datetime import date, datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from eduwise.core.enums import AttendanceStatus


class AttendanceMarkItem(BaseModel):
    student_id: UUID
    status: AttendanceStatus
    notes: Optional[str] = None


class AttendanceBatchMark(BaseModel):
    """Mark attendance for many students of one class on one date. Existing marks are overwritten."""

    class_id: UUID
    date: date
    records: List[AttendanceMarkItem] = Field(..., min_length=1)

    @model_validator(mode="after")
    def validate_unique_students(self) -> "AttendanceBatchMark":
        ids = [r.student_id for r in self.records]
        if len(set(ids)) != len(ids):
            raise ValueError("Each student may appear only once per batch")
        return self


class AttendanceUpdate(BaseModel):
    status: Optional[AttendanceStatus] = None
    notes: Optional[str] = None


class AttendanceResponse(BaseModel):
    id: UUID
    student_id: UUID
    class_id: UUID
    date: date
    status: str
    notes: Optional[str] = None
    recorded_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AttendanceBatchResponse(BaseModel):
    recorded: int
    records: List[AttendanceResponse]


class AttendanceStatistics(BaseModel):
    student_id: UUID
    total: int
    counts: Dict[AttendanceStatus, int]
    attendance_rate: float = Field(..., description="Present days as a percentage of all marked days")
