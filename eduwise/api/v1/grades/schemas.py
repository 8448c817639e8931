from datetime import date, datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from eduwise.core.enums import AssignmentType, GradeStatus


class AssignmentCreate(BaseModel):
    class_id: UUID
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    type: AssignmentType = AssignmentType.assignment
    max_score: float = Field(100, gt=0)
    weight: float = Field(1, ge=0)
    due_date: Optional[date] = None


class AssignmentUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    type: Optional[AssignmentType] = None
    max_score: Optional[float] = Field(None, gt=0)
    weight: Optional[float] = Field(None, ge=0)
    due_date: Optional[date] = None


class AssignmentResponse(BaseModel):
    id: UUID
    class_id: UUID
    title: str
    description: Optional[str] = None
    type: str
    max_score: float
    weight: float
    due_date: Optional[date] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class GradeEntry(BaseModel):
    student_id: UUID
    score: Optional[float] = Field(None, ge=0)
    status: GradeStatus = GradeStatus.submitted
    comments: Optional[str] = None


class GradeBatchRecord(BaseModel):
    """Scores for many students on one assignment. Existing grades are overwritten."""

    assignment_id: UUID
    records: List[GradeEntry] = Field(..., min_length=1)

    @model_validator(mode="after")
    def validate_unique_students(self) -> "GradeBatchRecord":
        ids = [r.student_id for r in self.records]
        if len(set(ids)) != len(ids):
            raise ValueError("Each student may appear only once per batch")
        return self


class GradeUpdate(BaseModel):
    score: Optional[float] = Field(None, ge=0)
    status: Optional[GradeStatus] = None
    comments: Optional[str] = None


class GradeResponse(BaseModel):
    id: UUID
    student_id: UUID
    assignment_id: UUID
    score: Optional[float] = None
    max_score: float
    percentage: Optional[float] = None
    status: str
    letter_grade: Optional[str] = None
    band: Optional[str] = Field(None, description="success | primary | warning | error")
    comments: Optional[str] = None
    graded_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime


class GradeBatchResponse(BaseModel):
    recorded: int
    records: List[GradeResponse]


class CategoryBreakdown(BaseModel):
    count: int
    average: Optional[float] = None


class GradeStatistics(BaseModel):
    student_id: UUID
    class_id: UUID
    total_items: int
    completed_items: int
    average_score: Optional[float] = Field(None, description="Mean percentage of scored items")
    weighted_average: Optional[float] = None
    letter_grade: Optional[str] = None
    category_breakdown: Dict[AssignmentType, CategoryBreakdown]
