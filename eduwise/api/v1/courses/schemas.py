from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator


class CourseCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    department: str = Field(..., min_length=1, max_length=100)
    credits: float = Field(1, ge=0, le=12)
    min_grade_level: Optional[int] = Field(None, ge=0, le=12)
    max_grade_level: Optional[int] = Field(None, ge=0, le=12)
    prerequisites: List[str] = Field(default_factory=list, description="Course codes")
    is_active: bool = True

    @model_validator(mode="after")
    def validate_grade_levels(self) -> "CourseCreate":
        if (
            self.min_grade_level is not None
            and self.max_grade_level is not None
            and self.min_grade_level > self.max_grade_level
        ):
            raise ValueError("min_grade_level cannot exceed max_grade_level")
        return self


class CourseUpdate(BaseModel):
    code: Optional[str] = Field(None, min_length=1, max_length=20)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    department: Optional[str] = Field(None, min_length=1, max_length=100)
    credits: Optional[float] = Field(None, ge=0, le=12)
    min_grade_level: Optional[int] = Field(None, ge=0, le=12)
    max_grade_level: Optional[int] = Field(None, ge=0, le=12)
    prerequisites: Optional[List[str]] = None
    is_active: Optional[bool] = None


class CourseResponse(BaseModel):
    id: UUID
    code: str
    name: str
    description: Optional[str] = None
    department: str
    credits: float
    min_grade_level: Optional[int] = None
    max_grade_level: Optional[int] = None
    prerequisites: List[str]
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
