from datetime import time
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from eduwise.core.enums import DayOfWeek, ScheduleAdjustmentType

from .schemas import ClassResponse


class BatchClassCreate(BaseModel):
    term_id: UUID
    course_ids: List[UUID] = Field(..., min_length=1)
    sections_per_course: int = Field(1, ge=1, le=26)
    capacity: int = Field(30, ge=1, le=500)
    room_prefix: Optional[str] = Field(None, max_length=40)
    building_prefix: Optional[str] = Field(None, max_length=100)

    @model_validator(mode="after")
    def validate_unique_courses(self) -> "BatchClassCreate":
        if len(set(self.course_ids)) != len(self.course_ids):
            raise ValueError("course_ids must not contain duplicates")
        return self


class BatchClassCreateResponse(BaseModel):
    created: int
    classes: List[ClassResponse]


class ScheduleAdjustment(BaseModel):
    term_id: UUID
    class_ids: List[UUID] = Field(..., min_length=1)
    adjustment_type: ScheduleAdjustmentType
    new_room: Optional[str] = Field(None, max_length=50)
    new_building: Optional[str] = Field(None, max_length=100)
    day_of_week: Optional[DayOfWeek] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None

    @model_validator(mode="after")
    def validate_adjustment(self) -> "ScheduleAdjustment":
        if self.adjustment_type == ScheduleAdjustmentType.room:
            if not self.new_room and not self.new_building:
                raise ValueError("Room adjustment requires new_room or new_building")
        else:
            if self.day_of_week is None or self.start_time is None or self.end_time is None:
                raise ValueError("Time adjustment requires day_of_week, start_time and end_time")
            if self.end_time <= self.start_time:
                raise ValueError("end_time must be after start_time")
        return self


class ScheduleAdjustmentResponse(BaseModel):
    updated: int
    classes: List[ClassResponse]


class TermTransitionRequest(BaseModel):
    term_id: UUID = Field(..., description="Source term")
    target_term_id: UUID
    class_ids: Optional[List[UUID]] = Field(None, description="Subset of source classes; all when omitted")
    keep_teachers: bool = True
    keep_rooms: bool = True
    keep_schedules: bool = True
    adjust_capacity: bool = False
    capacity_adjustment: int = Field(0, ge=-500, le=500)


class TransitionSummary(BaseModel):
    teacher_assignments: str
    room_assignments: str
    class_schedules: str
    capacity: str
    students_carried_over: bool = False


class TermTransitionResponse(BaseModel):
    created: int
    summary: TransitionSummary
    classes: List[ClassResponse]
