from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from eduwise.core.enums import NotificationType


class NotificationCreate(BaseModel):
    user_ids: List[UUID] = Field(..., min_length=1)
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    type: NotificationType = NotificationType.announcement
    related_id: Optional[str] = Field(None, max_length=64)


class NotificationResponse(BaseModel):
    id: UUID
    user_id: UUID
    title: str
    message: str
    type: str
    related_id: Optional[str] = None
    is_read: bool
    read_at: Optional[datetime] = None
    link: str = Field(..., description="Client route to open when the notification is clicked")
    created_at: datetime

    class Config:
        from_attributes = True


class UnreadCountResponse(BaseModel):
    count: int
    poll_interval_seconds: int


class MarkAllReadResponse(BaseModel):
    updated: int


class ChannelPreferences(BaseModel):
    email: bool
    sms: bool
    in_app: bool


class ChannelPreferencesPatch(BaseModel):
    email: Optional[bool] = None
    sms: Optional[bool] = None
    in_app: Optional[bool] = None


class NotificationPreferences(BaseModel):
    email: bool
    sms: bool
    in_app: bool
    types: Dict[NotificationType, ChannelPreferences]


class NotificationPreferencesPatch(BaseModel):
    email: Optional[bool] = None
    sms: Optional[bool] = None
    in_app: Optional[bool] = None
    types: Optional[Dict[NotificationType, ChannelPreferencesPatch]] = None
