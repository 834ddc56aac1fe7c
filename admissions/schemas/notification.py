"""
Pydantic schemas for notification endpoints.
"""
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field


class NotificationResponse(BaseModel):
    """Schema for one notification."""
    id: int
    title: str
    message: str
    type: str = Field(..., description="Severity: info, success or warning")
    is_read: bool
    related_application_id: Optional[int] = None
    created_at: datetime
    read_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    unread_count: int


class BulkNotificationRequest(BaseModel):
    """Admin request to notify several users at once."""
    user_ids: List[int] = Field(..., min_length=1, description="Recipients")
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    type: str = Field("info", pattern="^(info|success|warning)$")

    class Config:
        json_schema_extra = {
            "example": {
                "user_ids": [7, 8, 9],
                "title": "Document deadline",
                "message": "Please upload your transcripts before Friday.",
                "type": "warning"
            }
        }
