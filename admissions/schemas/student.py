"""
Pydantic schemas for admin student management.
"""
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field


class StudentResponse(BaseModel):
    """Student account as seen by an admin."""
    id: int
    full_name: str
    email: str
    is_active: bool
    created_at: Optional[datetime] = None
    application_count: int = Field(0, description="Non-deleted applications")

    class Config:
        from_attributes = True


class StudentListResponse(BaseModel):
    students: List[StudentResponse]
    total: int
    page: int = 1
    page_size: int = 20


class StudentDetailResponse(BaseModel):
    """Student profile with an application summary."""
    student: StudentResponse
    total_applications: int
    approved_applications: int
    enrolled_applications: int
    last_application_at: Optional[datetime] = None
    programs: List[str] = Field(default_factory=list, description="Programmes applied for, most recent first")


class StudentStatusUpdateRequest(BaseModel):
    is_active: bool = Field(..., description="False deactivates the account")

    class Config:
        json_schema_extra = {"example": {"is_active": False}}
