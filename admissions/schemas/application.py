"""
Pydantic schemas for application endpoints.
"""
from typing import Optional, List, Dict
from datetime import datetime
from pydantic import BaseModel, Field


class ApplicationBase(BaseModel):
    """Fields a student provides and may later edit."""
    program: Optional[str] = Field(None, description="Programme applied for", max_length=200)
    program_level: Optional[str] = Field(None, description="Programme level", pattern="^(Bachelor|Master|PhD)$")
    start_term: Optional[str] = Field(None, description="Intended start term", max_length=50)
    nationality: Optional[str] = Field(None, description="Applicant nationality", max_length=100)
    address: Optional[str] = Field(None, description="Postal address")
    notes: Optional[str] = Field(None, description="Applicant's own free-text notes")


class ApplicationCreate(ApplicationBase):
    """Schema for submitting a new application."""
    program: str = Field(..., description="Programme applied for", min_length=1, max_length=200)


class ApplicationUpdate(ApplicationBase):
    """Schema for a student's edit; only the fields sent are changed."""
    pass


class ApplicationResponse(ApplicationBase):
    """Schema for application response."""
    id: int = Field(..., description="Application ID")
    application_number: str = Field(..., description="Human-readable application number")
    user_id: int = Field(..., description="Owning student")
    status: str = Field(..., description="Current status")
    reviewed_by: Optional[int] = Field(None, description="Admin who last changed the status")
    reviewed_at: Optional[datetime] = Field(None, description="When the status was last changed by an admin")
    review_notes: Optional[str] = Field(None, description="Note left by the admin with the last status change")
    submitted_at: datetime = Field(..., description="Submission timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "id": 1,
                "application_number": "2026100001",
                "user_id": 7,
                "status": "under-review",
                "program": "Computer Science",
                "program_level": "Bachelor",
                "start_term": "Fall 2027",
                "submitted_at": "2026-10-02T09:30:00Z",
                "updated_at": "2026-10-05T14:10:00Z"
            }
        }


class StatusHistoryResponse(BaseModel):
    """Schema for one status history entry."""
    id: int
    application_id: int
    old_status: Optional[str] = Field(None, description="Previous status; null for the submission entry")
    new_status: str
    changed_by: Optional[int] = None
    change_reason: Optional[str] = None
    changed_at: datetime

    class Config:
        from_attributes = True


class ApplicationDetailResponse(BaseModel):
    """Application with its history and what can be done with it next."""
    application: ApplicationResponse
    status_history: List[StatusHistoryResponse] = Field(default_factory=list)
    editable: bool = Field(..., description="Student may still edit the application")
    deletable: bool = Field(..., description="Student may still delete the application")
    allowed_transitions: List[str] = Field(default_factory=list, description="Statuses an admin may move it to")


class ApplicationListResponse(BaseModel):
    """Schema for list of applications response."""
    applications: List[ApplicationResponse]
    total: int
    page: int = 1
    page_size: int = 20


class ApplicationStatsResponse(BaseModel):
    """Count of applications per status, plus `total`."""
    counts: Dict[str, int]


class StatusUpdateRequest(BaseModel):
    """Admin request to change one application's status."""
    status: str = Field(..., description="Target status", min_length=1)
    notes: Optional[str] = Field(None, description="Reason recorded in the status history")
    expected_status: Optional[str] = Field(
        None, description="Status the admin saw; the change is refused if it has moved on"
    )

    class Config:
        json_schema_extra = {
            "example": {"status": "under-review", "notes": "Documents complete", "expected_status": "submitted"}
        }


class BulkStatusUpdateRequest(BaseModel):
    """Admin request to change several applications to the same status."""
    application_ids: List[int] = Field(..., min_length=1, description="Applications to update")
    status: str = Field(..., description="Target status", min_length=1)
    notes: Optional[str] = Field(None, description="Reason recorded in each status history entry")
