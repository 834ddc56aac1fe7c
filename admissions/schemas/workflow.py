"""
Pydantic result models returned by the workflow service.
"""
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field

from admissions.core.errors import WorkflowError


class WorkflowResult(BaseModel):
    """Outcome of a single workflow operation."""
    success: bool = Field(..., description="Whether the operation was applied")
    message: str = Field(..., description="Human-readable outcome")
    error: Optional[str] = Field(None, description="Error kind when success is false")
    data: Optional[Dict[str, Any]] = Field(None, description="Operation payload or error details")

    @classmethod
    def ok(cls, message: str, **data: Any) -> "WorkflowResult":
        return cls(success=True, message=message, data=data or None)

    @classmethod
    def failure(cls, error: WorkflowError) -> "WorkflowResult":
        return cls(success=False, message=error.message, error=error.kind, data=error.payload or None)

    class Config:
        json_schema_extra = {
            "example": {
                "success": False,
                "message": "Cannot change application status from 'rejected' to 'approved'",
                "error": "invalid_transition",
                "data": {"current_status": "rejected", "requested_status": "approved"}
            }
        }


class BulkStatusResult(BaseModel):
    """Aggregate outcome of a bulk status change."""
    successful: int = Field(..., description="Number of applications updated")
    failed: int = Field(..., description="Number of applications not updated")
    results: Dict[int, WorkflowResult] = Field(default_factory=dict, description="Outcome per application id")

    @property
    def message(self) -> str:
        return f"Updated {self.successful} of {self.successful + self.failed} applications"
