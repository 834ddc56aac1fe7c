"""
Admin review endpoints.

Review applications, change their status (single or bulk), notify students
and manage student accounts.
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from admissions.db.session import get_db
from admissions.db.models.user import User
from admissions.core.auth_dependency import require_admin
from admissions.core.workflow_rules import is_valid_status
from admissions.schemas.application import (
    ApplicationResponse,
    ApplicationDetailResponse,
    ApplicationListResponse,
    ApplicationStatsResponse,
    StatusUpdateRequest,
    BulkStatusUpdateRequest,
)
from admissions.schemas.notification import BulkNotificationRequest
from admissions.schemas.student import (
    StudentResponse,
    StudentListResponse,
    StudentDetailResponse,
    StudentStatusUpdateRequest,
)
from admissions.schemas.workflow import BulkStatusResult, WorkflowResult
from admissions.services.application_store import ApplicationStore
from admissions.services.notification_service import NotificationService
from admissions.services.student_service import StudentService
from admissions.services.workflow_service import WorkflowService
from admissions.api.routes.applications import build_detail, raise_for_result

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/applications", response_model=ApplicationListResponse)
def list_applications(
    status_filter: Optional[str] = Query(None, alias="status", description="Filter by status"),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """List applications for review, newest first. Deleted applications are hidden."""
    if status_filter and not is_valid_status(status_filter):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown status: {status_filter}")

    applications, total = ApplicationStore(db).list_all(
        status=status_filter,
        limit=page_size,
        offset=(page - 1) * page_size,
    )
    return ApplicationListResponse(
        applications=[ApplicationResponse.model_validate(app) for app in applications],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/applications/stats", response_model=ApplicationStatsResponse)
def application_stats(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return ApplicationStatsResponse(counts=ApplicationStore(db).status_counts())


@router.get("/applications/{application_id}", response_model=ApplicationDetailResponse)
def get_application(
    application_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    application = ApplicationStore(db).load(application_id)
    if application is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Application not found")
    return build_detail(db, application, include_admin_view=True)


@router.put("/applications/bulk-status")
def bulk_update_status(
    payload: BulkStatusUpdateRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Move several applications to the same status; each one succeeds or fails on its own."""
    bulk: BulkStatusResult = WorkflowService(db).bulk_apply_status_change(
        payload.application_ids,
        payload.status,
        admin.id,
        payload.notes,
        actor_role=admin.role,
    )
    return {
        "success": bulk.failed == 0,
        "message": bulk.message,
        "data": bulk.model_dump(mode="json"),
    }


@router.put("/applications/{application_id}/status", response_model=WorkflowResult)
def update_status(
    application_id: int,
    payload: StatusUpdateRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    result = WorkflowService(db).apply_status_change(
        application_id,
        payload.status,
        admin.id,
        payload.notes,
        actor_role=admin.role,
        expected_status=payload.expected_status,
    )
    return raise_for_result(result)


@router.post("/notifications/bulk", status_code=status.HTTP_201_CREATED)
def send_bulk_notification(
    payload: BulkNotificationRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    known_ids = {
        user_id for (user_id,) in db.query(User.id).filter(User.id.in_(payload.user_ids)).all()
    }
    missing = sorted(set(payload.user_ids) - known_ids)
    if missing:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "not_found", "message": "Some users do not exist", "user_ids": missing}
        )

    try:
        sent = NotificationService(db).send_bulk(payload.user_ids, payload.title, payload.message, payload.type)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send notifications"
        )

    logger.info(f"Admin bulk notification: admin_id={admin.id}, recipients={sent}")
    return {"success": True, "message": f"Notification sent to {sent} users", "data": {"sent": sent}}


def _student_response(user: User, application_count: int) -> StudentResponse:
    return StudentResponse(
        id=user.id,
        full_name=user.full_name,
        email=user.email,
        is_active=user.is_active,
        created_at=user.created_at,
        application_count=application_count,
    )


@router.get("/students", response_model=StudentListResponse)
def list_students(
    search: Optional[str] = Query(None, description="Match on name or email"),
    is_active: Optional[bool] = Query(None, description="Filter by account state"),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    rows, total = StudentService(db).list_students(
        search=search,
        is_active=is_active,
        limit=page_size,
        offset=(page - 1) * page_size,
    )
    return StudentListResponse(
        students=[_student_response(user, count) for user, count in rows],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/students/{student_id}", response_model=StudentDetailResponse)
def get_student(
    student_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    summary = StudentService(db).get_student(student_id)
    if summary is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
    return StudentDetailResponse(
        student=_student_response(summary.user, summary.total_applications),
        total_applications=summary.total_applications,
        approved_applications=summary.approved_applications,
        enrolled_applications=summary.enrolled_applications,
        last_application_at=summary.last_application_at,
        programs=summary.programs,
    )


@router.put("/students/{student_id}/status")
def update_student_status(
    student_id: int,
    payload: StudentStatusUpdateRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Activate or deactivate a student account."""
    try:
        user = StudentService(db).set_active(student_id, payload.is_active, admin.id)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update student status"
        )
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")

    return {
        "success": True,
        "message": "Student status updated successfully",
        "data": {"student_id": user.id, "is_active": user.is_active},
    }
