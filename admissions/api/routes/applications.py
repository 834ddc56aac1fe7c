"""
Student application endpoints.

Submit, list, view, edit and withdraw (soft delete) the current student's applications.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from admissions.db.session import get_db
from admissions.db.models.user import User
from admissions.core.auth_dependency import require_student
from admissions.core.errors import ERROR_STATUS_CODES
from admissions.core.workflow_rules import allowed_transitions, can_delete, can_edit
from admissions.schemas.application import (
    ApplicationCreate,
    ApplicationUpdate,
    ApplicationResponse,
    ApplicationDetailResponse,
    ApplicationListResponse,
    StatusHistoryResponse,
)
from admissions.schemas.workflow import WorkflowResult
from admissions.services.application_store import ApplicationStore
from admissions.services.history_store import HistoryStore
from admissions.services.workflow_service import WorkflowService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["Applications"])


def raise_for_result(result: WorkflowResult) -> WorkflowResult:
    """Turn a failed workflow result into an HTTPException with a structured detail."""
    if result.success:
        return result
    raise HTTPException(
        status_code=ERROR_STATUS_CODES.get(result.error, status.HTTP_400_BAD_REQUEST),
        detail={"error": result.error, "message": result.message, **(result.data or {})}
    )


def build_detail(db: Session, application, include_admin_view: bool = False) -> ApplicationDetailResponse:
    history = HistoryStore(db).list_by_application(application.id)
    return ApplicationDetailResponse(
        application=ApplicationResponse.model_validate(application),
        status_history=[StatusHistoryResponse.model_validate(entry) for entry in history],
        editable=can_edit(application.status),
        deletable=can_delete(application.status),
        allowed_transitions=allowed_transitions(application.status) if include_admin_view else [],
    )


def get_owned_application(application_id: int, user: User, db: Session):
    application = ApplicationStore(db).load(application_id)
    if application is None or application.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Application not found")
    return application


# ✅ SUBMIT APPLICATION
@router.post("", status_code=status.HTTP_201_CREATED, response_model=WorkflowResult)
def submit_application(
    payload: ApplicationCreate,
    user: User = Depends(require_student),
    db: Session = Depends(get_db)
):
    """Submit a new application. It starts in `submitted` with a fresh application number."""
    result = WorkflowService(db).submit_application(user.id, payload.model_dump(exclude_none=True))
    return raise_for_result(result)


# ✅ LIST MY APPLICATIONS
@router.get("/my", response_model=ApplicationListResponse)
def list_my_applications(
    user: User = Depends(require_student),
    db: Session = Depends(get_db)
):
    applications = ApplicationStore(db).list_for_user(user.id)
    return ApplicationListResponse(
        applications=[ApplicationResponse.model_validate(app) for app in applications],
        total=len(applications),
        page=1,
        page_size=max(len(applications), 1),
    )


# ✅ APPLICATION DETAILS + HISTORY
@router.get("/{application_id}", response_model=ApplicationDetailResponse)
def get_application(
    application_id: int,
    user: User = Depends(require_student),
    db: Session = Depends(get_db)
):
    application = get_owned_application(application_id, user, db)
    return build_detail(db, application)


# ✅ EDIT APPLICATION
@router.put("/{application_id}", response_model=WorkflowResult)
def edit_application(
    application_id: int,
    payload: ApplicationUpdate,
    user: User = Depends(require_student),
    db: Session = Depends(get_db)
):
    """Edit an application while it is still submitted or under review."""
    result = WorkflowService(db).edit_application(
        application_id, user.id, payload.model_dump(exclude_unset=True)
    )
    return raise_for_result(result)


# ✅ DELETE (WITHDRAW) APPLICATION
@router.delete("/{application_id}", response_model=WorkflowResult)
def delete_application(
    application_id: int,
    user: User = Depends(require_student),
    db: Session = Depends(get_db)
):
    """Soft-delete an application that has not been picked up for review yet."""
    result = WorkflowService(db).delete_application(application_id, user.id)
    return raise_for_result(result)
