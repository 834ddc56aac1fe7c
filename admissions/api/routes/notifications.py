"""
Notification inbox endpoints for the current user.
"""
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from admissions.db.session import get_db
from admissions.db.models.user import User
from admissions.core.auth_dependency import get_current_user_obj
from admissions.schemas.notification import NotificationResponse, NotificationListResponse
from admissions.services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    limit: int = Query(10, ge=1, le=100, description="Maximum notifications to return"),
    unread_only: bool = Query(False, description="Only unread notifications"),
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db)
):
    service = NotificationService(db)
    notifications = service.list_for_user(user.id, limit=limit, unread_only=unread_only)
    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        unread_count=service.unread_count(user.id),
    )


@router.get("/unread-count")
def unread_count(
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db)
):
    return {"unread_count": NotificationService(db).unread_count(user.id)}


@router.put("/read-all")
def mark_all_read(
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db)
):
    updated = NotificationService(db).mark_all_read(user.id)
    return {"success": True, "message": "All notifications marked as read", "updated": updated}


@router.put("/{notification_id}/read")
def mark_read(
    notification_id: int,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db)
):
    if not NotificationService(db).mark_read(notification_id, user.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    return {"success": True, "message": "Notification marked as read"}
