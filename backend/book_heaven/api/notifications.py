from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from book_heaven.api.deps import get_current_user
from book_heaven.db.session import get_db
from book_heaven.models import User
from book_heaven.schemas.notification import NotificationOut
from book_heaven.services import notifications

router = APIRouter()


@router.get("/notifications", response_model=list[NotificationOut])
def list_notifications(
    unread_only: bool = False,
    limit: int = Query(50, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return notifications.list_notifications(db, user.id, unread_only=unread_only, limit=limit)


@router.get("/notifications/unread-count")
def get_unread_count(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"count": notifications.unread_count(db, user.id)}


@router.post("/notifications/read-all")
def mark_all_notifications_read(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"updated": notifications.mark_all_read(db, user.id)}


@router.post("/notifications/{notification_id}/read", response_model=NotificationOut)
def mark_notification_read(
    notification_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return notifications.mark_read(db, notification_id, user.id)
