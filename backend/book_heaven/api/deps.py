from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session
from book_heaven.core.config import settings
from book_heaven.db.session import get_db
from book_heaven.models import User
from book_heaven.services.notifications import InlineNotifier, Notifier
from book_heaven.services.offers import OfferService
from book_heaven.services.progress import ProgressService
from book_heaven.workers.dispatch import QueueNotifier


def get_current_user(x_user_id: int | None = Header(None), db: Session = Depends(get_db)) -> User:
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    user = db.get(User, x_user_id)
    if not user:
        raise HTTPException(status_code=401, detail="Unknown user")
    return user


def get_notifier(db: Session = Depends(get_db)) -> Notifier:
    if settings.notification_mode.lower() == "inline":
        return InlineNotifier(db)
    return QueueNotifier()


def get_offer_service(db: Session = Depends(get_db), notifier: Notifier = Depends(get_notifier)) -> OfferService:
    return OfferService(db, notifier, auto_reject_on_accept=settings.offer_auto_reject_on_accept)


def get_progress_service(db: Session = Depends(get_db)) -> ProgressService:
    return ProgressService(
        db,
        completion_threshold=settings.progress_completion_threshold,
        write_policy=settings.progress_write_policy,
    )
