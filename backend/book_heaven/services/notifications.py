import logging
from datetime import datetime
from typing import Protocol
from sqlalchemy.orm import Session
from book_heaven.core.errors import ForbiddenError, NotFoundError
from book_heaven.models import Notification
from book_heaven.models.enums import NotificationType, OfferStatus

logger = logging.getLogger(__name__)

_STATUS_TYPES = {
    OfferStatus.ACCEPTED: NotificationType.OFFER_ACCEPTED,
    OfferStatus.REJECTED: NotificationType.OFFER_REJECTED,
    OfferStatus.COUNTERED: NotificationType.OFFER_COUNTERED,
    OfferStatus.WITHDRAWN: NotificationType.OFFER_WITHDRAWN,
}


def format_price(amount: float) -> str:
    return f"${amount:,.2f}"


def create_notification(
    db: Session,
    user_id: int,
    type: NotificationType,
    title: str,
    message: str,
    link_url: str | None = None,
) -> Notification:
    notification = Notification(user_id=user_id, type=type, title=title, message=message, link_url=link_url)
    db.add(notification)
    db.commit()
    db.refresh(notification)
    return notification


def notify_new_offer(db: Session, seller_id: int, buyer_name: str, post_title: str, offered_price: float) -> Notification:
    return create_notification(
        db,
        user_id=seller_id,
        type=NotificationType.NEW_OFFER,
        title="New Offer Received",
        message=f'{buyer_name} offered {format_price(offered_price)} for "{post_title}"',
        link_url="/offers/received",
    )


def notify_offer_status_change(
    db: Session,
    user_id: int,
    post_title: str,
    status: OfferStatus,
    counter_price: float | None = None,
) -> Notification:
    """Tell the other party of an offer that its status moved.

    ACCEPTED, REJECTED and COUNTERED go to the buyer; WITHDRAWN goes to the
    seller. Buyers accepting a counter also land here as ACCEPTED for the seller.
    """
    if status not in _STATUS_TYPES:
        raise ValueError(f"No notification for offer status {status}")
    counter = format_price(counter_price) if counter_price is not None else ""
    messages = {
        OfferStatus.ACCEPTED: f'The offer for "{post_title}" was accepted!',
        OfferStatus.REJECTED: f'Your offer for "{post_title}" was rejected',
        OfferStatus.COUNTERED: f'You received a counter-offer of {counter} for "{post_title}"',
        OfferStatus.WITHDRAWN: f'An offer for "{post_title}" was withdrawn',
    }
    link_url = "/offers/received" if status == OfferStatus.WITHDRAWN else "/offers/sent"
    return create_notification(
        db,
        user_id=user_id,
        type=_STATUS_TYPES[status],
        title=f"Offer {status.value.capitalize()}",
        message=messages[status],
        link_url=link_url,
    )


def list_notifications(db: Session, user_id: int, unread_only: bool = False, limit: int = 50) -> list[Notification]:
    query = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()


def unread_count(db: Session, user_id: int) -> int:
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
        .count()
    )


def mark_read(db: Session, notification_id: int, user_id: int) -> Notification:
    notification = db.get(Notification, notification_id)
    if not notification:
        raise NotFoundError("Notification not found")
    if notification.user_id != user_id:
        raise ForbiddenError("You do not have permission to mark this notification as read")
    if not notification.is_read:
        notification.is_read = True
        notification.read_at = datetime.utcnow()
        db.commit()
        db.refresh(notification)
    return notification


def mark_all_read(db: Session, user_id: int) -> int:
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
        .update({Notification.is_read: True, Notification.read_at: datetime.utcnow()}, synchronize_session=False)
    )
    db.commit()
    return updated


class Notifier(Protocol):
    def new_offer(self, seller_id: int, buyer_name: str, post_title: str, offered_price: float) -> None:
        ...

    def offer_status_changed(
        self, user_id: int, post_title: str, status: OfferStatus, counter_price: float | None = None
    ) -> None:
        ...


class InlineNotifier:
    """Writes notification rows through the caller's session."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def new_offer(self, seller_id: int, buyer_name: str, post_title: str, offered_price: float) -> None:
        notify_new_offer(self.db, seller_id, buyer_name, post_title, offered_price)

    def offer_status_changed(
        self, user_id: int, post_title: str, status: OfferStatus, counter_price: float | None = None
    ) -> None:
        notify_offer_status_change(self.db, user_id, post_title, status, counter_price)

