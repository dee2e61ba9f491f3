import logging
from book_heaven.db.session import SessionLocal
from book_heaven.models.enums import OfferStatus
from book_heaven.services import notifications
from book_heaven.services.sell_posts import expire_stale_posts

logger = logging.getLogger(__name__)


def notify_new_offer_job(seller_id: int, buyer_name: str, post_title: str, offered_price: float) -> int:
    db = SessionLocal()
    try:
        notification = notifications.notify_new_offer(db, seller_id, buyer_name, post_title, offered_price)
        return notification.id
    finally:
        db.close()


def notify_offer_status_job(user_id: int, post_title: str, status: str, counter_price: float | None) -> int:
    db = SessionLocal()
    try:
        notification = notifications.notify_offer_status_change(
            db, user_id, post_title, OfferStatus(status), counter_price
        )
        return notification.id
    finally:
        db.close()


def expire_sell_posts_job() -> int:
    db = SessionLocal()
    try:
        expired = expire_stale_posts(db)
        logger.info("Expiry sweep finished", extra={"expired": expired})
        return expired
    finally:
        db.close()
