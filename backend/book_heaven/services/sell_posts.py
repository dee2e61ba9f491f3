import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from sqlalchemy.orm import Session
from book_heaven.core.errors import ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from book_heaven.models import Book, Offer, SellPost
from book_heaven.models.enums import OPEN_OFFER_STATUSES, OPEN_POST_STATUSES, OfferStatus, SellPostStatus, UserRole

logger = logging.getLogger(__name__)

# statuses an owner may set through an update
EDITABLE_POST_STATUSES = (SellPostStatus.AVAILABLE, SellPostStatus.HIDDEN)
REQUIRED_POST_FIELDS = ("title", "price", "negotiable", "condition", "status")


@dataclass
class SellPostFilters:
    status: SellPostStatus | None = None
    seller_id: int | None = None
    city: str | None = None
    search: str | None = None
    min_price: float | None = None
    max_price: float | None = None
    negotiable: bool | None = None


def _check_owner(post: SellPost, actor_id: int, role: UserRole, action: str) -> None:
    if post.seller_id != actor_id and role != UserRole.ADMIN:
        raise ForbiddenError(f"You do not have permission to {action} this post")


def get_sell_post(db: Session, post_id: int) -> SellPost:
    post = db.get(SellPost, post_id)
    if not post:
        raise NotFoundError("Sell post not found")
    return post


def list_sell_posts(db: Session, filters: SellPostFilters, page: int = 1, limit: int = 20) -> tuple[list[SellPost], int]:
    query = db.query(SellPost)
    if filters.status is not None:
        query = query.filter(SellPost.status == filters.status)
    else:
        query = query.filter(SellPost.status.in_(OPEN_POST_STATUSES))
    if filters.seller_id is not None:
        query = query.filter(SellPost.seller_id == filters.seller_id)
    if filters.city:
        query = query.filter(SellPost.city.ilike(filters.city))
    if filters.search:
        query = query.filter(SellPost.title.ilike(f"%{filters.search}%"))
    if filters.min_price is not None:
        query = query.filter(SellPost.price >= filters.min_price)
    if filters.max_price is not None:
        query = query.filter(SellPost.price <= filters.max_price)
    if filters.negotiable is not None:
        query = query.filter(SellPost.negotiable.is_(filters.negotiable))
    total = query.count()
    posts = (
        query.order_by(SellPost.created_at.desc(), SellPost.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return posts, total


def create_sell_post(db: Session, seller_id: int, data: dict[str, Any]) -> SellPost:
    if data.get("price") is None or data["price"] <= 0:
        raise ValidationError("Price must be greater than 0")
    book_id = data.get("book_id")
    if book_id is not None and not db.get(Book, book_id):
        raise NotFoundError("Book not found")
    post = SellPost(seller_id=seller_id, status=SellPostStatus.AVAILABLE, **data)
    db.add(post)
    db.commit()
    db.refresh(post)
    logger.info("Sell post created", extra={"sell_post_id": post.id, "seller_id": seller_id})
    return post


def _relisted_status(db: Session, post: SellPost, status: SellPostStatus) -> SellPostStatus:
    if status not in EDITABLE_POST_STATUSES:
        raise ValidationError("Status can only be set to AVAILABLE or HIDDEN")
    if status == SellPostStatus.HIDDEN:
        return status
    offers = db.query(Offer.status).filter(Offer.sell_post_id == post.id).all()
    statuses = {row.status for row in offers}
    if OfferStatus.ACCEPTED in statuses:
        raise InvalidStateError("This listing already has an accepted offer")
    if statuses & set(OPEN_OFFER_STATUSES):
        return SellPostStatus.PENDING
    return SellPostStatus.AVAILABLE


def update_sell_post(db: Session, post_id: int, actor_id: int, role: UserRole, data: dict[str, Any]) -> SellPost:
    post = get_sell_post(db, post_id)
    _check_owner(post, actor_id, role, "update")
    for field in REQUIRED_POST_FIELDS:
        if field in data and data[field] is None:
            raise ValidationError(f"{field} cannot be empty")
    if "price" in data and data["price"] <= 0:
        raise ValidationError("Price must be greater than 0")
    if "status" in data:
        data = {**data, "status": _relisted_status(db, post, SellPostStatus(data["status"]))}
        if data["status"] != SellPostStatus.HIDDEN:
            post.sold_at = None
    for field, value in data.items():
        setattr(post, field, value)
    db.commit()
    db.refresh(post)
    logger.info(
        "Sell post updated",
        extra={"sell_post_id": post.id, "actor_id": actor_id, "role": role.value, "fields": sorted(data)},
    )
    return post


def hide_sell_post(db: Session, post_id: int, actor_id: int, role: UserRole) -> SellPost:
    post = get_sell_post(db, post_id)
    _check_owner(post, actor_id, role, "delete")
    post.status = SellPostStatus.HIDDEN
    db.commit()
    db.refresh(post)
    return post


def mark_sold(db: Session, post_id: int, actor_id: int, role: UserRole) -> SellPost:
    post = get_sell_post(db, post_id)
    _check_owner(post, actor_id, role, "update")
    post.status = SellPostStatus.SOLD
    post.sold_at = datetime.utcnow()
    db.commit()
    db.refresh(post)
    return post


def expire_stale_posts(db: Session, now: datetime | None = None) -> int:
    now = now or datetime.utcnow()
    expired = (
        db.query(SellPost)
        .filter(
            SellPost.status.in_(OPEN_POST_STATUSES),
            SellPost.expires_at.is_not(None),
            SellPost.expires_at < now,
        )
        .update({SellPost.status: SellPostStatus.EXPIRED}, synchronize_session=False)
    )
    db.commit()
    if expired:
        logger.info("Sell posts expired", extra={"count": expired})
    return expired
