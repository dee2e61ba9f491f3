import enum
import logging
from datetime import datetime
from sqlalchemy import func
from sqlalchemy.orm import Session
from book_heaven.core.errors import ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from book_heaven.models import Offer, SellPost, User
from book_heaven.models.enums import (
    ACTIVE_OFFER_STATUSES,
    OPEN_OFFER_STATUSES,
    OPEN_POST_STATUSES,
    OfferStatus,
    OfferTurn,
    SellPostStatus,
    UserRole,
)
from book_heaven.services.notifications import Notifier

logger = logging.getLogger(__name__)


class OfferAction(str, enum.Enum):
    ACCEPT = "accept"
    REJECT = "reject"
    COUNTER = "counter"


class OfferService:
    """Negotiation over a single sell post.

    An offer starts PENDING with the seller to move. The seller accepts,
    rejects or counters; a counter hands the turn to the buyer, who may accept
    the counter or withdraw. ACCEPTED, REJECTED and WITHDRAWN are terminal.

    Each operation commits once; notifications go out after the commit and a
    failed notification never undoes the transition.
    """

    def __init__(self, db: Session, notifier: Notifier, auto_reject_on_accept: bool = True) -> None:
        self.db = db
        self.notifier = notifier
        self.auto_reject_on_accept = auto_reject_on_accept

    # queries

    def _load(self, offer_id: int) -> Offer:
        offer = self.db.get(Offer, offer_id)
        if not offer:
            raise NotFoundError("Offer not found")
        return offer

    def get_offer(self, offer_id: int, user_id: int) -> Offer:
        offer = self._load(offer_id)
        if user_id not in (offer.buyer_id, offer.sell_post.seller_id):
            raise ForbiddenError("You do not have permission to view this offer")
        return offer

    def _owned_post(self, sell_post_id: int, actor_id: int, role: UserRole) -> SellPost:
        post = self.db.get(SellPost, sell_post_id)
        if not post:
            raise NotFoundError("Sell post not found")
        if post.seller_id != actor_id and role != UserRole.ADMIN:
            raise ForbiddenError("Only the seller can view offers on this post")
        return post

    def list_offers_for_post(self, sell_post_id: int, actor_id: int, role: UserRole) -> list[Offer]:
        self._owned_post(sell_post_id, actor_id, role)
        return (
            self.db.query(Offer)
            .filter(Offer.sell_post_id == sell_post_id)
            .order_by(Offer.created_at.desc(), Offer.id.desc())
            .all()
        )

    def list_buyer_offers(self, buyer_id: int, status: OfferStatus | None = None) -> list[Offer]:
        query = self.db.query(Offer).filter(Offer.buyer_id == buyer_id)
        if status is not None:
            query = query.filter(Offer.status == status)
        return query.order_by(Offer.created_at.desc(), Offer.id.desc()).all()

    def list_seller_offers(self, seller_id: int, status: OfferStatus | None = None) -> list[Offer]:
        query = self.db.query(Offer).join(SellPost, Offer.sell_post_id == SellPost.id).filter(
            SellPost.seller_id == seller_id
        )
        if status is not None:
            query = query.filter(Offer.status == status)
        return query.order_by(Offer.created_at.desc(), Offer.id.desc()).all()

    def offer_stats(self, sell_post_id: int, actor_id: int, role: UserRole) -> dict[str, int]:
        self._owned_post(sell_post_id, actor_id, role)
        rows = (
            self.db.query(Offer.status, func.count(Offer.id))
            .filter(Offer.sell_post_id == sell_post_id)
            .group_by(Offer.status)
            .all()
        )
        stats = {status.value.lower(): 0 for status in OfferStatus}
        for status, count in rows:
            stats[OfferStatus(status).value.lower()] = count
        stats["total"] = sum(stats.values())
        return stats

    # transitions

    def create_offer(self, buyer_id: int, sell_post_id: int, price: float, message: str | None = None) -> Offer:
        if price is None or price <= 0:
            raise ValidationError("Offer amount must be greater than 0")
        post = self.db.get(SellPost, sell_post_id)
        if not post:
            raise NotFoundError("Sell post not found")
        self._ensure_post_open(post)
        if post.seller_id == buyer_id:
            raise InvalidStateError("You cannot make an offer on your own listing")
        existing = (
            self.db.query(Offer)
            .filter(
                Offer.sell_post_id == sell_post_id,
                Offer.buyer_id == buyer_id,
                Offer.status.in_(ACTIVE_OFFER_STATUSES),
            )
            .first()
        )
        if existing:
            raise InvalidStateError("You already have an active offer on this listing")

        offer = Offer(
            sell_post_id=sell_post_id,
            buyer_id=buyer_id,
            offered_price=price,
            message=message,
            status=OfferStatus.PENDING,
            turn=OfferTurn.SELLER,
        )
        self.db.add(offer)
        if post.status == SellPostStatus.AVAILABLE:
            post.status = SellPostStatus.PENDING
        self.db.commit()
        self.db.refresh(offer)
        logger.info(
            "Offer created",
            extra={"offer_id": offer.id, "sell_post_id": sell_post_id, "buyer_id": buyer_id, "price": price},
        )

        buyer = self.db.get(User, buyer_id)
        buyer_name = buyer.name if buyer and buyer.name else "Someone"
        self._dispatch(self.notifier.new_offer, post.seller_id, buyer_name, post.title, price)
        return offer

    def respond_to_offer(
        self,
        offer_id: int,
        seller_id: int,
        action: OfferAction,
        counter_price: float | None = None,
        response_message: str | None = None,
    ) -> Offer:
        offer = self._load(offer_id)
        post = offer.sell_post
        if post.seller_id != seller_id:
            raise ForbiddenError("Only the seller can respond to offers")
        if offer.status not in OPEN_OFFER_STATUSES:
            raise InvalidStateError(f"Cannot respond to an offer that is {offer.status.value}")
        action = OfferAction(action)
        if action == OfferAction.COUNTER and (counter_price is None or counter_price <= 0):
            raise ValidationError("Counter price is required when countering an offer")
        if action != OfferAction.REJECT:
            self._ensure_post_open(post)

        offer.response_message = response_message
        offer.responded_at = datetime.utcnow()
        rejected: list[Offer] = []
        if action == OfferAction.ACCEPT:
            price = offer.counter_price if offer.status == OfferStatus.COUNTERED else offer.offered_price
            rejected = self._accept(offer, price)
        elif action == OfferAction.REJECT:
            offer.status = OfferStatus.REJECTED
            self._release_post(post, offer)
        else:
            offer.status = OfferStatus.COUNTERED
            offer.counter_price = counter_price
            offer.turn = OfferTurn.BUYER
        self.db.commit()
        self.db.refresh(offer)
        logger.info(
            "Offer responded",
            extra={"offer_id": offer.id, "action": action.value, "status": offer.status.value},
        )

        self._dispatch(
            self.notifier.offer_status_changed, offer.buyer_id, post.title, offer.status, offer.counter_price
        )
        self._notify_rejected(rejected, post.title)
        return offer

    def accept_counter(self, offer_id: int, buyer_id: int) -> Offer:
        offer = self._load(offer_id)
        if offer.buyer_id != buyer_id:
            raise ForbiddenError("Only the buyer can accept a counter-offer")
        if offer.status != OfferStatus.COUNTERED:
            raise InvalidStateError("Only a countered offer can be accepted by the buyer")
        post = offer.sell_post
        self._ensure_post_open(post)
        rejected = self._accept(offer, offer.counter_price)
        self.db.commit()
        self.db.refresh(offer)
        logger.info("Counter-offer accepted", extra={"offer_id": offer.id, "buyer_id": buyer_id})

        self._dispatch(self.notifier.offer_status_changed, post.seller_id, post.title, OfferStatus.ACCEPTED)
        self._notify_rejected(rejected, post.title)
        return offer

    def withdraw_offer(self, offer_id: int, buyer_id: int) -> Offer:
        offer = self._load(offer_id)
        if offer.buyer_id != buyer_id:
            raise ForbiddenError("You do not have permission to withdraw this offer")
        if offer.status == OfferStatus.ACCEPTED:
            raise InvalidStateError("Cannot withdraw an accepted offer")
        if offer.status not in OPEN_OFFER_STATUSES:
            raise InvalidStateError(f"Cannot withdraw an offer that is {offer.status.value}")
        post = offer.sell_post
        offer.status = OfferStatus.WITHDRAWN
        self._release_post(post, offer)
        self.db.commit()
        self.db.refresh(offer)
        logger.info("Offer withdrawn", extra={"offer_id": offer.id, "buyer_id": buyer_id})

        self._dispatch(self.notifier.offer_status_changed, post.seller_id, post.title, OfferStatus.WITHDRAWN)
        return offer

    # helpers

    def _ensure_post_open(self, post: SellPost) -> None:
        if post.status not in OPEN_POST_STATUSES:
            raise InvalidStateError("This listing is no longer available")

    def _accept(self, offer: Offer, price: float) -> list[Offer]:
        post = offer.sell_post
        offer.status = OfferStatus.ACCEPTED
        offer.agreed_price = price
        offer.responded_at = datetime.utcnow()
        post.status = SellPostStatus.SOLD
        post.sold_at = datetime.utcnow()
        if not self.auto_reject_on_accept:
            return []
        others = (
            self.db.query(Offer)
            .filter(
                Offer.sell_post_id == post.id,
                Offer.id != offer.id,
                Offer.status.in_(OPEN_OFFER_STATUSES),
            )
            .all()
        )
        for other in others:
            other.status = OfferStatus.REJECTED
            other.responded_at = offer.responded_at
        return others

    def _release_post(self, post: SellPost, closed: Offer) -> None:
        if post.status != SellPostStatus.PENDING:
            return
        still_open = (
            self.db.query(Offer.id)
            .filter(
                Offer.sell_post_id == post.id,
                Offer.id != closed.id,
                Offer.status.in_(OPEN_OFFER_STATUSES),
            )
            .first()
        )
        if not still_open:
            post.status = SellPostStatus.AVAILABLE

    def _notify_rejected(self, offers: list[Offer], post_title: str) -> None:
        for other in offers:
            self._dispatch(self.notifier.offer_status_changed, other.buyer_id, post_title, OfferStatus.REJECTED)

    def _dispatch(self, send, *args) -> None:
        try:
            send(*args)
        except Exception:
            self.db.rollback()
            logger.exception("Failed to send offer notification", extra={"notifier": type(self.notifier).__name__})
