import logging
from book_heaven.models.enums import OfferStatus
from book_heaven.workers import tasks
from book_heaven.workers.rq_queue import NOTIFICATIONS_QUEUE, get_queue

logger = logging.getLogger(__name__)


class QueueNotifier:
    """Hands notification writes to the RQ worker."""

    def new_offer(self, seller_id: int, buyer_name: str, post_title: str, offered_price: float) -> None:
        job = get_queue(NOTIFICATIONS_QUEUE).enqueue(
            tasks.notify_new_offer_job, seller_id, buyer_name, post_title, offered_price
        )
        logger.info("New offer notification queued", extra={"user_id": seller_id, "job_id": job.id})

    def offer_status_changed(
        self, user_id: int, post_title: str, status: OfferStatus, counter_price: float | None = None
    ) -> None:
        job = get_queue(NOTIFICATIONS_QUEUE).enqueue(
            tasks.notify_offer_status_job, user_id, post_title, status.value, counter_price
        )
        logger.info(
            "Offer status notification queued",
            extra={"user_id": user_id, "status": status.value, "job_id": job.id},
        )
