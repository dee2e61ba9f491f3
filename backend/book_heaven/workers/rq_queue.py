from redis import Redis
from rq import Queue
from book_heaven.core.config import settings

NOTIFICATIONS_QUEUE = "notifications"
MAINTENANCE_QUEUE = "maintenance"
QUEUE_NAMES = (NOTIFICATIONS_QUEUE, MAINTENANCE_QUEUE)


def get_redis() -> Redis:
    return Redis.from_url(settings.redis_url)


def get_queue(name: str = NOTIFICATIONS_QUEUE) -> Queue:
    if name not in QUEUE_NAMES:
        raise ValueError(f"Unknown queue: {name}")
    return Queue(name, connection=get_redis(), default_timeout=settings.rq_default_timeout)
