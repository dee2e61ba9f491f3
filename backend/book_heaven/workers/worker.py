import argparse
import logging
from rq import Worker
from book_heaven.core.config import settings
from book_heaven.core.logging import configure_logging
from book_heaven.workers.rq_queue import QUEUE_NAMES, get_redis

logger = logging.getLogger(__name__)


def main() -> None:
    parser = argparse.ArgumentParser(description="Run an RQ worker for notification and maintenance jobs")
    parser.add_argument("queues", nargs="*", help=f"queues to listen on (default: {', '.join(QUEUE_NAMES)})")
    parser.add_argument("--burst", action="store_true", help="exit once the queues are empty")
    args = parser.parse_args()
    queues = args.queues or list(QUEUE_NAMES)
    unknown = sorted(set(queues) - set(QUEUE_NAMES))
    if unknown:
        parser.error(f"unknown queue(s): {', '.join(unknown)}")

    configure_logging(settings.log_level, settings.app_name, settings.environment)
    worker = Worker(queues, connection=get_redis())
    logger.info("Worker starting", extra={"queues": queues, "burst": args.burst})
    worker.work(burst=args.burst)


if __name__ == "__main__":
    main()
