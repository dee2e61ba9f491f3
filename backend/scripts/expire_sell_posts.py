import argparse
from datetime import datetime
from book_heaven.db.session import SessionLocal
from book_heaven.services.sell_posts import expire_stale_posts
from book_heaven.workers.rq_queue import MAINTENANCE_QUEUE, get_queue
from book_heaven.workers import tasks


def main() -> None:
    parser = argparse.ArgumentParser(description="Mark sell posts past their expiry date as EXPIRED")
    parser.add_argument("--enqueue", action="store_true", help="run the sweep on the RQ worker instead")
    args = parser.parse_args()

    if args.enqueue:
        job = get_queue(MAINTENANCE_QUEUE).enqueue(tasks.expire_sell_posts_job)
        print(f"Queued expiry sweep as job {job.id}")
        return

    db = SessionLocal()
    try:
        expired = expire_stale_posts(db, datetime.utcnow())
        print(f"Expired {expired} sell posts")
    finally:
        db.close()


if __name__ == "__main__":
    main()
