import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from book_heaven.core.errors import ConflictError, NotFoundError, ValidationError
from book_heaven.models import Book, ProgressHistory, ReadingProgress

logger = logging.getLogger(__name__)

COMPLETION_THRESHOLD = 95.0
MAX_HEATMAP_LEVEL = 4

LAST_WRITE_WINS = "last_write_wins"
VERSION_CHECKED = "version_checked"
WRITE_POLICIES = (LAST_WRITE_WINS, VERSION_CHECKED)

PROGRESS_KINDS = ("all", "in-progress", "completed")
HISTORY_PERIODS = {"all": None, "week": 7, "month": 30}


@dataclass
class HeatmapDay:
    date: date
    pages_read: int
    time_spent: int
    level: int


@dataclass
class PagesRead:
    date: date
    pages_read: int


@dataclass
class ReadingStats:
    total_sessions: int
    total_pages_read: int
    total_time_spent: int
    first_read: datetime | None
    last_read: datetime | None


def clamp_progress(progress: float | None) -> float:
    return min(100.0, max(0.0, float(progress or 0)))


def is_completed(progress: float, threshold: float = COMPLETION_THRESHOLD) -> bool:
    return progress >= threshold


def pages_read_delta(current_page: int, previous_page: int) -> int:
    return max(0, current_page - previous_page)


def heatmap_level(pages_read: int, max_pages_read: int) -> int:
    if pages_read <= 0:
        return 0
    level = math.ceil(pages_read / max(max_pages_read, 1) * MAX_HEATMAP_LEVEL)
    return min(level, MAX_HEATMAP_LEVEL)


def heatmap_levels(daily_pages: dict[date, int]) -> dict[date, int]:
    max_pages = max(daily_pages.values(), default=0)
    return {day: heatmap_level(pages, max_pages) for day, pages in daily_pages.items()}


def week_start(day: date) -> date:
    # weeks start on Sunday; date.weekday() has Monday = 0
    return day - timedelta(days=(day.weekday() + 1) % 7)


def _window_start(now: datetime, days: int) -> datetime:
    return (now - timedelta(days=days)).replace(hour=0, minute=0, second=0, microsecond=0)


class ProgressService:
    def __init__(
        self,
        db: Session,
        completion_threshold: float = COMPLETION_THRESHOLD,
        write_policy: str = LAST_WRITE_WINS,
    ) -> None:
        if write_policy not in WRITE_POLICIES:
            raise ValueError(f"Unsupported progress write policy: {write_policy}")
        self.db = db
        self.completion_threshold = completion_threshold
        self.write_policy = write_policy

    def _find(self, user_id: int, book_id: int) -> ReadingProgress | None:
        return (
            self.db.query(ReadingProgress)
            .filter(ReadingProgress.user_id == user_id, ReadingProgress.book_id == book_id)
            .first()
        )

    def _check_version(self, existing: ReadingProgress | None, expected_version: int | None) -> None:
        if expected_version is None:
            if self.write_policy == VERSION_CHECKED and existing is not None:
                raise ValidationError("expected_version is required to update reading progress")
            return
        current = existing.version if existing is not None else 0
        if current != expected_version:
            raise ConflictError(
                f"Reading progress is at version {current}, not {expected_version}; reload and retry"
            )

    def record_progress(
        self,
        user_id: int,
        book_id: int,
        current_page: int | None,
        raw_progress: float | None,
        total_pages: int | None = None,
        time_spent: int = 0,
        expected_version: int | None = None,
    ) -> ReadingProgress:
        """Upsert the (user, book) progress row and log the session.

        A history row is appended only when pages were actually read since the
        previous report, or when this is the first report for the book.
        """
        book = self.db.get(Book, book_id)
        if not book:
            raise NotFoundError("Book not found")

        progress_value = clamp_progress(raw_progress)
        completed = is_completed(progress_value, self.completion_threshold)
        page = current_page or 1
        now = datetime.utcnow()

        existing = self._find(user_id, book_id)
        self._check_version(existing, expected_version)
        previous_page = (existing.current_page or 0) if existing else 0
        pages_read = pages_read_delta(page, previous_page)

        if existing:
            record = existing
            record.current_page = page
            record.progress = progress_value
            record.is_completed = completed
            record.last_read_at = now
        else:
            record = ReadingProgress(
                user_id=user_id,
                book_id=book_id,
                current_page=page,
                progress=progress_value,
                is_completed=completed,
                last_read_at=now,
            )
            self.db.add(record)

        if pages_read > 0 or existing is None:
            self.db.add(
                ProgressHistory(
                    user_id=user_id,
                    book_id=book_id,
                    current_page=page,
                    progress=progress_value,
                    pages_read=pages_read,
                    time_spent=time_spent or 0,
                    session_date=now,
                )
            )

        if total_pages and book.page_count is None:
            book.page_count = total_pages

        try:
            self.db.commit()
        except (StaleDataError, IntegrityError) as exc:
            self.db.rollback()
            logger.warning(
                "Concurrent reading progress write", extra={"user_id": user_id, "book_id": book_id}
            )
            raise ConflictError("Reading progress was updated by another session; reload and retry") from exc
        self.db.refresh(record)
        logger.info(
            "Reading progress recorded",
            extra={
                "user_id": user_id,
                "book_id": book_id,
                "progress": progress_value,
                "pages_read": pages_read,
                "completed": completed,
            },
        )
        return record

    def get_progress(self, user_id: int, book_id: int) -> ReadingProgress:
        record = self._find(user_id, book_id)
        if not record:
            raise NotFoundError("Progress not found")
        return record

    def list_progress(
        self, user_id: int, kind: str = "all", page: int = 1, limit: int = 20
    ) -> tuple[list[ReadingProgress], int]:
        if kind not in PROGRESS_KINDS:
            raise ValidationError(f"Unknown progress filter: {kind}")
        query = self.db.query(ReadingProgress).filter(ReadingProgress.user_id == user_id)
        if kind == "in-progress":
            query = query.filter(ReadingProgress.is_completed.is_(False), ReadingProgress.progress > 0)
        elif kind == "completed":
            query = query.filter(ReadingProgress.is_completed.is_(True))
        total = query.count()
        records = (
            query.order_by(ReadingProgress.last_read_at.desc(), ReadingProgress.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return records, total

    def reading_summary(self, user_id: int) -> dict:
        base = self.db.query(ReadingProgress).filter(ReadingProgress.user_id == user_id)
        total = base.count()
        completed = base.filter(ReadingProgress.is_completed.is_(True)).count()
        rate = (completed / total) * 100 if total else 0.0
        return {
            "total_books": total,
            "completed_books": completed,
            "in_progress_books": total - completed,
            "completion_rate": round(rate, 2),
        }

    def mark_completed(self, user_id: int, book_id: int) -> ReadingProgress:
        record = self.get_progress(user_id, book_id)
        record.progress = 100.0
        record.is_completed = True
        record.last_read_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(record)
        return record

    def reset_progress(self, user_id: int, book_id: int) -> ReadingProgress:
        record = self.get_progress(user_id, book_id)
        record.current_page = None
        record.progress = 0.0
        record.is_completed = False
        record.last_read_at = datetime.utcnow()
        deleted = (
            self.db.query(ProgressHistory)
            .filter(ProgressHistory.user_id == user_id, ProgressHistory.book_id == book_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        self.db.refresh(record)
        logger.info(
            "Reading progress reset", extra={"user_id": user_id, "book_id": book_id, "history_deleted": deleted}
        )
        return record

    # aggregates

    def _history(self, user_id: int, book_id: int, since: datetime | None = None) -> list[ProgressHistory]:
        query = self.db.query(ProgressHistory).filter(
            ProgressHistory.user_id == user_id, ProgressHistory.book_id == book_id
        )
        if since is not None:
            query = query.filter(ProgressHistory.session_date >= since)
        return query.order_by(ProgressHistory.session_date.asc(), ProgressHistory.id.asc()).all()

    def get_history(
        self, user_id: int, book_id: int, period: str = "all", now: datetime | None = None
    ) -> list[ProgressHistory]:
        if period not in HISTORY_PERIODS:
            raise ValidationError(f"Unknown history period: {period}")
        days = HISTORY_PERIODS[period]
        since = None
        if days is not None:
            since = (now or datetime.utcnow()) - timedelta(days=days)
        return self._history(user_id, book_id, since)

    def get_heatmap(
        self, user_id: int, book_id: int, days: int = 365, now: datetime | None = None
    ) -> list[HeatmapDay]:
        history = self._history(user_id, book_id, _window_start(now or datetime.utcnow(), days))
        pages: dict[date, int] = defaultdict(int)
        seconds: dict[date, int] = defaultdict(int)
        for entry in history:
            day = entry.session_date.date()
            pages[day] += entry.pages_read or 0
            seconds[day] += entry.time_spent or 0
        levels = heatmap_levels(pages)
        return [
            HeatmapDay(date=day, pages_read=pages[day], time_spent=seconds[day], level=levels[day])
            for day in sorted(pages)
        ]

    def get_pages_per_day(
        self, user_id: int, book_id: int, days: int = 30, now: datetime | None = None
    ) -> list[PagesRead]:
        history = self._history(user_id, book_id, _window_start(now or datetime.utcnow(), days))
        daily: dict[date, int] = defaultdict(int)
        for entry in history:
            daily[entry.session_date.date()] += entry.pages_read or 0
        return [PagesRead(date=day, pages_read=daily[day]) for day in sorted(daily)]

    def get_pages_per_week(
        self, user_id: int, book_id: int, weeks: int = 12, now: datetime | None = None
    ) -> list[PagesRead]:
        history = self._history(user_id, book_id, _window_start(now or datetime.utcnow(), weeks * 7))
        weekly: dict[date, int] = defaultdict(int)
        for entry in history:
            weekly[week_start(entry.session_date.date())] += entry.pages_read or 0
        return [PagesRead(date=day, pages_read=weekly[day]) for day in sorted(weekly)]

    def get_stats(self, user_id: int, book_id: int) -> ReadingStats:
        history = self._history(user_id, book_id)
        return ReadingStats(
            total_sessions=len(history),
            total_pages_read=sum(entry.pages_read or 0 for entry in history),
            total_time_spent=sum(entry.time_spent or 0 for entry in history),
            first_read=history[0].session_date if history else None,
            last_read=history[-1].session_date if history else None,
        )
