"""Reading progress tests.

Coverage:
- clamping, completion and page-delta rules
- history append policy (first report or pages actually read)
- write policies (last-write-wins, version-checked)
- heatmap / pages-per-day / pages-per-week / stats aggregation
"""

from datetime import date, datetime

import pytest

from book_heaven.core.errors import ConflictError, NotFoundError, ValidationError
from book_heaven.models import Book, ProgressHistory
from book_heaven.services.progress import (
    VERSION_CHECKED,
    ProgressService,
    clamp_progress,
    heatmap_level,
    heatmap_levels,
    is_completed,
    pages_read_delta,
    week_start,
)

NOW = datetime(2026, 10, 19, 12, 0)  # a Monday


@pytest.fixture
def service(db):
    return ProgressService(db)


def _history(db, user, book):
    return (
        db.query(ProgressHistory)
        .filter(ProgressHistory.user_id == user.id, ProgressHistory.book_id == book.id)
        .order_by(ProgressHistory.id)
        .all()
    )


def _session(db, user, book, when, pages, seconds=0):
    db.add(
        ProgressHistory(
            user_id=user.id,
            book_id=book.id,
            current_page=pages,
            progress=0.0,
            pages_read=pages,
            time_spent=seconds,
            session_date=when,
        )
    )
    db.commit()


class TestRules:
    @pytest.mark.parametrize(
        "raw, expected",
        [(-10, 0.0), (0, 0.0), (None, 0.0), (12.5, 12.5), (100, 100.0), (140, 100.0)],
    )
    def test_clamp(self, raw, expected):
        assert clamp_progress(raw) == expected

    @pytest.mark.parametrize("raw", [-50, 0, 42.2, 94.99, 95, 99, 100, 250])
    def test_completion_follows_clamped_value(self, raw):
        value = clamp_progress(raw)
        assert 0 <= value <= 100
        assert is_completed(value) == (value >= 95)

    @pytest.mark.parametrize("current, previous, expected", [(25, 10, 15), (10, 25, 0), (7, 7, 0), (1, 0, 1)])
    def test_pages_read_never_negative(self, current, previous, expected):
        assert pages_read_delta(current, previous) == expected

    def test_heatmap_level_bounds_and_order(self):
        levels = [heatmap_level(pages, 40) for pages in range(0, 41)]

        assert levels[0] == 0
        assert levels[-1] == 4
        assert all(0 <= level <= 4 for level in levels)
        assert levels == sorted(levels)

    def test_heatmap_levels_against_busiest_day(self):
        days = {date(2026, 10, 1): 10, date(2026, 10, 2): 5, date(2026, 10, 3): 1, date(2026, 10, 4): 0}

        assert heatmap_levels(days) == {
            date(2026, 10, 1): 4,
            date(2026, 10, 2): 2,
            date(2026, 10, 3): 1,
            date(2026, 10, 4): 0,
        }

    def test_heatmap_levels_all_zero(self):
        assert heatmap_levels({date(2026, 10, 1): 0}) == {date(2026, 10, 1): 0}

    @pytest.mark.parametrize(
        "day, expected",
        [
            (date(2026, 10, 18), date(2026, 10, 18)),  # Sunday
            (date(2026, 10, 19), date(2026, 10, 18)),  # Monday
            (date(2026, 10, 17), date(2026, 10, 11)),  # Saturday
        ],
    )
    def test_week_starts_on_sunday(self, day, expected):
        assert week_start(day) == expected


class TestRecordProgress:
    def test_first_report_creates_row_and_history(self, db, service, buyer, book):
        record = service.record_progress(buyer.id, book.id, 10, 5.0)

        assert record.current_page == 10
        assert record.progress == 5.0
        assert record.is_completed is False
        assert record.version == 1
        history = _history(db, buyer, book)
        assert len(history) == 1
        assert history[0].pages_read == 10

    def test_page_ten_to_twenty_five(self, db, service, buyer, book):
        service.record_progress(buyer.id, book.id, 10, 5.0)

        record = service.record_progress(buyer.id, book.id, 25, 12.5, total_pages=200)

        assert record.progress == 12.5
        assert record.is_completed is False
        assert record.current_page == 25
        assert _history(db, buyer, book)[-1].pages_read == 15

    def test_no_history_without_new_pages(self, db, service, buyer, book):
        service.record_progress(buyer.id, book.id, 30, 15.0)
        service.record_progress(buyer.id, book.id, 30, 15.0)
        service.record_progress(buyer.id, book.id, 12, 6.0)

        assert len(_history(db, buyer, book)) == 1
        assert service.get_progress(buyer.id, book.id).current_page == 12

    def test_ninety_seven_percent_is_complete(self, service, buyer, book):
        record = service.record_progress(buyer.id, book.id, 3, 97)

        assert record.is_completed is True

    def test_progress_is_clamped(self, service, buyer, book):
        assert service.record_progress(buyer.id, book.id, 5, 180).progress == 100.0
        assert service.record_progress(buyer.id, book.id, 6, -3).progress == 0.0

    def test_missing_page_defaults_to_one(self, service, buyer, book):
        assert service.record_progress(buyer.id, book.id, None, 0).current_page == 1

    def test_backfills_page_count_once(self, db, service, buyer, book):
        service.record_progress(buyer.id, book.id, 10, 5.0, total_pages=200)
        service.record_progress(buyer.id, book.id, 20, 10.0, total_pages=350)

        db.refresh(book)
        assert book.page_count == 200

    def test_time_spent_is_logged(self, db, service, buyer, book):
        service.record_progress(buyer.id, book.id, 10, 5.0, time_spent=600)

        assert _history(db, buyer, book)[0].time_spent == 600

    def test_unknown_book(self, service, buyer):
        with pytest.raises(NotFoundError):
            service.record_progress(buyer.id, 404, 1, 1)

    def test_progress_is_per_user(self, service, buyer, other_buyer, book):
        service.record_progress(buyer.id, book.id, 50, 25.0)

        with pytest.raises(NotFoundError):
            service.get_progress(other_buyer.id, book.id)


class TestWritePolicy:
    def test_last_write_wins_ignores_version(self, service, buyer, book):
        service.record_progress(buyer.id, book.id, 10, 5.0)
        record = service.record_progress(buyer.id, book.id, 20, 10.0)

        assert record.version == 2

    def test_stale_expected_version_conflicts(self, service, buyer, book):
        service.record_progress(buyer.id, book.id, 10, 5.0)
        service.record_progress(buyer.id, book.id, 20, 10.0, expected_version=1)

        with pytest.raises(ConflictError):
            service.record_progress(buyer.id, book.id, 15, 7.5, expected_version=1)
        assert service.get_progress(buyer.id, book.id).current_page == 20

    def test_version_checked_requires_version(self, db, buyer, book):
        service = ProgressService(db, write_policy=VERSION_CHECKED)
        service.record_progress(buyer.id, book.id, 10, 5.0)

        with pytest.raises(ValidationError):
            service.record_progress(buyer.id, book.id, 20, 10.0)
        assert service.record_progress(buyer.id, book.id, 20, 10.0, expected_version=1).version == 2

    def test_unknown_policy(self, db):
        with pytest.raises(ValueError):
            ProgressService(db, write_policy="first_write_wins")


class TestProgressLifecycle:
    def test_reset_clears_history(self, db, service, buyer, book):
        service.record_progress(buyer.id, book.id, 40, 20.0)

        record = service.reset_progress(buyer.id, book.id)

        assert record.progress == 0.0
        assert record.current_page is None
        assert record.is_completed is False
        assert _history(db, buyer, book) == []

    def test_mark_completed(self, service, buyer, book):
        service.record_progress(buyer.id, book.id, 40, 20.0)

        record = service.mark_completed(buyer.id, book.id)

        assert record.progress == 100.0
        assert record.is_completed is True

    def test_list_and_summary(self, db, service, buyer, book):
        second = Book(title="Emma")
        third = Book(title="Ulysses")
        db.add_all([second, third])
        db.commit()
        service.record_progress(buyer.id, book.id, 40, 20.0)
        service.record_progress(buyer.id, second.id, 300, 99.0)
        service.record_progress(buyer.id, third.id, None, 0)

        in_progress, total = service.list_progress(buyer.id, "in-progress")
        completed, _ = service.list_progress(buyer.id, "completed")
        _, everything_total = service.list_progress(buyer.id)

        assert [r.book_id for r in in_progress] == [book.id]
        assert total == 1
        assert [r.book_id for r in completed] == [second.id]
        assert everything_total == 3
        assert service.reading_summary(buyer.id) == {
            "total_books": 3,
            "completed_books": 1,
            "in_progress_books": 2,
            "completion_rate": 33.33,
        }


class TestAggregates:
    def test_heatmap_buckets_by_day(self, db, service, buyer, book):
        _session(db, buyer, book, datetime(2026, 10, 11, 23, 0), 50)  # outside a 7 day window
        _session(db, buyer, book, datetime(2026, 10, 13, 8, 0), 10, 300)
        _session(db, buyer, book, datetime(2026, 10, 15, 9, 0), 2, 60)
        _session(db, buyer, book, datetime(2026, 10, 15, 21, 0), 3, 60)
        _session(db, buyer, book, datetime(2026, 10, 18, 7, 0), 1)

        heatmap = service.get_heatmap(buyer.id, book.id, days=7, now=NOW)

        assert [(d.date, d.pages_read, d.time_spent, d.level) for d in heatmap] == [
            (date(2026, 10, 13), 10, 300, 4),
            (date(2026, 10, 15), 5, 120, 2),
            (date(2026, 10, 18), 1, 0, 1),
        ]

    def test_heatmap_first_session_has_level_zero(self, db, service, buyer, book):
        _session(db, buyer, book, datetime(2026, 10, 18, 7, 0), 0)

        heatmap = service.get_heatmap(buyer.id, book.id, days=30, now=NOW)

        assert [(d.pages_read, d.level) for d in heatmap] == [(0, 0)]

    def test_pages_per_day(self, db, service, buyer, book):
        _session(db, buyer, book, datetime(2026, 10, 1, 8, 0), 4)
        _session(db, buyer, book, datetime(2026, 10, 1, 20, 0), 6)
        _session(db, buyer, book, datetime(2026, 10, 19, 6, 0), 12)

        data = service.get_pages_per_day(buyer.id, book.id, days=30, now=NOW)

        assert [(d.date, d.pages_read) for d in data] == [(date(2026, 10, 1), 10), (date(2026, 10, 19), 12)]

    def test_pages_per_week(self, db, service, buyer, book):
        _session(db, buyer, book, datetime(2026, 10, 12, 8, 0), 4)  # Monday
        _session(db, buyer, book, datetime(2026, 10, 17, 8, 0), 6)  # Saturday, same week
        _session(db, buyer, book, datetime(2026, 10, 18, 8, 0), 9)  # Sunday, next week
        _session(db, buyer, book, datetime(2026, 10, 19, 8, 0), 1)

        data = service.get_pages_per_week(buyer.id, book.id, weeks=4, now=NOW)

        assert [(d.date, d.pages_read) for d in data] == [(date(2026, 10, 11), 10), (date(2026, 10, 18), 10)]

    def test_stats(self, db, service, buyer, book):
        _session(db, buyer, book, datetime(2026, 9, 1, 8, 0), 20, 900)
        _session(db, buyer, book, datetime(2026, 10, 2, 8, 0), 15, 600)

        stats = service.get_stats(buyer.id, book.id)

        assert stats.total_sessions == 2
        assert stats.total_pages_read == 35
        assert stats.total_time_spent == 1500
        assert stats.first_read == datetime(2026, 9, 1, 8, 0)
        assert stats.last_read == datetime(2026, 10, 2, 8, 0)

    def test_stats_without_history(self, service, buyer, book):
        stats = service.get_stats(buyer.id, book.id)

        assert stats.total_sessions == 0
        assert stats.first_read is None
        assert stats.last_read is None

    def test_history_periods(self, db, service, buyer, book):
        _session(db, buyer, book, datetime(2026, 8, 1, 8, 0), 5)
        _session(db, buyer, book, datetime(2026, 10, 1, 8, 0), 5)
        _session(db, buyer, book, datetime(2026, 10, 18, 8, 0), 5)

        assert len(service.get_history(buyer.id, book.id, "all", now=NOW)) == 3
        assert len(service.get_history(buyer.id, book.id, "month", now=NOW)) == 2
        assert len(service.get_history(buyer.id, book.id, "week", now=NOW)) == 1
        with pytest.raises(ValidationError):
            service.get_history(buyer.id, book.id, "decade", now=NOW)
