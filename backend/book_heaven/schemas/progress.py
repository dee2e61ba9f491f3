from datetime import date, datetime
from pydantic import BaseModel, Field


class ProgressUpdate(BaseModel):
    book_id: int
    current_page: int | None = Field(default=None, ge=0)
    progress: float | None = None
    total_pages: int | None = Field(default=None, ge=1)
    time_spent: int = Field(default=0, ge=0)
    expected_version: int | None = Field(default=None, ge=0)


class ProgressOut(BaseModel):
    book_id: int
    current_page: int | None
    progress: float
    is_completed: bool
    last_read_at: datetime
    version: int

    class Config:
        from_attributes = True


class ReadingSummary(BaseModel):
    total_books: int
    completed_books: int
    in_progress_books: int
    completion_rate: float


class ProgressList(BaseModel):
    items: list[ProgressOut]
    total: int
    page: int
    limit: int
    summary: ReadingSummary


class ProgressHistoryOut(BaseModel):
    id: int
    book_id: int
    current_page: int | None
    progress: float
    pages_read: int
    time_spent: int
    session_date: datetime

    class Config:
        from_attributes = True


class HeatmapDayOut(BaseModel):
    date: date
    pages_read: int
    time_spent: int
    level: int

    class Config:
        from_attributes = True


class PagesReadOut(BaseModel):
    date: date
    pages_read: int

    class Config:
        from_attributes = True


class ReadingStatsOut(BaseModel):
    total_sessions: int
    total_pages_read: int
    total_time_spent: int
    first_read: datetime | None
    last_read: datetime | None

    class Config:
        from_attributes = True
