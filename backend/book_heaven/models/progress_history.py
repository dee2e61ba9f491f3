from datetime import datetime
from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column
from book_heaven.models.base import Base


class ProgressHistory(Base):
    __tablename__ = "progress_history"
    __table_args__ = (Index("ix_progress_history_user_book_date", "user_id", "book_id", "session_date"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    book_id: Mapped[int] = mapped_column(ForeignKey("books.id"), index=True)
    current_page: Mapped[int | None] = mapped_column(Integer, nullable=True)
    progress: Mapped[float] = mapped_column(Float)
    pages_read: Mapped[int] = mapped_column(Integer, default=0)
    # seconds
    time_spent: Mapped[int] = mapped_column(Integer, default=0)
    session_date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
