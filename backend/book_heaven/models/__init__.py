from book_heaven.models.base import Base
from book_heaven.models.user import User
from book_heaven.models.book import Book
from book_heaven.models.sell_post import SellPost
from book_heaven.models.offer import Offer
from book_heaven.models.reading_progress import ReadingProgress
from book_heaven.models.progress_history import ProgressHistory
from book_heaven.models.notification import Notification

__all__ = [
    "Base",
    "User",
    "Book",
    "SellPost",
    "Offer",
    "ReadingProgress",
    "ProgressHistory",
    "Notification",
]
