from datetime import datetime
from pydantic import BaseModel
from book_heaven.models.enums import NotificationType


class NotificationOut(BaseModel):
    id: int
    type: NotificationType
    title: str
    message: str
    link_url: str | None
    is_read: bool
    read_at: datetime | None
    created_at: datetime

    class Config:
        from_attributes = True
