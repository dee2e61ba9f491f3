from datetime import datetime
from pydantic import BaseModel, Field


class BookCreate(BaseModel):
    title: str
    author: str | None = None
    page_count: int | None = Field(default=None, ge=1)


class BookOut(BaseModel):
    id: int
    title: str
    author: str | None
    page_count: int | None
    created_at: datetime

    class Config:
        from_attributes = True
