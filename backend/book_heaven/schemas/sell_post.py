from datetime import datetime
from pydantic import BaseModel, Field
from book_heaven.models.enums import BookCondition, SellPostStatus


class SellPostCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    price: float = Field(gt=0)
    negotiable: bool = True
    condition: BookCondition
    city: str | None = None
    book_id: int | None = None
    expires_at: datetime | None = None


class SellPostUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    price: float | None = Field(default=None, gt=0)
    negotiable: bool | None = None
    condition: BookCondition | None = None
    city: str | None = None
    status: SellPostStatus | None = None
    expires_at: datetime | None = None


class SellPostOut(BaseModel):
    id: int
    seller_id: int
    book_id: int | None
    title: str
    description: str | None
    price: float
    negotiable: bool
    condition: BookCondition
    city: str | None
    status: SellPostStatus
    expires_at: datetime | None
    sold_at: datetime | None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class SellPostPage(BaseModel):
    items: list[SellPostOut]
    total: int
    page: int
    limit: int
