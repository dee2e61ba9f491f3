from datetime import datetime
from pydantic import BaseModel, Field
from book_heaven.models.enums import OfferStatus, OfferTurn
from book_heaven.services.offers import OfferAction


class OfferCreate(BaseModel):
    offered_price: float = Field(gt=0)
    message: str | None = None


class OfferRespond(BaseModel):
    action: OfferAction
    counter_price: float | None = Field(default=None, gt=0)
    response_message: str | None = None


class OfferOut(BaseModel):
    id: int
    sell_post_id: int
    buyer_id: int
    seller_id: int
    offered_price: float
    counter_price: float | None
    agreed_price: float | None
    message: str | None
    response_message: str | None
    status: OfferStatus
    turn: OfferTurn
    created_at: datetime
    responded_at: datetime | None

    class Config:
        from_attributes = True


class OfferStats(BaseModel):
    total: int
    pending: int
    accepted: int
    rejected: int
    countered: int
    withdrawn: int
