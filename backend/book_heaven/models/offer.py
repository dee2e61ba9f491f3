from datetime import datetime
from sqlalchemy import DateTime, Enum, Float, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from book_heaven.models.base import Base
from book_heaven.models.enums import OfferStatus, OfferTurn


class Offer(Base):
    __tablename__ = "offers"

    id: Mapped[int] = mapped_column(primary_key=True)
    sell_post_id: Mapped[int] = mapped_column(ForeignKey("sell_posts.id"), index=True)
    buyer_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    offered_price: Mapped[float] = mapped_column(Float)
    counter_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    agreed_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    response_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[OfferStatus] = mapped_column(
        Enum(OfferStatus, native_enum=False, length=16), default=OfferStatus.PENDING, index=True
    )
    turn: Mapped[OfferTurn] = mapped_column(Enum(OfferTurn, native_enum=False, length=16), default=OfferTurn.SELLER)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    responded_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    sell_post = relationship("SellPost", back_populates="offers")
    buyer = relationship("User", back_populates="offers")

    @property
    def seller_id(self) -> int:
        return self.sell_post.seller_id
