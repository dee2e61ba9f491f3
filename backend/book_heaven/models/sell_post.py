from datetime import datetime
from sqlalchemy import Boolean, DateTime, Enum, Float, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from book_heaven.models.base import Base
from book_heaven.models.enums import BookCondition, SellPostStatus


class SellPost(Base):
    __tablename__ = "sell_posts"

    id: Mapped[int] = mapped_column(primary_key=True)
    seller_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    book_id: Mapped[int | None] = mapped_column(ForeignKey("books.id"), nullable=True, index=True)
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[float] = mapped_column(Float)
    negotiable: Mapped[bool] = mapped_column(Boolean, default=True)
    condition: Mapped[BookCondition] = mapped_column(Enum(BookCondition, native_enum=False, length=16))
    city: Mapped[str | None] = mapped_column(String(128), nullable=True)
    status: Mapped[SellPostStatus] = mapped_column(
        Enum(SellPostStatus, native_enum=False, length=16), default=SellPostStatus.AVAILABLE, index=True
    )
    expires_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    sold_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    seller = relationship("User", back_populates="sell_posts")
    book = relationship("Book", back_populates="sell_posts")
    offers = relationship("Offer", back_populates="sell_post", cascade="all, delete-orphan")
