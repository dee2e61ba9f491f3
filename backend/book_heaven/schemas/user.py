from datetime import datetime
from pydantic import BaseModel
from book_heaven.models.enums import UserRole


class UserCreate(BaseModel):
    name: str
    email: str
    role: UserRole = UserRole.USER


class UserOut(BaseModel):
    id: int
    name: str
    email: str
    role: UserRole
    created_at: datetime

    class Config:
        from_attributes = True
