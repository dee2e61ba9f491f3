from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from book_heaven.api.deps import get_current_user
from book_heaven.db.session import get_db
from book_heaven.models import User
from book_heaven.schemas.user import UserCreate, UserOut

router = APIRouter()


@router.post("/users", response_model=UserOut, status_code=201)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    email = payload.email.strip().lower()
    if not email or "@" not in email:
        raise HTTPException(status_code=400, detail="A valid email is required")
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=409, detail="Email already registered")
    user = User(name=payload.name.strip(), email=email, role=payload.role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@router.get("/users/me", response_model=UserOut)
def get_me(user: User = Depends(get_current_user)):
    return user
