import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from book_heaven.db.session import get_db
from book_heaven.models import Book
from book_heaven.schemas.book import BookCreate, BookOut

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/books", response_model=BookOut, status_code=201)
def create_book(payload: BookCreate, db: Session = Depends(get_db)):
    title = payload.title.strip()
    if not title:
        raise HTTPException(status_code=400, detail="Title cannot be empty")
    book = Book(title=title, author=payload.author, page_count=payload.page_count)
    db.add(book)
    db.commit()
    db.refresh(book)
    logger.info("Book created", extra={"book_id": book.id})
    return book


@router.get("/books", response_model=list[BookOut])
def list_books(db: Session = Depends(get_db)):
    return db.query(Book).order_by(Book.created_at.desc(), Book.id.desc()).all()


@router.get("/books/{book_id}", response_model=BookOut)
def get_book(book_id: int, db: Session = Depends(get_db)):
    book = db.get(Book, book_id)
    if not book:
        raise HTTPException(status_code=404, detail="Book not found")
    return book
