# app/routers/books.py
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.errors import NotFound
from app.models.book import Book
from app.schemas import BookView
from app.utils.authz import get_current_user

router = APIRouter(prefix="/books", tags=["books"])


@router.get("", response_model=List[BookView])
def list_books(db: Session = Depends(get_db)):
    return [BookView.model_validate(b) for b in Book.list(db)]


@router.get("/{book_slug}", response_model=BookView)
def show_book(book_slug: str, db: Session = Depends(get_db), user: Optional[dict] = Depends(get_current_user)):
    book = Book.get_by_slug(db, slug=book_slug, user_id=(user or {}).get("id"))
    if not book:
        raise NotFound("Book not found")
    return book
