# app/routers/chapters.py
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.models.chapter import Chapter
from app.schemas import BookmarkView, ChapterView
from app.utils.authz import get_current_user, is_admin, require_user

router = APIRouter(tags=["chapters"])


class BookmarkIn(BaseModel):
    hash: str
    text: str = ""


@router.get("/books/{book_slug}/chapters/{chapter_slug}", response_model=ChapterView)
def show_chapter(
    book_slug: str,
    chapter_slug: str,
    db: Session = Depends(get_db),
    user: Optional[dict] = Depends(get_current_user),
):
    # Paid chapters come back without content unless the reader owns the book.
    return Chapter.get_by_slug(
        db,
        book_slug=book_slug,
        chapter_slug=chapter_slug,
        user_id=(user or {}).get("id"),
        is_admin=is_admin(user),
    )


@router.post("/chapters/{chapter_id}/bookmark", response_model=List[BookmarkView])
def add_bookmark(
    chapter_id: int,
    payload: BookmarkIn,
    db: Session = Depends(get_db),
    user: dict = Depends(require_user),
):
    purchase = Chapter.add_bookmark(
        db,
        chapter_id=chapter_id,
        hash=payload.hash,
        text=payload.text,
        user_id=user["id"],
    )
    return [BookmarkView.model_validate(b) for b in purchase.bookmarks]
