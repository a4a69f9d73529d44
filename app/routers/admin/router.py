# app/routers/admin/router.py
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.content.github import GitHubClient
from app.db.session import get_db
from app.models.book import Book
from app.schemas import BookView
from app.utils.authz import require_admin

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


def get_github_client() -> GitHubClient:
    return GitHubClient()


class BookIn(BaseModel):
    name: str
    github_repo: Optional[str] = None
    price: Optional[int] = None


# --------------- Books --------------------
@router.post("/books", response_model=BookView, status_code=201)
def create_book(payload: BookIn, db: Session = Depends(get_db)):
    book = Book.add(db, name=payload.name, github_repo=payload.github_repo, price=payload.price)
    return BookView.model_validate(book)
# -----------------------------------------


# --------------- Sync ---------------------
@router.post("/books/{book_id}/sync")
def sync_book(
    book_id: int,
    db: Session = Depends(get_db),
    client: GitHubClient = Depends(get_github_client),
):
    synced = Book.sync_content(db, book_id=book_id, client=client)
    return {"ok": True, "book_id": book_id, "chapters": synced}
# -----------------------------------------
