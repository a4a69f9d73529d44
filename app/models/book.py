# app/models/book.py
from typing import List, Optional

from sqlalchemy import Column, Integer, String, DateTime, func
from sqlalchemy.orm import Session, relationship

from app.core.logging import get_logger
from app.db.base import Base
from app.errors import NotFound
from app.schemas import BookView
from app.utils.slugify import generate_slug

logger = get_logger(__name__)


class Book(Base):
    __tablename__ = "books"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    slug = Column(String(120), unique=True, index=True, nullable=False)

    # "owner/repo" holding one Markdown file per chapter
    github_repo = Column(String(200), nullable=True)
    github_last_commit_sha = Column(String(64), nullable=True)

    price = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    chapters = relationship("Chapter", back_populates="book", order_by="Chapter.order")

    @classmethod
    def add(cls, db: Session, *, name: str, github_repo: Optional[str] = None, price: Optional[int] = None) -> "Book":
        book = cls(
            name=name.strip(),
            slug=generate_slug(db, cls, name),
            github_repo=github_repo,
            price=price,
        )
        db.add(book)
        db.commit()
        db.refresh(book)
        logger.info("book.created", book_id=book.id, slug=book.slug)
        return book

    @classmethod
    def list(cls, db: Session) -> List["Book"]:
        return db.query(cls).order_by(cls.created_at.desc(), cls.id.desc()).all()

    @classmethod
    def get_by_slug(cls, db: Session, *, slug: str, user_id: Optional[int] = None) -> Optional[BookView]:
        """
        Book with its table of contents, or None.

        `user_id` is accepted for callers that pass the reader along; every
        reader sees the same book data.
        """
        book = db.query(cls).filter(cls.slug == slug).first()
        if not book:
            return None
        return BookView.model_validate(book)

    @classmethod
    def sync_content(cls, db: Session, *, book_id: int, client) -> List[str]:
        """
        Pull every chapter file of the book's GitHub repo and upsert it.
        Returns the synced file paths.
        """
        from app.content.front_matter import parse_chapter_file
        from app.models.chapter import Chapter

        book = db.get(cls, book_id)
        if not book:
            raise NotFound("Book not found")
        if not book.github_repo:
            raise NotFound("Book has no GitHub repository")

        log = logger.bind(book_id=book.id, repo=book.github_repo)
        synced = []
        for path in client.list_markdown_files(book.github_repo):
            try:
                text = client.get_file(book.github_repo, path)
                Chapter.sync_content(db, book=book, data=parse_chapter_file(path, text))
            except Exception:
                log.exception("book.sync_failed", path=path)
                raise
            synced.append(path)

        book.github_last_commit_sha = client.latest_commit_sha(book.github_repo)
        db.commit()
        log.info("book.synced", chapters=len(synced), sha=book.github_last_commit_sha)
        return synced
