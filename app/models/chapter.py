# app/models/chapter.py
import re
from typing import Optional

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, JSON, String, Text, UniqueConstraint, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, relationship, validates

from app.content.front_matter import ChapterSource
from app.core.logging import get_logger
from app.db.base import Base
from app.errors import NotFound, PermissionDenied, ValidationFailed
from app.models.book import Book
from app.models.purchase import Bookmark, Purchase
from app.schemas import BookmarkView, ChapterView
from app.utils.markdown import get_sections, markdown_to_html, render_excerpt
from app.utils.slugify import generate_slug

logger = get_logger(__name__)

INTRODUCTION_PATH = "introduction.md"
_first_int_re = re.compile(r"[0-9]+")
_FALSE_STRINGS = {"", "false", "0", "no", "off"}


def chapter_order(path: str) -> int:
    """introduction.md is chapter 1; 'chapter-03.md' is 4 (first number + 1)."""
    if path == INTRODUCTION_PATH:
        return 1
    m = _first_int_re.search(path or "")
    if not m:
        raise ValidationFailed(f"Cannot derive chapter order from path '{path}'")
    return int(m.group(0)) + 1


def _as_bool(value) -> bool:
    # front matter may quote booleans: isFree: "false"
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)


class Chapter(Base):
    __tablename__ = "chapters"

    id = Column(Integer, primary_key=True, index=True)
    book_id = Column(Integer, ForeignKey("books.id", ondelete="CASCADE"), nullable=False, index=True)

    is_free = Column(Boolean, nullable=False, default=False)
    github_file_path = Column(String(400), nullable=True)

    title = Column(String(200), nullable=False)
    slug = Column(String(120), nullable=False)
    excerpt = Column(Text, nullable=False, default="")

    # raw Markdown as synced, and its rendered HTML
    content = Column(Text, nullable=False, default="")
    html_content = Column(Text, nullable=False, default="")

    order = Column(Integer, nullable=False)
    seo_title = Column(String(240), nullable=True)
    seo_description = Column(Text, nullable=True)

    # [{"text", "level", "escaped_text"}, ...] for each level-2 heading
    sections = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    book = relationship("Book", back_populates="chapters")

    __table_args__ = (
        UniqueConstraint("book_id", "slug", name="uq_chapters_book_slug"),
        UniqueConstraint("book_id", "github_file_path", name="uq_chapters_book_github_file_path"),
    )

    @validates("title")
    def _validate_title(self, key, value):
        if not value or not str(value).strip():
            raise ValidationFailed("Chapter title is required")
        return value

    @validates("order")
    def _validate_order(self, key, value):
        if value is None:
            raise ValidationFailed("Chapter order is required")
        return value

    # ---------- Sync from content source ----------

    @classmethod
    def sync_content(cls, db: Session, *, book: Book, data: ChapterSource) -> "Chapter":
        attrs = data.attributes or {}
        title = attrs.get("title")
        excerpt = attrs.get("excerpt") or ""
        is_free = _as_bool(attrs.get("isFree", False))
        seo_title = attrs.get("seoTitle") or ""
        seo_description = attrs.get("seoDescription") or ""

        path = data.path
        order = chapter_order(path)

        content = data.body
        html_content = markdown_to_html(content)
        sections = [s.to_dict() for s in get_sections(content)]

        chapter = (
            db.query(cls)
            .filter(cls.book_id == book.id, cls.github_file_path == path)
            .first()
        )

        try:
            if not chapter:
                chapter = cls(
                    book_id=book.id,
                    github_file_path=path,
                    title=title,
                    slug=generate_slug(db, cls, title or "", book_id=book.id),
                    is_free=is_free,
                    content=content,
                    html_content=html_content,
                    sections=sections,
                    excerpt=render_excerpt(excerpt),
                    order=order,
                    seo_title=seo_title,
                    seo_description=seo_description,
                )
                db.add(chapter)
                event = "chapter.created"
            else:
                chapter.content = content
                chapter.html_content = html_content
                chapter.sections = sections
                chapter.excerpt = render_excerpt(excerpt)
                chapter.is_free = is_free
                chapter.order = order
                chapter.seo_title = seo_title
                chapter.seo_description = seo_description

                if title != chapter.title:
                    chapter.title = title
                    chapter.slug = generate_slug(db, cls, title, book_id=chapter.book_id)
                event = "chapter.updated"

            db.commit()
        except (IntegrityError, ValidationFailed):
            db.rollback()
            raise
        db.refresh(chapter)
        logger.info(event, chapter_id=chapter.id, book_id=book.id, path=path, slug=chapter.slug)
        return chapter

    # ---------- Reading ----------

    @classmethod
    def get_by_slug(
        cls,
        db: Session,
        *,
        book_slug: str,
        chapter_slug: str,
        user_id: Optional[int] = None,
        is_admin: bool = False,
    ) -> ChapterView:
        book = Book.get_by_slug(db, slug=book_slug, user_id=user_id)
        if not book:
            raise NotFound("Not found")

        chapter = db.query(cls).filter(cls.book_id == book.id, cls.slug == chapter_slug).first()
        if not chapter:
            raise NotFound("Not found")

        is_purchased = False
        bookmark = None
        if user_id:
            purchase = Purchase.find_for(db, user_id=user_id, book_id=book.id)
            is_purchased = bool(purchase) or bool(is_admin)
            if purchase:
                found = purchase.bookmark_for(chapter.id)
                if found:
                    bookmark = BookmarkView.model_validate(found)

        can_read = chapter.is_free or is_purchased

        return ChapterView(
            id=chapter.id,
            book_id=chapter.book_id,
            title=chapter.title,
            slug=chapter.slug,
            order=chapter.order,
            is_free=chapter.is_free,
            excerpt=chapter.excerpt or "",
            content=chapter.content if can_read else None,
            html_content=chapter.html_content if can_read else None,
            seo_title=chapter.seo_title,
            seo_description=chapter.seo_description,
            sections=chapter.sections or [],
            book=book,
            is_purchased=is_purchased,
            bookmark=bookmark,
        )

    # ---------- Bookmarks ----------

    @classmethod
    def add_bookmark(
        cls,
        db: Session,
        *,
        chapter_id: int,
        hash: str,
        text: str,
        user_id: Optional[int],
    ) -> Purchase:
        if not user_id:
            raise ValidationFailed("User is required")

        chapter = db.get(cls, chapter_id)
        if not chapter:
            raise NotFound("Chapter not found")

        book = db.get(Book, chapter.book_id)
        if not book:
            raise NotFound("Book not found")

        purchase = Purchase.find_for(db, user_id=user_id, book_id=book.id)
        if not purchase:
            raise PermissionDenied("You have not bought this book.")

        replaced = [b for b in purchase.bookmarks if b.chapter_id == chapter.id]
        for b in replaced:
            purchase.bookmarks.remove(b)
        if replaced:
            # delete before insert: (purchase_id, chapter_id) is unique
            db.flush()

        purchase.bookmarks.append(Bookmark(chapter_id=chapter.id, hash=hash or "", text=text or ""))
        db.commit()
        db.refresh(purchase)
        logger.info(
            "bookmark.saved",
            purchase_id=purchase.id,
            chapter_id=chapter.id,
            replaced=len(replaced),
        )
        return purchase
