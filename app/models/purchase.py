# app/models/purchase.py
from __future__ import annotations

import datetime as dt
from typing import List, Optional

import sqlalchemy as sa
from sqlalchemy import orm

from app.db.base import Base


def _now_utc() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class Purchase(Base):
    """
    Proof that a user owns a book. Created by the payment flow; this
    service only reads it and stores the owner's bookmarks on it.
    """

    __tablename__ = "purchases"

    id: orm.Mapped[int] = orm.mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    user_id: orm.Mapped[int] = orm.mapped_column(
        sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    book_id: orm.Mapped[int] = orm.mapped_column(
        sa.Integer, sa.ForeignKey("books.id", ondelete="CASCADE"), index=True, nullable=False
    )
    created_at: orm.Mapped[dt.datetime] = orm.mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_now_utc, server_default=sa.func.now()
    )

    user = orm.relationship("User", back_populates="purchases")
    bookmarks: orm.Mapped[List["Bookmark"]] = orm.relationship(
        "Bookmark",
        back_populates="purchase",
        cascade="all, delete-orphan",
        order_by="Bookmark.id",
    )

    __table_args__ = (
        sa.UniqueConstraint("user_id", "book_id", name="uq_purchases_user_book"),
    )

    @classmethod
    def find_for(cls, db: orm.Session, *, user_id: int, book_id: int) -> Optional["Purchase"]:
        return db.query(cls).filter(cls.user_id == user_id, cls.book_id == book_id).first()

    def bookmark_for(self, chapter_id: int) -> Optional["Bookmark"]:
        for b in self.bookmarks:
            if b.chapter_id == chapter_id:
                return b
        return None

    def __repr__(self) -> str:
        return f"<Purchase id={self.id} user_id={self.user_id} book_id={self.book_id}>"


class Bookmark(Base):
    """Saved reading position inside a chapter; one per chapter per purchase."""

    __tablename__ = "bookmarks"

    id: orm.Mapped[int] = orm.mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    purchase_id: orm.Mapped[int] = orm.mapped_column(
        sa.Integer, sa.ForeignKey("purchases.id", ondelete="CASCADE"), index=True, nullable=False
    )
    chapter_id: orm.Mapped[int] = orm.mapped_column(
        sa.Integer, sa.ForeignKey("chapters.id", ondelete="CASCADE"), nullable=False
    )
    # hash = anchor of the section the reader stopped at, text = excerpt shown in the UI
    hash: orm.Mapped[str] = orm.mapped_column(sa.String(255), nullable=False, default="")
    text: orm.Mapped[str] = orm.mapped_column(sa.Text, nullable=False, default="")

    purchase: orm.Mapped[Purchase] = orm.relationship("Purchase", back_populates="bookmarks")

    __table_args__ = (
        sa.UniqueConstraint("purchase_id", "chapter_id", name="uq_bookmarks_purchase_chapter"),
    )
