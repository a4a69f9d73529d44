# app/schemas.py
"""Read-only views returned by the record managers and the JSON routes."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class SectionView(BaseModel):
    text: str
    level: int
    escaped_text: str


class ChapterSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    slug: str
    order: int
    is_free: bool


class BookView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    github_repo: Optional[str] = None
    price: Optional[int] = None
    chapters: List[ChapterSummary] = []


class BookmarkView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    chapter_id: int
    hash: str
    text: str


class ChapterView(BaseModel):
    """
    Chapter as shown to one reader.

    `content` and `html_content` are None when the chapter is paid and the
    reader neither owns the book nor is an admin.
    """

    id: int
    book_id: int
    title: str
    slug: str
    order: int
    is_free: bool
    excerpt: str = ""
    content: Optional[str] = None
    html_content: Optional[str] = None
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    sections: List[SectionView] = []
    book: BookView
    is_purchased: bool = False
    bookmark: Optional[BookmarkView] = None
