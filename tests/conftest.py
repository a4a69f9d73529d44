"""Pytest fixtures: in-memory SQLite database and seeded records."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401  (registers every table on Base.metadata)
from app.content.front_matter import ChapterSource
from app.db.base import Base
from app.models.book import Book
from app.models.chapter import Chapter
from app.models.purchase import Purchase
from app.models.user import User


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def book(db) -> Book:
    return Book.add(db, name="Builder Book", github_repo="acme/builder-book", price=49)


@pytest.fixture
def user(db) -> User:
    u = User(email="reader@example.com", password_hash="x")
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


@pytest.fixture
def purchase(db, user, book) -> Purchase:
    p = Purchase(user_id=user.id, book_id=book.id)
    db.add(p)
    db.commit()
    db.refresh(p)
    return p


def sync(db, book, path, body="Body text.", **attributes) -> Chapter:
    """Run Chapter.sync_content for one file with the given front matter."""
    attributes.setdefault("title", "Untitled")
    return Chapter.sync_content(
        db, book=book, data=ChapterSource(path=path, body=body, attributes=attributes)
    )


@pytest.fixture
def free_chapter(db, book) -> Chapter:
    return sync(
        db,
        book,
        "introduction.md",
        body="## Welcome\n\nIntro text.",
        title="Introduction",
        isFree=True,
        excerpt="Start *here*.",
    )


@pytest.fixture
def paid_chapter(db, book) -> Chapter:
    return sync(
        db,
        book,
        "chapter-1.md",
        body="## Setup\n\nPaid text.\n\n## Deploy\n\nMore paid text.",
        title="Setting Up",
        excerpt="What you will build.",
    )
