"""Tests for the Chapter record manager: sync, reading and bookmarks."""

import pytest
from sqlalchemy.exc import IntegrityError

from app.content.front_matter import ChapterSource
from app.errors import NotFound, PermissionDenied, ValidationFailed
from app.models.book import Book
from app.models.chapter import Chapter, chapter_order
from app.models.purchase import Bookmark, Purchase
from tests.conftest import sync


@pytest.mark.parametrize(
    "path,expected",
    [
        ("introduction.md", 1),
        ("chapter-03.md", 4),
        ("1-basics.md", 2),
        ("part-2/chapter-7.md", 3),
    ],
)
def test_chapter_order(path, expected):
    assert chapter_order(path) == expected


def test_chapter_order_requires_number():
    with pytest.raises(ValidationFailed):
        chapter_order("conclusion.md")


class TestSyncContent:
    def test_creates_chapter(self, db, book):
        ch = sync(
            db,
            book,
            "chapter-2.md",
            body="## Routing &amp; Views\n\nSee [docs](https://example.com).",
            title="Routing and Views",
            excerpt="All about **routes**.",
            isFree=True,
            seoTitle="Routing",
            seoDescription="Routes explained",
        )
        assert ch.id is not None
        assert ch.book_id == book.id
        assert ch.github_file_path == "chapter-2.md"
        assert ch.slug == "routing-and-views"
        assert ch.order == 3
        assert ch.is_free is True
        assert ch.seo_title == "Routing"
        assert ch.seo_description == "Routes explained"
        assert ch.content.startswith("## Routing")
        assert 'class="section-anchor"' in ch.html_content
        assert 'target="_blank"' in ch.html_content
        assert "<strong>routes</strong>" in ch.excerpt
        assert ch.sections == [
            {"text": "Routing & Views", "level": 2, "escaped_text": "routing-views"}
        ]

    def test_defaults_for_missing_attributes(self, db, book):
        ch = sync(db, book, "chapter-1.md", title="Basics")
        assert ch.is_free is False
        assert ch.excerpt == ""
        assert ch.seo_title == ""
        assert ch.sections == []

    @pytest.mark.parametrize(
        "flag,expected",
        [("false", False), ("False", False), ("no", False), ("", False), ("true", True), (True, True), (0, False)],
    )
    def test_quoted_free_flag(self, db, book, flag, expected):
        ch = sync(db, book, "chapter-1.md", title="Basics", isFree=flag)
        assert ch.is_free is expected

    def test_repeated_sync_is_idempotent(self, db, book):
        first = sync(db, book, "chapter-1.md", body="## A\n\ntext", title="Basics")
        snapshot = (first.id, first.slug, first.html_content, first.sections, first.order)

        second = sync(db, book, "chapter-1.md", body="## A\n\ntext", title="Basics")

        assert (second.id, second.slug, second.html_content, second.sections, second.order) == snapshot
        assert db.query(Chapter).count() == 1

    def test_body_change_keeps_slug(self, db, book):
        first = sync(db, book, "chapter-1.md", body="old", title="Basics")
        second = sync(db, book, "chapter-1.md", body="## New\n\nnew", title="Basics")
        assert second.id == first.id
        assert second.slug == "basics"
        assert second.content == "## New\n\nnew"
        assert [s["escaped_text"] for s in second.sections] == ["new"]

    def test_title_change_regenerates_slug(self, db, book):
        first = sync(db, book, "chapter-1.md", title="Basics")
        second = sync(db, book, "chapter-1.md", title="The Basics")
        assert second.id == first.id
        assert second.title == "The Basics"
        assert second.slug == "the-basics"

    def test_slug_unique_within_book(self, db, book):
        a = sync(db, book, "chapter-1.md", title="Deploy")
        b = sync(db, book, "chapter-2.md", title="Deploy")
        assert (a.slug, b.slug) == ("deploy", "deploy-1")

    def test_same_slug_allowed_across_books(self, db, book):
        other = Book.add(db, name="Second Book")
        a = sync(db, book, "chapter-1.md", title="Deploy")
        b = sync(db, other, "chapter-1.md", title="Deploy")
        assert a.slug == b.slug == "deploy"

    def test_missing_title_fails(self, db, book):
        with pytest.raises(ValidationFailed):
            Chapter.sync_content(
                db,
                book=book,
                data=ChapterSource(path="chapter-1.md", body="text", attributes={}),
            )
        assert db.query(Chapter).count() == 0

    def test_missing_title_on_update_leaves_row_untouched(self, db, book):
        ch = sync(db, book, "chapter-1.md", body="original", title="Basics")
        with pytest.raises(ValidationFailed):
            sync(db, book, "chapter-1.md", body="changed", title=None)
        db.expire_all()
        stored = db.get(Chapter, ch.id)
        assert stored.title == "Basics"
        assert stored.content == "original"

    def test_duplicate_slug_in_book_is_rejected(self, db, book):
        sync(db, book, "chapter-1.md", title="Deploy")
        db.add(Chapter(book_id=book.id, title="Other", slug="deploy", order=9, github_file_path="x.md"))
        with pytest.raises(IntegrityError):
            db.commit()

    def test_duplicate_path_in_book_is_rejected(self, db, book):
        sync(db, book, "chapter-1.md", title="Deploy")
        db.add(Chapter(book_id=book.id, title="Other", slug="other", order=2, github_file_path="chapter-1.md"))
        with pytest.raises(IntegrityError):
            db.commit()


class TestGetBySlug:
    def test_unknown_book(self, db, free_chapter):
        with pytest.raises(NotFound):
            Chapter.get_by_slug(db, book_slug="nope", chapter_slug=free_chapter.slug)

    def test_unknown_chapter(self, db, book, free_chapter):
        with pytest.raises(NotFound):
            Chapter.get_by_slug(db, book_slug=book.slug, chapter_slug="nope")

    def test_free_chapter_is_readable_anonymously(self, db, book, free_chapter):
        view = Chapter.get_by_slug(db, book_slug=book.slug, chapter_slug="introduction")
        assert view.content == "## Welcome\n\nIntro text."
        assert view.html_content
        assert view.is_purchased is False
        assert view.bookmark is None
        assert view.book.slug == book.slug

    def test_paid_chapter_hides_content_from_anonymous(self, db, book, paid_chapter):
        view = Chapter.get_by_slug(db, book_slug=book.slug, chapter_slug=paid_chapter.slug)
        assert view.content is None
        assert view.html_content is None
        assert "What you will build." in view.excerpt
        assert [s.escaped_text for s in view.sections] == ["setup", "deploy"]

    def test_paid_chapter_hidden_without_purchase(self, db, book, user, paid_chapter):
        view = Chapter.get_by_slug(db, book_slug=book.slug, chapter_slug=paid_chapter.slug, user_id=user.id)
        assert view.is_purchased is False
        assert view.content is None

    def test_paid_chapter_visible_to_owner(self, db, book, user, purchase, paid_chapter):
        view = Chapter.get_by_slug(db, book_slug=book.slug, chapter_slug=paid_chapter.slug, user_id=user.id)
        assert view.is_purchased is True
        assert view.content == paid_chapter.content
        assert view.html_content == paid_chapter.html_content

    def test_admin_bypasses_purchase(self, db, book, user, paid_chapter):
        view = Chapter.get_by_slug(
            db, book_slug=book.slug, chapter_slug=paid_chapter.slug, user_id=user.id, is_admin=True
        )
        assert view.is_purchased is True
        assert view.content is not None

    def test_attaches_readers_bookmark(self, db, book, user, purchase, paid_chapter, free_chapter):
        Chapter.add_bookmark(db, chapter_id=free_chapter.id, hash="welcome", text="Intro", user_id=user.id)
        Chapter.add_bookmark(db, chapter_id=paid_chapter.id, hash="deploy", text="More paid", user_id=user.id)

        view = Chapter.get_by_slug(db, book_slug=book.slug, chapter_slug=paid_chapter.slug, user_id=user.id)
        assert view.bookmark is not None
        assert view.bookmark.chapter_id == paid_chapter.id
        assert view.bookmark.hash == "deploy"

    def test_book_view_lists_chapters_in_order(self, db, book, paid_chapter, free_chapter):
        view = Chapter.get_by_slug(db, book_slug=book.slug, chapter_slug=free_chapter.slug)
        assert [c.slug for c in view.book.chapters] == [free_chapter.slug, paid_chapter.slug]


class TestAddBookmark:
    def test_requires_user(self, db, free_chapter):
        with pytest.raises(ValidationFailed, match="User is required"):
            Chapter.add_bookmark(db, chapter_id=free_chapter.id, hash="h", text="t", user_id=None)

    def test_unknown_chapter(self, db, user):
        with pytest.raises(NotFound, match="Chapter not found"):
            Chapter.add_bookmark(db, chapter_id=999, hash="h", text="t", user_id=user.id)

    def test_requires_purchase(self, db, user, free_chapter):
        with pytest.raises(PermissionDenied, match="not bought"):
            Chapter.add_bookmark(db, chapter_id=free_chapter.id, hash="h", text="t", user_id=user.id)

    def test_adds_bookmark_to_purchase(self, db, user, purchase, paid_chapter):
        saved = Chapter.add_bookmark(db, chapter_id=paid_chapter.id, hash="setup", text="Paid", user_id=user.id)
        assert saved.id == purchase.id
        assert [(b.chapter_id, b.hash, b.text) for b in saved.bookmarks] == [
            (paid_chapter.id, "setup", "Paid")
        ]

    def test_replaces_existing_bookmark_for_chapter(self, db, user, purchase, paid_chapter, free_chapter):
        Chapter.add_bookmark(db, chapter_id=free_chapter.id, hash="welcome", text="a", user_id=user.id)
        Chapter.add_bookmark(db, chapter_id=paid_chapter.id, hash="setup", text="b", user_id=user.id)
        Chapter.add_bookmark(db, chapter_id=paid_chapter.id, hash="deploy", text="c", user_id=user.id)

        p = db.get(Purchase, purchase.id)
        by_chapter = {b.chapter_id: b.hash for b in p.bookmarks}
        assert by_chapter == {free_chapter.id: "welcome", paid_chapter.id: "deploy"}
        assert db.query(Bookmark).filter(Bookmark.chapter_id == paid_chapter.id).count() == 1
