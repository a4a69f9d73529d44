"""create books, users and chapters tables

Revision ID: 5c1e0b7d2a10
Revises:
Create Date: 2026-10-18 10:12:03.218411
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c1e0b7d2a10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "books",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("slug", sa.String(length=120), nullable=False),
        sa.Column("github_repo", sa.String(length=200), nullable=True),
        sa.Column("github_last_commit_sha", sa.String(length=64), nullable=True),
        sa.Column("price", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
    )
    op.create_index("ix_books_id", "books", ["id"], unique=False)
    op.create_index("ix_books_slug", "books", ["slug"], unique=True)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "chapters",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("book_id", sa.Integer(), sa.ForeignKey("books.id", ondelete="CASCADE"), nullable=False),
        sa.Column("is_free", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("github_file_path", sa.String(length=400), nullable=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("slug", sa.String(length=120), nullable=False),
        sa.Column("excerpt", sa.Text(), nullable=False, server_default=""),
        sa.Column("content", sa.Text(), nullable=False, server_default=""),
        sa.Column("html_content", sa.Text(), nullable=False, server_default=""),
        sa.Column("order", sa.Integer(), nullable=False),
        sa.Column("seo_title", sa.String(length=240), nullable=True),
        sa.Column("seo_description", sa.Text(), nullable=True),
        sa.Column("sections", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("book_id", "slug", name="uq_chapters_book_slug"),
        sa.UniqueConstraint("book_id", "github_file_path", name="uq_chapters_book_github_file_path"),
    )
    op.create_index("ix_chapters_id", "chapters", ["id"], unique=False)
    op.create_index("ix_chapters_book_id", "chapters", ["book_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_chapters_book_id", table_name="chapters")
    op.drop_index("ix_chapters_id", table_name="chapters")
    op.drop_table("chapters")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    op.drop_index("ix_books_slug", table_name="books")
    op.drop_index("ix_books_id", table_name="books")
    op.drop_table("books")
