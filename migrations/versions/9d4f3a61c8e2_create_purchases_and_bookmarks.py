"""create purchases and bookmarks tables

Revision ID: 9d4f3a61c8e2
Revises: 5c1e0b7d2a10
Create Date: 2026-10-18 10:40:51.774102

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "9d4f3a61c8e2"
down_revision: Union[str, Sequence[str], None] = "5c1e0b7d2a10"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "purchases",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("book_id", sa.Integer(), sa.ForeignKey("books.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("user_id", "book_id", name="uq_purchases_user_book"),
    )
    op.create_index("ix_purchases_user_id", "purchases", ["user_id"], unique=False)
    op.create_index("ix_purchases_book_id", "purchases", ["book_id"], unique=False)

    op.create_table(
        "bookmarks",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("purchase_id", sa.Integer(), sa.ForeignKey("purchases.id", ondelete="CASCADE"), nullable=False),
        sa.Column("chapter_id", sa.Integer(), sa.ForeignKey("chapters.id", ondelete="CASCADE"), nullable=False),
        sa.Column("hash", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("text", sa.Text(), nullable=False, server_default=""),
        sa.UniqueConstraint("purchase_id", "chapter_id", name="uq_bookmarks_purchase_chapter"),
    )
    op.create_index("ix_bookmarks_purchase_id", "bookmarks", ["purchase_id"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_bookmarks_purchase_id", table_name="bookmarks")
    op.drop_table("bookmarks")
    op.drop_index("ix_purchases_book_id", table_name="purchases")
    op.drop_index("ix_purchases_user_id", table_name="purchases")
    op.drop_table("purchases")
