# app/models/__init__.py
# Import every model so Base.metadata sees all tables (Alembic autogenerate, tests).
from app.models.user import User  # noqa: F401
from app.models.book import Book  # noqa: F401
from app.models.chapter import Chapter  # noqa: F401
from app.models.purchase import Bookmark, Purchase  # noqa: F401
