# app/utils/slugify.py
import re
import unicodedata

from sqlalchemy.orm import Session

_slug_strip_re = re.compile(r"[^\w\s-]")
_slug_hyphenate_re = re.compile(r"[-\s]+")


def slugify(value: str) -> str:
    if not value:
        return ""
    value = (
        unicodedata.normalize("NFKD", value)
        .encode("ascii", "ignore")
        .decode("ascii")
    )
    value = _slug_strip_re.sub("", value).strip().lower()
    return _slug_hyphenate_re.sub("-", value).strip("-")


def _slug_taken(db: Session, model, slug: str, filters: dict) -> bool:
    q = db.query(model.id).filter(model.slug == slug)
    for key, val in filters.items():
        q = q.filter(getattr(model, key) == val)
    return q.first() is not None


def generate_slug(db: Session, model, name: str, **filters) -> str:
    """
    Slug for `name` that no row of `model` matching `filters` already uses.
    Collisions get a numeric suffix: "intro", "intro-1", "intro-2", ...
    """
    orig = slugify(name) or "untitled"
    if not _slug_taken(db, model, orig, filters):
        return orig

    count = 1
    while _slug_taken(db, model, f"{orig}-{count}", filters):
        count += 1
    return f"{orig}-{count}"
