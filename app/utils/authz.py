# app/utils/authz.py
from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request

from app.core.config import ADMIN_EMAIL


def get_current_user(request: Request) -> Optional[dict]:
    """{'id', 'email'} attached by UserAttachMiddleware, or None for anonymous readers."""
    return getattr(request.state, "user", None)


def is_admin(user: Optional[dict]) -> bool:
    if not user:
        return False
    return (user.get("email") or "").strip().lower() == ADMIN_EMAIL


def require_user(user: Optional[dict] = Depends(get_current_user)) -> dict:
    if not user:
        raise HTTPException(status_code=401, detail="Login required")
    return user


def require_admin(user: dict = Depends(require_user)) -> dict:
    """
    - If not logged in: 401
    - If logged in but not the admin email: 403
    """
    if not is_admin(user):
        raise HTTPException(status_code=403, detail="Forbidden")
    return user
