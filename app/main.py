# app/main.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.gzip import GZipMiddleware
from starlette.middleware.sessions import SessionMiddleware

from app.content.github import ContentSourceError
from app.core.config import APP_NAME, LOG_JSON, LOG_LEVEL, SECRET_KEY
from app.core.logging import configure_logging, get_logger

# ---- DB + models ----
from app.db.session import SessionLocal
from app.errors import ChapterError
from app.models.user import User

# ---- Routers ----
from app.routers.admin import router as admin_router
from app.routers import books as books_router
from app.routers import chapters as chapters_router

configure_logging(LOG_LEVEL, json_logs=LOG_JSON)
logger = get_logger(__name__)

app = FastAPI(title=APP_NAME)

# =============================================================================
# Middleware
# =============================================================================

class UserAttachMiddleware(BaseHTTPMiddleware):
    """
    Attaches request.state.user = {'id', 'email'} if session has 'user_id'.
    MUST run *after* SessionMiddleware, so we add it to the stack *before*
    SessionMiddleware (making it the inner middleware).
    """
    async def dispatch(self, request: Request, call_next):
        request.state.user = None
        uid = request.session.get("user_id") if "session" in request.scope else None

        if uid:
            db = SessionLocal()
            try:
                row = db.query(User.id, User.email).filter(User.id == uid).first()
                if row:
                    request.state.user = {"id": row.id, "email": row.email}
            finally:
                db.close()

        return await call_next(request)

# Order matters:
# 1) Add UserAttach first (inner)
app.add_middleware(UserAttachMiddleware)
# 2) Then sessions (outer of user attach)
app.add_middleware(SessionMiddleware, secret_key=SECRET_KEY)
# 3) Then gzip etc.
app.add_middleware(GZipMiddleware, minimum_size=500)

# =============================================================================
# Error mapping
# =============================================================================

@app.exception_handler(ChapterError)
async def handle_chapter_error(request: Request, exc: ChapterError):
    return JSONResponse({"detail": exc.message}, status_code=exc.status_code)


@app.exception_handler(IntegrityError)
async def handle_integrity_error(request: Request, exc: IntegrityError):
    logger.warning("db.integrity_error", path=request.url.path, error=str(exc.orig))
    return JSONResponse({"detail": "Conflicts with an existing record"}, status_code=409)


@app.exception_handler(ContentSourceError)
async def handle_content_source_error(request: Request, exc: ContentSourceError):
    return JSONResponse({"detail": str(exc)}, status_code=502)


# =============================================================================
# Routes
# =============================================================================
app.include_router(books_router.router)     # /books/...
app.include_router(chapters_router.router)  # /books/{slug}/chapters/..., /chapters/...
app.include_router(admin_router)            # /admin/...
