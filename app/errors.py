# app/errors.py
"""
Domain errors raised by the record managers in app.models.

Request handlers map them onto HTTP responses (see app/main.py);
database errors such as IntegrityError are not wrapped and reach the
caller unchanged.
"""


class ChapterError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(ChapterError):
    status_code = 404


class ValidationFailed(ChapterError):
    status_code = 422


class PermissionDenied(ChapterError):
    status_code = 403
