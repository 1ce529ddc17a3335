"""
Application error taxonomy.

Every error carries the HTTP status it maps to and a caller-safe message.
Handlers registered in ``langschool.main`` render them as ``{"message": ...}``.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class LanguageSchoolError(Exception):
    status_code = 500
    message = "server error"

    def __init__(self, message: str = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class Unauthenticated(LanguageSchoolError):
    """Missing, malformed, expired or otherwise rejected bearer credential."""

    status_code = 401
    message = "unauthorized access"


class Forbidden(LanguageSchoolError):
    status_code = 403
    message = "forbidden access"


class NotFound(LanguageSchoolError):
    status_code = 404
    message = "not found"


class StoreError(LanguageSchoolError):
    """Underlying persistence failure. Detail is logged, never returned."""

    status_code = 500
    message = "server error"


async def _handle_app_error(request: Request, exc: LanguageSchoolError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LanguageSchoolError, _handle_app_error)
