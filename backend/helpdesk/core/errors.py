# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Domain error kinds and their HTTP translation.

Services raise these; they never leak storage-specific error codes.  The
handlers registered by :func:`register_exception_handlers` turn them into
``{"message": ...}`` JSON bodies (plus ``errors`` for validation failures).
Anything else that escapes a route is logged with its traceback and answered
with a generic 500.
"""

from typing import List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from helpdesk.core.logger import logger


class HelpdeskError(Exception):
    """Base class – carries the HTTP status and a client-safe message."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def body(self) -> dict:
        return {"message": self.message}


class ValidationError(HelpdeskError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Validation error"

    def __init__(self, errors: List[dict], message: Optional[str] = None):
        super().__init__(message)
        self.errors = errors

    def body(self) -> dict:
        return {"message": self.message, "errors": self.errors}


class Unauthorized(HelpdeskError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Unauthorized"


class InvalidCredentials(HelpdeskError):
    status_code = status.HTTP_401_UNAUTHORIZED
    # Same text for "no such user" and "wrong password"
    message = "Invalid credentials"


class NotFound(HelpdeskError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class UnsupportedFileType(HelpdeskError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Unsupported file type"


class PayloadTooLarge(HelpdeskError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "File too large"


class RateLimited(HelpdeskError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    message = "Too many login attempts, please try again later"


class Internal(HelpdeskError):
    pass


def _format_validation_errors(exc: RequestValidationError) -> List[dict]:
    """One ``{path, message}`` entry per violating field, path joined by dots."""
    return [
        {
            "path": ".".join(str(part) for part in err.get("loc", ())),
            "message": err.get("msg", "Invalid value"),
        }
        for err in exc.errors()
    ]


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HelpdeskError)
    async def _helpdesk_error(request: Request, exc: HelpdeskError):
        return JSONResponse(status_code=exc.status_code, content=exc.body())

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError):
        err = ValidationError(_format_validation_errors(exc))
        return JSONResponse(status_code=err.status_code, content=err.body())

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        err = Internal()
        return JSONResponse(status_code=err.status_code, content=err.body())
