import logging
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException


logger = logging.getLogger(__name__)

class RecordValidationError(HTTPException):
    """A 400 carrying one message per violated field."""

    def __init__(self, details: list[str]) -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail="Validation Error")
        self.details = details

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "RecordValidationError":
        return cls(format_validation_errors(exc.errors()))


def format_validation_errors(errors: Any) -> list[str]:
    """Renders pydantic error entries as ``"<field path>: <message>"`` strings.

    The leading ``body``/``query``/``path`` location segment that FastAPI
    adds is dropped so that request and domain errors read the same.
    """
    messages = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc)
        msg = err.get("msg", "Invalid value")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        messages.append(f"{field}: {msg}" if field else msg)
    return messages


def error_envelope(
    status_code: int,
    error: str,
    details: Optional[list[str]] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    content: dict[str, Any] = {"success": False, "error": error}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    details = getattr(exc, "details", None)
    error = str(exc.detail)
    # Starlette raises a bare 404 when no route matches
    if exc.status_code == status.HTTP_404_NOT_FOUND and not isinstance(exc, HTTPException):
        error = "Route not found"
    return error_envelope(exc.status_code, error, details, getattr(exc, "headers", None))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_envelope(
        status.HTTP_400_BAD_REQUEST,
        "Validation Error",
        format_validation_errors(exc.errors()),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc!r}")
    return error_envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    """Maps every failure to the ``{success: false, error, details?}`` envelope."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
