# app/core/errors.py
from typing import Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


class BookingError(Exception):
    """Base class for errors reported to the caller as a structured result."""

    status_code = 400

    def __init__(self, message: str, errors: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors


class ValidationError(BookingError):
    status_code = 400


class ConflictError(BookingError):
    status_code = 409


class AuthorizationError(BookingError):
    status_code = 403


class NotFoundError(BookingError):
    status_code = 404


def error_body(message: str, errors: Optional[Dict[str, str]] = None) -> dict:
    return {"success": False, "message": message, "errors": errors}


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(BookingError)
    async def booking_error_handler(request: Request, exc: BookingError):
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, exc.errors))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content=error_body(str(exc.detail)), headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = {}
        for err in exc.errors():
            # drop the "body"/"query" prefix so the key is the field name
            loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
            errors[".".join(loc) or "request"] = err.get("msg", "Invalid value")
        return JSONResponse(status_code=400, content=error_body("Invalid request", errors))
