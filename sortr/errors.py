"""HTTP error taxonomy shared by services and routers.

Each class is an ``HTTPException`` so services can raise them exactly where a
plain ``HTTPException`` would be raised; ``register_exception_handlers`` adds
the envelopes that need more than ``{"detail": ...}``.
"""
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)


class Unauthenticated(HTTPException):
    def __init__(self, detail: str = "Authentication required"):
        super().__init__(status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"})


class InvalidToken(Unauthenticated):
    def __init__(self, detail: str = "Invalid or expired token"):
        super().__init__(detail)


class Forbidden(HTTPException):
    def __init__(self, detail: str = "Not authorized"):
        super().__init__(status_code=403, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=404, detail=detail)


class Conflict(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=409, detail=detail)


class ValidationFailed(HTTPException):
    def __init__(self, errors: list[dict], detail: str = "Validation failed"):
        super().__init__(status_code=400, detail=detail)
        self.errors = errors

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationFailed":
        return cls([{"field": field, "message": message}])


class TooManyRequests(HTTPException):
    def __init__(self, retry_after: int, detail: str = "Too many authentication attempts, please try again later"):
        super().__init__(status_code=429, detail=detail, headers={"Retry-After": str(retry_after)})
        self.retry_after = retry_after


def _field_name(loc: tuple) -> str:
    # ("body", "boxId") -> "boxId"; ("query", "size") -> "size"
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "header")]
    return ".".join(parts) or "body"


def _validation_response(errors: list[dict], detail: str = "Validation failed") -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": detail, "errors": errors})


async def validation_failed_handler(request: Request, exc: ValidationFailed) -> JSONResponse:
    return _validation_response(exc.errors, exc.detail)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [{"field": _field_name(tuple(e["loc"])), "message": e["msg"]} for e in exc.errors()]
    return _validation_response(errors)


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(status_code=409, content={"detail": "Duplicate entry or invalid reference"})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationFailed, validation_failed_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
