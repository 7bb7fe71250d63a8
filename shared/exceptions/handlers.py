from datetime import datetime, timezone
from http import HTTPStatus

import structlog
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import DomainError

logger = structlog.get_logger(__name__)


class ErrorResponse(BaseModel):
    timestamp: datetime
    status: int
    error: str
    message: str


class FormErrorResponse(ErrorResponse):
    errors: dict[str, str]


def _render(payload: ErrorResponse, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=payload.status,
        content=jsonable_encoder(payload),
        headers=headers,
    )


def _now() -> datetime:
    return datetime.now(timezone.utc)


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    logger.info(
        "domain_error",
        path=request.url.path,
        error=type(exc).__name__,
        status=exc.status_code,
        **exc.context,
    )
    return _render(ErrorResponse(
        timestamp=_now(),
        status=exc.status_code,
        error=exc.error,
        message=exc.message,
    ))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _render(
        ErrorResponse(
            timestamp=_now(),
            status=exc.status_code,
            error=HTTPStatus(exc.status_code).phrase,
            message=str(exc.detail),
        ),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors: dict[str, str] = {}
    for error in exc.errors():
        # Drop the leading "body"/"query" segment: ("body", "items", 0, "quantity") -> "items.0.quantity"
        loc = [str(part) for part in error.get("loc", ())[1:]] or ["request"]
        errors[".".join(loc)] = error.get("msg", "Invalid value")

    return _render(FormErrorResponse(
        timestamp=_now(),
        status=status.HTTP_400_BAD_REQUEST,
        error="Validation Failed",
        message="Some fields are invalid",
        errors=errors,
    ))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", path=request.url.path, error=type(exc).__name__)
    return _render(ErrorResponse(
        timestamp=_now(),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        error="Internal Server Error",
        message="An unexpected error occurred",
    ))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
