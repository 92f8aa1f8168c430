from collections.abc import Mapping, Sequence
from typing import Any, ClassVar
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
)
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.exc import IntegrityError

from bookkeep.core.logging import get_logger

VALIDATION_MESSAGE = "One or more validation errors occurred."


class BookKeepError(Exception):
    """Base for errors the API reports with a specific status and type."""

    status_code: ClassVar[int] = HTTP_400_BAD_REQUEST
    error_type: ClassVar[str] = "error"

    def __init__(self, message: str, payload: object | None = None):
        super().__init__(message)
        self.message: str = message
        self.payload: object | None = payload


class PayloadValidationError(BookKeepError):
    status_code = HTTP_400_BAD_REQUEST
    error_type = "validation_error"


class ConflictError(BookKeepError):
    status_code = HTTP_409_CONFLICT
    error_type = "conflict"


class NotFoundError(BookKeepError):
    status_code = HTTP_404_NOT_FOUND
    error_type = "not_found"


class ErrorResponse(BaseModel):
    """Uniform body of every non-2xx response."""
    message: str
    has_error: bool = Field(default=True, serialization_alias="hasError")
    type: str
    payload: object | None = None

    model_config: ClassVar[ConfigDict] = ConfigDict(populate_by_name=True)


def _error_response(
    status_code: int, message: str, error_type: str, payload: object | None = None
) -> JSONResponse:
    body = ErrorResponse(message=message, type=error_type, payload=payload)
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))


def _violations_from_request_errors(
    errors: Sequence[Mapping[str, Any]],
) -> list[dict[str, str]]:
    """
    Reshape pydantic request errors into the `{field, rule, message}` entries
    produced by the book rules.
    """
    violations: list[dict[str, str]] = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        # Drop the "body"/"path"/"query" prefix
        field = ".".join(loc[1:]) or ".".join(loc) or "request"
        violations.append(
            {
                "field": field,
                "rule": str(error.get("type", "invalid")),
                "message": str(error.get("msg", "Invalid value.")),
            }
        )
    return violations


def server_error_response() -> JSONResponse:
    return _error_response(
        HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error", "server_error"
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers."""

    @app.exception_handler(BookKeepError)
    async def bookkeep_error_handler(request: Request, exc: BookKeepError) -> JSONResponse:
        logger = get_logger(__name__, request)
        logger.info(
            "Request rejected",
            extra={"error_type": exc.error_type, "status_code": exc.status_code},
        )
        return _error_response(exc.status_code, exc.message, exc.error_type, exc.payload)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        logger = get_logger(__name__, request)
        logger.warning("HTTP error", extra={"status_code": exc.status_code})
        return _error_response(exc.status_code, str(exc.detail or "HTTP error"), "http_error")

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger = get_logger(__name__, request)
        logger.info("Validation error")
        return _error_response(
            HTTP_400_BAD_REQUEST,
            VALIDATION_MESSAGE,
            PayloadValidationError.error_type,
            {"errors": _violations_from_request_errors(exc.errors())},
        )

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
        logger = get_logger(__name__, request)
        # Driver text stays in the log
        logger.warning("Database integrity error", extra={"error": str(exc.orig or exc)})

        error_message = str(exc.orig or exc).lower()
        if "unique" in error_message:
            return _error_response(
                HTTP_409_CONFLICT, "Resource already exists", ConflictError.error_type
            )
        return _error_response(
            HTTP_400_BAD_REQUEST, "Data integrity violation", "integrity_error"
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger = get_logger(__name__, request)
        logger.exception("Unhandled server error", exc_info=exc)
        return server_error_response()
