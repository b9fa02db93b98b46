"""Domain failure taxonomy and its HTTP rendering."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, Mapping, Sequence

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request

from .core.context import REQUEST_ID_HEADER
from .schemas.system import ErrorResponse

logger = logging.getLogger(__name__)


class ApplicationError(Exception):
    """Base class for domain-specific errors."""

    default_message = "Application error."
    default_code = "application_error"
    default_status = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        status_code: int | None = None,
        details: Any | None = None,
    ) -> None:
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.status_code = status_code or self.default_status
        self.details = details


class NotFoundError(ApplicationError):
    """An entity id has no row."""

    default_message = "Resource not found."
    default_code = "not_found"
    default_status = status.HTTP_404_NOT_FOUND


class NotMemberError(ApplicationError):
    """The user/project pair has no membership."""

    default_message = "User is not a member of this project."
    default_code = "not_member"
    default_status = status.HTTP_404_NOT_FOUND


class NotLoggedInError(ApplicationError):
    """A project session logout was attempted without an active session."""

    default_message = "User is not logged in to this project."
    default_code = "not_logged_in"
    default_status = status.HTTP_409_CONFLICT


class ConflictError(ApplicationError):
    default_message = "Resource already exists."
    default_code = "conflict"
    default_status = status.HTTP_409_CONFLICT


class ForbiddenError(ApplicationError):
    default_message = "Not enough permissions."
    default_code = "forbidden"
    default_status = status.HTTP_403_FORBIDDEN


class UnauthorizedError(ApplicationError):
    default_message = "Could not validate credentials."
    default_code = "unauthorized"
    default_status = status.HTTP_401_UNAUTHORIZED


class ValidationError(ApplicationError):
    """Field constraints were violated; ``fields`` names every failing field."""

    default_message = "Validation failed."
    default_code = "validation_error"
    default_status = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(
        self,
        message: str | None = None,
        *,
        fields: Sequence[str] = (),
        errors: Mapping[str, str] | None = None,
    ) -> None:
        self.fields = list(fields)
        self.errors = dict(errors or {})
        super().__init__(message, details={"fields": self.fields, "errors": self.errors})


class DatabaseIntegrityError(ApplicationError):
    default_message = "Database integrity violation."
    default_code = "db_integrity_error"
    default_status = status.HTTP_409_CONFLICT


class ServerError(ApplicationError):
    default_message = "Internal server error."
    default_code = "server_error"
    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR


_HTTP_STATUS_CODE_MAP: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: "bad_request",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
    status.HTTP_409_CONFLICT: "conflict",
}


def _merge_details_with_request(request: Request, details: Any | None) -> Any | None:
    request_id = getattr(request.state, "request_id", None)
    if not request_id:
        return details
    if details is None:
        return {"request_id": request_id}
    if isinstance(details, dict):
        return {"request_id": request_id, **details}
    return {"request_id": request_id, "detail": details}


def _error_response(
    request: Request,
    *,
    status_code: int,
    code: str,
    message: str,
    details: Any | None = None,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    payload = ErrorResponse(
        code=code,
        message=message,
        details=_merge_details_with_request(request, details),
    )
    response = JSONResponse(status_code=status_code, content=payload.model_dump(mode="json"))
    if headers:
        response.headers.update(headers)
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        response.headers.setdefault(REQUEST_ID_HEADER, request_id)
    return response


def _http_exception_message(status_code: int, detail: Any) -> tuple[str, Any | None]:
    if isinstance(detail, str):
        return detail, None
    try:
        phrase = HTTPStatus(status_code).phrase
    except ValueError:
        phrase = "Error"
    return phrase, detail


def register_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with the provided FastAPI app."""

    @app.exception_handler(ApplicationError)
    async def _handle_application_error(request: Request, exc: ApplicationError) -> JSONResponse:
        log = logger.error if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR else logger.warning
        log(
            "Application error encountered",
            extra={"code": exc.code, "status_code": exc.status_code, "path": request.url.path},
        )
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
        return _error_response(
            request,
            status_code=exc.status_code,
            code=exc.code,
            message=exc.message,
            details=exc.details,
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def _handle_request_validation_error(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        errors = [
            {
                "loc": [str(part) for part in error.get("loc", ())],
                "msg": error.get("msg"),
                "type": error.get("type"),
            }
            for error in exc.errors()
        ]
        fields = sorted({error["loc"][-1] for error in errors if error["loc"]})
        logger.warning("Request validation failed", extra={"fields": fields})
        return _error_response(
            request,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            code="validation_error",
            message="Request validation failed.",
            details={"fields": fields, "errors": errors},
        )

    @app.exception_handler(IntegrityError)
    async def _handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
        logger.error("Database integrity error encountered.", exc_info=exc)
        error = DatabaseIntegrityError()
        return _error_response(
            request,
            status_code=error.status_code,
            code=error.code,
            message=error.message,
        )

    @app.exception_handler(StarletteHTTPException)
    async def _handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        code = _HTTP_STATUS_CODE_MAP.get(exc.status_code, "http_error")
        message, extra_details = _http_exception_message(exc.status_code, exc.detail)
        log = logger.error if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR else logger.warning
        log(
            "HTTP exception raised",
            extra={"code": code, "status_code": exc.status_code, "path": request.url.path},
        )
        return _error_response(
            request,
            status_code=exc.status_code,
            code=code,
            message=message,
            details=extra_details,
            headers=exc.headers or None,
        )

    @app.exception_handler(Exception)
    async def _handle_unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled application error.")
        error = ServerError()
        return _error_response(
            request,
            status_code=error.status_code,
            code=error.code,
            message=error.message,
        )


__all__ = [
    "ApplicationError",
    "ConflictError",
    "DatabaseIntegrityError",
    "ForbiddenError",
    "NotFoundError",
    "NotLoggedInError",
    "NotMemberError",
    "ServerError",
    "UnauthorizedError",
    "ValidationError",
    "register_exception_handlers",
]
