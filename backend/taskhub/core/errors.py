import logging
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from taskhub.db.models import TaskStatus


logger = logging.getLogger(__name__)


class TaskHubError(Exception):
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(TaskHubError):
    status_code = HTTPStatus.NOT_FOUND

    def __init__(self, resource: str, field: str, value: Any) -> None:
        super().__init__(f"{resource} not found with {field}: {value}")
        self.resource = resource
        self.field = field
        self.value = value


class AccessDeniedError(TaskHubError):
    status_code = HTTPStatus.FORBIDDEN


class ValidationError(TaskHubError):
    status_code = HTTPStatus.BAD_REQUEST


class UserExistsError(ValidationError):
    def __init__(self, email: str) -> None:
        super().__init__(f"Email already in use: {email}")
        self.email = email


class UnauthenticatedError(TaskHubError):
    status_code = HTTPStatus.UNAUTHORIZED


def error_body(status: HTTPStatus, message: str, details: dict[str, str] | None = None) -> dict:
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "status": status.value,
        "error": status.phrase,
        "message": message,
        "details": details or {},
    }


def _error_response(status: HTTPStatus, message: str, details: dict[str, str] | None = None) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if status == HTTPStatus.UNAUTHORIZED else None
    return JSONResponse(status_code=status.value, content=error_body(status, message, details), headers=headers)


async def handle_taskhub_error(request: Request, exc: TaskHubError) -> JSONResponse:
    if isinstance(exc, AccessDeniedError):
        logger.warning("Access denied on %s %s: %s", request.method, request.url.path, exc.message)
    return _error_response(exc.status_code, exc.message, exc.details)


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    details: dict[str, str] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in {"body", "query", "path"}]
        field = loc[-1] if loc else "request"
        if field == "status" and error.get("type") == "enum":
            valid_values = ", ".join(item.value for item in TaskStatus)
            return _error_response(
                HTTPStatus.BAD_REQUEST,
                f"Invalid task status. Valid values are: {valid_values}",
                {"validValues": valid_values},
            )
        details[field] = error.get("msg", "Invalid value")

    return _error_response(HTTPStatus.BAD_REQUEST, "Validation failed", details)


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(HTTPStatus.INTERNAL_SERVER_ERROR, "An unexpected error occurred")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TaskHubError, handle_taskhub_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected)
