from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class PizzaServiceError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(PizzaServiceError):
    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(PizzaServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "unauthorized"):
        super().__init__(message)


class ForbiddenError(PizzaServiceError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(PizzaServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(PizzaServiceError):
    status_code = status.HTTP_409_CONFLICT


class InfrastructureError(PizzaServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def _message_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message}, headers=headers)


async def _pizza_error_handler(request: Request, exc: PizzaServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "request failed: %s",
            exc.message,
            exc_info=exc.__cause__ is not None,
            extra={"endpoint": request.url.path, "method": request.method, "status_code": exc.status_code},
        )
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return _message_response(exc.status_code, exc.message, headers)


async def _http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        return _message_response(exc.status_code, "unknown endpoint")
    return _message_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "invalid request")
    if location:
        message = f"{location}: {message}"
    return _message_response(status.HTTP_400_BAD_REQUEST, message)


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "unhandled error",
        extra={"endpoint": request.url.path, "method": request.method, "status_code": 500},
    )
    return _message_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PizzaServiceError, _pizza_error_handler)
    app.add_exception_handler(HTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
