"""FastAPI exception handlers for application exceptions."""

from __future__ import annotations

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from core.exceptions import (
    GyankunjError,
    MissingFileError,
    MissingTopicError,
    StorageError,
    TopicNotFoundError,
    UnknownTopicError,
    ValidationError,
)


GENERIC_SERVER_ERROR = "Internal server error."
GENERIC_BAD_REQUEST = "Invalid request."

# form fields whose shape errors map onto the upload validation messages
_FIELD_MESSAGES = {
    "file": MissingFileError().message,
    "topic": MissingTopicError().message,
}


def _request_logger(request: Request):
    return logger.bind(method=request.method, path=request.url.path)


async def gyankunj_exception_handler(request: Request, exc: GyankunjError) -> JSONResponse:
    """Map application exceptions to status codes; server-side detail stays in the log."""
    log = _request_logger(request)

    if isinstance(exc, ValidationError):
        log.info("Rejected request: {message}", message=exc.message)
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": exc.message})

    if isinstance(exc, TopicNotFoundError):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": exc.message})

    if isinstance(exc, UnknownTopicError):
        log.info("Rejected upload: {message} {details}", message=exc.message, details=exc.details)
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"message": exc.message})

    kind = "Storage" if isinstance(exc, StorageError) else "Application"
    log.error(
        "{kind} exception: {type} - {message} {details}",
        kind=kind,
        type=type(exc).__name__,
        message=exc.message,
        details=exc.details,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": GENERIC_SERVER_ERROR},
    )


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed requests get the same ``400 {"message"}`` shape as application validation errors."""
    message = GENERIC_BAD_REQUEST
    for error in exc.errors():
        field = error.get("loc", ())[-1:]
        if field and field[0] in _FIELD_MESSAGES:
            message = _FIELD_MESSAGES[field[0]]
            break

    _request_logger(request).info("Rejected malformed request: {message} {errors}", message=message, errors=exc.errors())
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": message})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    _request_logger(request).opt(exception=exc).error("Unhandled exception")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": GENERIC_SERVER_ERROR},
    )
