"""Error taxonomy shared by the callable and JSON API surfaces.

Every failure reported to a caller carries one of a small set of codes.
Handlers render them as ``{"error": {"status": <code>, "message": <text>}}``.
"""

import enum

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from safealarm.logging_config import get_logger

logger = get_logger(__name__)


class ErrorCode(str, enum.Enum):
    """Caller-visible failure codes."""

    INVALID_ARGUMENT = "invalid-argument"
    UNAUTHENTICATED = "unauthenticated"
    NOT_FOUND = "not-found"
    INTERNAL = "internal"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]


_HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.INVALID_ARGUMENT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class ApiError(Exception):
    """A failure with a taxonomy code, surfaced to the caller verbatim."""

    def __init__(self, code: ErrorCode, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def to_payload(self) -> dict:
        return {"error": {"status": self.code.value, "message": self.message}}


def _error_response(error: ApiError) -> JSONResponse:
    return JSONResponse(status_code=error.code.http_status, content=error.to_payload())


def register_exception_handlers(app: FastAPI) -> None:
    """Register the taxonomy handlers on the application.

    Unexpected exceptions render as ``internal`` with a generic message.
    """

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
        logger.warning(
            "Request rejected",
            path=request.url.path,
            code=exc.code.value,
            error=exc.message,
        )
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        fields = [
            ".".join(str(part) for part in error["loc"] if part != "body")
            for error in exc.errors()
        ]
        message = f"Invalid or missing fields: {', '.join(f for f in fields if f)}"
        logger.warning("Request validation failed", path=request.url.path, fields=fields)
        return _error_response(ApiError(ErrorCode.INVALID_ARGUMENT, message))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error", path=request.url.path)
        return _error_response(ApiError(ErrorCode.INTERNAL, "Internal error"))
