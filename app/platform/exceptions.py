from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.platform.logger import get_logger
from app.platform.response import api_response

logger = get_logger("exceptions")


class AppError(Exception):
    """Base class for errors surfaced to the caller as ``{"error": message}``."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request failed"

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class InvalidInput(AppError):
    default_message = "Invalid request"


class StoreWriteError(AppError):
    default_message = "Failed to store PIN"


class StoreReadError(AppError):
    default_message = "Failed to verify PIN"


class EmailDeliveryError(AppError):
    default_message = "Failed to send email"


class AuthenticationFailed(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid or expired PIN"


class IdentityProviderError(AppError):
    default_message = "Identity provider request failed"


class OrderNotificationError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Failed to send order notifications"


def validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return InvalidInput.default_message

    first = errors[0]
    error_type = first.get("type")
    fields = [str(part) for part in first.get("loc", ()) if part != "body"]
    field = ".".join(fields)

    if error_type == "json_invalid":
        return "Request body must be valid JSON"
    if error_type == "missing":
        return f"{field} is required" if field else "Request body is required"

    # pydantic prefixes messages raised from field validators
    message = str(first.get("msg", InvalidInput.default_message)).removeprefix("Value error, ")
    if error_type == "value_error":
        return message
    return f"{field}: {message}" if field else message


def add_exception_handlers(app):
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return api_response(message=exc.message, status_code=exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return api_response(message=str(exc.detail) or "Error", status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return api_response(
            message=validation_message(exc),
            status_code=InvalidInput.status_code,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {exc}")
        return api_response(
            message="Internal server error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
