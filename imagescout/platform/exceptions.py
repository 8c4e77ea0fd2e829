import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from imagescout.platform.response import api_response

logger = logging.getLogger(__name__)


class ImageScoutError(Exception):
    """Base error carrying the HTTP status it maps to."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingInputError(ImageScoutError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Missing URL"


class UnknownProfileError(ImageScoutError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Unknown extraction profile"


class InvalidDomainError(ImageScoutError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "URL is not on an allowed domain"


class InvalidImageURLError(ImageScoutError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "URL is not a downloadable image"


class RenderFailureError(ImageScoutError):
    default_message = "Failed to extract images"


class DownloadFailureError(ImageScoutError):
    default_message = "Failed to download image"


def add_exception_handlers(app):
    @app.exception_handler(ImageScoutError)
    async def imagescout_exception_handler(request: Request, exc: ImageScoutError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}", exc_info=exc)
        return api_response(message=exc.message, status_code=exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return api_response(message=str(exc.detail) or "Error", status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return api_response(
            message="Validation failed",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            data={"errors": exc.errors()},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {exc}")
        return api_response(
            message="Internal server error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
