"""
Error handling and sanitization

- ShippingError → 400 with {error, message} (machine-readable code for the platform)
- Unhandled exceptions → logged with traceback, sanitized 500 returned
"""
import logging
import traceback

from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from custom_shipping.core.config import settings
from custom_shipping.core.exceptions import ShippingError

logger = logging.getLogger(__name__)


def shipping_error_handler(request: Request, exc: ShippingError) -> JSONResponse:
    """
    Handler for ShippingError and subclasses.

    These are client errors (bad merchant config or request), never retried.
    The message is written for the merchant and returned as is.
    """
    logger.warning(
        f"Shipping error on {request.url.path}: {exc.code} - {exc.message}"
    )
    return JSONResponse(
        status_code=400,
        content={
            "error": exc.code,
            "message": exc.message,
        },
    )


class ErrorSanitizationMiddleware(BaseHTTPMiddleware):
    """
    Middleware to catch unhandled exceptions and sanitize error responses.

    - In production: Returns generic error, logs full details
    - In development: Returns full error for debugging
    """

    async def dispatch(self, request: Request, call_next):
        try:
            response = await call_next(request)
            return response
        except HTTPException:
            # Let FastAPI handle HTTPExceptions normally
            raise
        except Exception as e:
            error_id = f"{request.client.host if request.client else 'unknown'}-{id(e)}"
            logger.error(
                f"Unhandled exception [{error_id}]: {type(e).__name__}: {str(e)}\n"
                f"Path: {request.url.path}\n"
                f"Method: {request.method}\n"
                f"Traceback:\n{traceback.format_exc()}"
            )

            if settings.DEBUG:
                return JSONResponse(
                    status_code=500,
                    content={
                        "error": "internal_error",
                        "message": str(e),
                        "type": type(e).__name__,
                        "error_id": error_id,
                    }
                )
            return JSONResponse(
                status_code=500,
                content={
                    "error": "internal_error",
                    "message": "An unexpected error occurred. Please try again later.",
                    "error_id": error_id,
                }
            )
