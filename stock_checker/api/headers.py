"""Security and cache-busting response headers."""
from fastapi import Request
from fastapi.responses import JSONResponse
from stock_checker.core.config import settings
import logging

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Powered-By": "PHP 7.4.3",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "0",
    "X-Content-Type-Options": "nosniff",
    "Content-Security-Policy": "default-src 'self'; script-src 'self'; style-src 'self'",
}

NO_CACHE_HEADERS = {
    "Surrogate-Control": "no-store",
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def internal_error_response(exc: Exception) -> JSONResponse:
    """Generic 500 body; the error text is only exposed at DEBUG level."""
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error": str(exc) if settings.log_level == "DEBUG" else "Internal server error"
        }
    )


async def add_response_headers(request: Request, call_next):
    """Stamp every response with the security and no-cache headers.

    Unhandled exceptions are turned into the generic 500 here, inside the
    middleware stack, so error responses carry the same headers.
    """
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"Unhandled exception in {request.method} {request.url.path}")
        logger.error(f"Exception type: {type(e).__name__}")
        logger.error(f"Exception message: {str(e)}", exc_info=True)
        response = internal_error_response(e)

    for name, value in {**SECURITY_HEADERS, **NO_CACHE_HEADERS}.items():
        response.headers[name] = value
    return response
