from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

class ConnectorException(Exception):
    """Base connector exception"""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class TransientFetchFailure(ConnectorException):
    """A single page request failed at the transport or HTTP layer"""
    def __init__(self, url: str, reason: str, status_code: int = 502):
        super().__init__(f"Request to {url} failed: {reason}", status_code, {"url": url})
        self.url = url

class ExhaustedRetries(ConnectorException):
    """Retry ceiling reached for a single request"""
    def __init__(self, url: str, attempts: int):
        message = f"JSON fetch failed too many times for {url}."
        super().__init__(message, 502, {"url": url, "attempts": attempts})
        self.url = url
        self.attempts = attempts

class BatchFailure(ConnectorException):
    """A page in a concurrently dispatched batch failed irrecoverably"""
    def __init__(self, reason: str, pages_planned: int = 0):
        super().__init__(reason, 502, {"pages_planned": pages_planned})
        self.reason = reason

class MalformedResponse(ConnectorException):
    """Upstream response body does not match the expected schema"""
    def __init__(self, url: str, error: str):
        super().__init__(f"Malformed response from {url}: {error}", 502, {"url": url})
        self.url = url

class OAuthException(ConnectorException):
    """OAuth state validation or token exchange failure"""
    def __init__(self, message: str, status_code: int = 502, details: dict = None):
        super().__init__(message, status_code, details)

class ValidationException(ConnectorException):
    """Validation related exception"""
    def __init__(self, message: str, status_code: int = 400, details: dict = None):
        super().__init__(message, status_code, details)

class NotFoundError(ConnectorException):
    """Resource not found exception"""
    def __init__(self, resource: str, identifier: str):
        message = f"{resource} with identifier '{identifier}' not found"
        super().__init__(message, 404, {"resource": resource, "identifier": str(identifier)})

def _error_body(message: str, error_type: str, details: dict, path: str) -> dict:
    return {
        "error": {
            "message": message,
            "type": error_type,
            "details": details,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "path": path
        }
    }

async def connector_exception_handler(request: Request, exc: ConnectorException):
    """Handle custom connector exceptions"""
    logger.error(f"Connector Exception: {exc.message}", extra={
        "status_code": exc.status_code,
        "details": exc.details,
        "path": request.url.path,
        "method": request.method
    })

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.message, exc.__class__.__name__, exc.details, request.url.path)
    )

async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions"""
    logger.error(f"Unhandled exception: {str(exc)}", extra={
        "path": request.url.path,
        "method": request.method,
        "exception_type": exc.__class__.__name__
    }, exc_info=True)

    return JSONResponse(
        status_code=500,
        content=_error_body(
            "Internal server error",
            "InternalServerError",
            {"error_id": f"err_{hash(str(exc)) % 10000:04d}"},
            request.url.path
        )
    )

async def http_exception_handler_custom(request: Request, exc: HTTPException):
    """Custom HTTP exception handler"""
    logger.warning(f"HTTP Exception: {exc.detail}", extra={
        "status_code": exc.status_code,
        "path": request.url.path,
        "method": request.method
    })

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.detail, "HTTPException", {}, request.url.path)
    )
