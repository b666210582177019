"""
Shared error handling for the Trivsel gateway.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: str
    code: str
    details: Dict[str, Any] = {}


class GatewayException(Exception):
    """Base exception for gateway services."""

    status_code = 500

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            error=self.message,
            code=self.code,
            details=self.details
        )


class ValidationError(GatewayException):
    """Malformed or out-of-domain request parameters."""

    status_code = 400

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class RateLimitError(GatewayException):
    """Rate limiting errors."""

    status_code = 429

    def __init__(self, message: str = "Too Many Requests", details: Optional[Dict[str, Any]] = None):
        super().__init__("RATE_LIMIT_ERROR", message, details)


class UpstreamError(GatewayException):
    """Upstream provider errors. Absorbed by provider fallbacks, never sent to callers."""

    status_code = 502

    def __init__(self, service: str, message: str = "Upstream error",
                 details: Optional[Dict[str, Any]] = None, code: str = "UPSTREAM_ERROR"):
        self.service = service
        super().__init__(code, f"{service}: {message}", details)


class UpstreamTransientError(UpstreamError):
    """Timeout, 5xx or transport failure. Retried by the fetcher."""

    def __init__(self, service: str, message: str = "Transient upstream failure",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(service, message, details, code="UPSTREAM_TRANSIENT_ERROR")


class UpstreamClientError(UpstreamError):
    """4xx answer from an upstream. Never retried."""

    def __init__(self, service: str, status_code: int, details: Optional[Dict[str, Any]] = None):
        self.upstream_status = status_code
        super().__init__(
            service,
            f"Upstream rejected request with status {status_code}",
            details,
            code="UPSTREAM_CLIENT_ERROR",
        )


class ParseError(UpstreamError):
    """Upstream answered with an unexpected payload shape."""

    def __init__(self, service: str, message: str = "Unexpected response shape",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(service, message, details, code="UPSTREAM_PARSE_ERROR")
