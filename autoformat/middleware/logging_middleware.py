"""Request logging with sensitive data redaction."""

import re
import time

from fastapi import Request
from starlette.middleware.base import RequestResponseEndpoint
from starlette.responses import Response

from autoformat.logging_config import get_logger, log_with_context

logger = get_logger(__name__)

# Sensitive parameters to redact from URLs
SENSITIVE_PARAMS = [
    "api_key",
    "token",
    "password",
    "secret",
    "key",
    "access_token",
    "auth_token",
    "authorization",
    "bearer",
]


def redact_sensitive_data(url: str) -> str:
    """Redact sensitive query parameters from URL."""
    redacted = url
    for param in SENSITIVE_PARAMS:
        pattern = rf"([?&]){param}=([^&\s\"]+)"
        redacted = re.sub(pattern, rf"\g<1>{param}=***REDACTED***", redacted)
    return redacted


async def log_requests(request: Request, call_next: RequestResponseEndpoint) -> Response:
    """HTTP middleware logging every request with its status and duration."""
    started = time.perf_counter()
    response = await call_next(request)
    log_with_context(
        logger,
        "info",
        "HTTP Request",
        method=request.method,
        url=redact_sensitive_data(str(request.url)),
        status_code=response.status_code,
        content_type=response.headers.get("content-type"),
        duration_ms=round((time.perf_counter() - started) * 1000, 2),
        event_type="http_request",
    )
    return response
