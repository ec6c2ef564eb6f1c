"""Custom exceptions for autoformat with proper HTTP status codes."""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error responses."""

    # Generic errors
    AUTOFORMAT_ERROR = "AUTOFORMAT_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # Template errors
    TEMPLATE_ERROR = "TEMPLATE_ERROR"
    TEMPLATE_INIT_ERROR = "TEMPLATE_INIT_ERROR"
    TEMPLATE_RENDER_ERROR = "TEMPLATE_RENDER_ERROR"

    # Input decoding errors
    INPUT_REJECTED = "INPUT_REJECTED"
    JSON_DECODE_ERROR = "JSON_DECODE_ERROR"
    FORM_DECODE_ERROR = "FORM_DECODE_ERROR"
    UNSUPPORTED_CONTENT_TYPE = "UNSUPPORTED_CONTENT_TYPE"

    # Identity errors
    IDENTITY_ERROR = "IDENTITY_ERROR"


class AutoFormatException(Exception):
    """Base exception for autoformat errors with HTTP status code support.

    All custom exceptions inherit from this class so the registered
    exception handlers can turn them into consistent responses.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.AUTOFORMAT_ERROR,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        """Initialize autoformat exception.

        Args:
            message: Human-readable error message
            code: Error code from ErrorCode enum
            status_code: HTTP status code (default 500)
            details: Additional error context/details
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class TemplateException(AutoFormatException):
    """Template engine errors.

    Never escapes the emission boundary: the response emitter converts it into
    an escaped diagnostic page with status 500.
    """

    title = "Template error"

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.TEMPLATE_ERROR,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, 500, details)


class TemplateInitError(TemplateException):
    """The shared template engine could not be built.

    Cached for the process lifetime; every caller receives the same instance.
    """

    title = "Error initializing template engine"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, code=ErrorCode.TEMPLATE_INIT_ERROR, details=details)


class TemplateRenderError(TemplateException):
    """A single template failed to render."""

    title = "Error rendering template"

    def __init__(self, message: str, template: str | None = None, details: dict[str, Any] | None = None):
        self.template = template
        merged = {"template": template} if template else {}
        merged.update(details or {})
        super().__init__(message, code=ErrorCode.TEMPLATE_RENDER_ERROR, details=merged)


class InputRejection(AutoFormatException):
    """Request body could not be turned into the handler's input shape.

    All rejections are client errors and are answered with a plain-text body.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INPUT_REJECTED,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, status_code, details)


class JsonDecodeError(InputRejection):
    """Body declared as application/json is malformed (400) or has the wrong shape (422)."""

    def __init__(self, message: str, status_code: int = 400, details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code=ErrorCode.JSON_DECODE_ERROR,
            status_code=status_code,
            details=details,
        )


class FormDecodeError(InputRejection):
    """Form-encoded body is undecodable (400) or has the wrong shape (422)."""

    def __init__(self, message: str, status_code: int = 400, details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code=ErrorCode.FORM_DECODE_ERROR,
            status_code=status_code,
            details=details,
        )


class UnsupportedContentType(InputRejection):
    """Content-Type is missing or names an encoding without a decoder."""

    default_message = "Expected a content type of application/json or application/x-www-form-urlencoded"

    def __init__(self, content_type: str | None = None):
        super().__init__(
            self.default_message,
            code=ErrorCode.UNSUPPORTED_CONTENT_TYPE,
            status_code=400,
            details={"content_type": content_type},
        )


class IdentityResolutionError(AutoFormatException):
    """The caller's identity could not be established."""

    def __init__(self, message: str = "Could not resolve caller identity", details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code=ErrorCode.IDENTITY_ERROR,
            status_code=401,
            details=details,
        )
