"""Tests for custom exception classes."""

from autoformat.exceptions import (
    AutoFormatException,
    ErrorCode,
    FormDecodeError,
    IdentityResolutionError,
    InputRejection,
    JsonDecodeError,
    TemplateException,
    TemplateInitError,
    TemplateRenderError,
    UnsupportedContentType,
)


class TestErrorCodes:
    """Tests for ErrorCode enum."""

    def test_error_code_values(self):
        """Test that error codes have correct values."""
        assert ErrorCode.AUTOFORMAT_ERROR == "AUTOFORMAT_ERROR"
        assert ErrorCode.TEMPLATE_INIT_ERROR == "TEMPLATE_INIT_ERROR"
        assert ErrorCode.JSON_DECODE_ERROR == "JSON_DECODE_ERROR"
        assert ErrorCode.UNSUPPORTED_CONTENT_TYPE == "UNSUPPORTED_CONTENT_TYPE"


class TestAutoFormatException:
    """Tests for AutoFormatException."""

    def test_basic(self):
        exc = AutoFormatException(message="Test error")

        assert exc.message == "Test error"
        assert exc.code == ErrorCode.AUTOFORMAT_ERROR
        assert exc.status_code == 500
        assert exc.details == {}
        assert str(exc) == "Test error"

    def test_with_details(self):
        exc = AutoFormatException(
            message="Test error", code=ErrorCode.INTERNAL_ERROR, status_code=503, details={"key": "value"}
        )

        assert exc.code == ErrorCode.INTERNAL_ERROR
        assert exc.status_code == 503
        assert exc.details["key"] == "value"


class TestTemplateExceptions:
    """Template errors are 500s with a page title."""

    def test_init_error(self):
        exc = TemplateInitError("no templates")

        assert isinstance(exc, TemplateException)
        assert exc.code == ErrorCode.TEMPLATE_INIT_ERROR
        assert exc.status_code == 500
        assert exc.title == "Error initializing template engine"

    def test_render_error_records_template(self):
        exc = TemplateRenderError("failed", template="pages/a.html.jinja", details={"line": 3})

        assert exc.code == ErrorCode.TEMPLATE_RENDER_ERROR
        assert exc.template == "pages/a.html.jinja"
        assert exc.details == {"template": "pages/a.html.jinja", "line": 3}
        assert exc.title == "Error rendering template"


class TestInputRejections:
    """Decoding rejections are client errors."""

    def test_json_decode_error_defaults_to_400(self):
        exc = JsonDecodeError("bad json")

        assert isinstance(exc, InputRejection)
        assert exc.status_code == 400
        assert exc.code == ErrorCode.JSON_DECODE_ERROR

    def test_form_decode_error_status_override(self):
        exc = FormDecodeError("bad shape", status_code=422)

        assert exc.status_code == 422
        assert exc.code == ErrorCode.FORM_DECODE_ERROR

    def test_unsupported_content_type(self):
        exc = UnsupportedContentType("text/plain")

        assert exc.status_code == 400
        assert exc.message == UnsupportedContentType.default_message
        assert exc.details == {"content_type": "text/plain"}


def test_identity_resolution_error():
    exc = IdentityResolutionError()

    assert exc.status_code == 401
    assert exc.code == ErrorCode.IDENTITY_ERROR
    assert exc.message == "Could not resolve caller identity"
