"""One handler result, two representations.

Route handlers return ``AutoOutputFormat(data, template, fmt).to_response()``
and get JSON or rendered HTML depending on the negotiated format.
"""

from typing import Generic, TypeVar

from fastapi.encoders import jsonable_encoder
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.responses import Response

from autoformat.exceptions import TemplateException
from autoformat.logging_config import get_logger, log_with_context
from autoformat.models.format import Format, HtmlFormat, JsonFormat
from autoformat.views.template_renderer import TemplateRenderer, render_html_error

logger = get_logger(__name__)

T = TypeVar("T")


class AutoOutputFormat(Generic[T]):
    """Response envelope: data, template, status and negotiated format.

    Exactly one of serialization or template rendering consumes ``data``.
    """

    def __init__(self, data: T, template: str, format: Format, status: int = 200):
        self.data = data
        self.template = template
        self.format = format
        self.status = status

    def with_status(self, status: int) -> "AutoOutputFormat[T]":
        """Return a copy answering with ``status`` instead of 200."""
        return AutoOutputFormat(self.data, self.template, self.format, status)

    def to_response(self, renderer: TemplateRenderer | None = None) -> Response:
        """Finalize into a Starlette response.

        Args:
            renderer: Renderer for the HTML path, defaults to the shared engine

        Returns:
            JSONResponse with the configured status, HTMLResponse with the
            configured status, or the escaped 500 diagnostic page when
            templating fails
        """
        if isinstance(self.format, HtmlFormat):
            return self._html_response(renderer or TemplateRenderer(), self.format)
        if isinstance(self.format, JsonFormat):
            return self._json_response()
        raise TypeError(f"Unknown output format: {self.format!r}")

    def _json_response(self) -> JSONResponse:
        return JSONResponse(content=jsonable_encoder(self.data), status_code=self.status)

    def _html_response(self, renderer: TemplateRenderer, fmt: HtmlFormat) -> Response:
        try:
            html = renderer.render(self.template, self.data, fmt.context.account)
        except TemplateException as e:
            log_with_context(
                logger,
                "error",
                e.title,
                template=self.template,
                error=e.message,
                error_code=e.code.value,
                event_type="template_error_page",
            )
            return render_html_error(e.title, e)

        return HTMLResponse(content=html, status_code=self.status)

    def __repr__(self) -> str:
        return f"AutoOutputFormat(template={self.template!r}, status={self.status}, format={self.format.kind})"
