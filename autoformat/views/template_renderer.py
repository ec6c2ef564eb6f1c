"""Shared Jinja2 template engine and HTML rendering.

The engine is built once per process by a TemplateEngineManager. Every
template matching the configured glob is compiled up front, so syntax errors
surface as a cached TemplateInitError instead of failing one request at a time.
"""

from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import HTMLResponse
from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template, TemplateSyntaxError, select_autoescape
from markupsafe import escape

from autoformat.assets import ViteAssets
from autoformat.config import Settings, get_settings
from autoformat.exceptions import TemplateException, TemplateInitError, TemplateRenderError
from autoformat.logging_config import get_logger, log_with_context
from autoformat.models.account import Account
from autoformat.state_managers import TemplateEngineManager
from autoformat.views.template_helpers import register_template_helpers

logger = get_logger(__name__)


class TemplateEngine:
    """Compiled template set plus the environment it was compiled with.

    Read-only once built, so renders run concurrently without locking.
    """

    def __init__(self, env: Environment, templates: dict[str, Template], dev: bool):
        self.env = env
        self.templates = templates
        self.dev = dev

    def get(self, template_id: str) -> Template | None:
        return self.templates.get(template_id)


def build_template_engine(settings: Settings) -> TemplateEngine:
    """Build the engine from settings.

    Args:
        settings: Supplies the templates root, glob, autoescape suffixes,
            languages, asset manifest and dev flag

    Returns:
        Engine with every matching template compiled

    Raises:
        TemplateInitError: If the root is missing, a template does not parse,
            or the asset manifest is unreadable
    """
    root = settings.templates_dir
    if not root.is_dir():
        raise TemplateInitError(
            f"Template directory not found: {root}",
            details={"templates_dir": str(root)},
        )

    assets = ViteAssets(
        manifest_path=settings.assets_manifest,
        base_url=settings.assets_base_url,
        dev_server=settings.vite_dev_server,
        dev=settings.dev,
    )
    try:
        assets.load()
    except (OSError, ValueError) as e:
        raise TemplateInitError(str(e), details={"assets_manifest": str(settings.assets_manifest)}) from e

    env = Environment(
        loader=FileSystemLoader(str(root)),
        autoescape=select_autoescape(
            enabled_extensions=settings.autoescape_extensions,
            disabled_extensions=(),
            default_for_string=False,
            default=False,
        ),
        undefined=StrictUndefined,
        auto_reload=False,
    )
    register_template_helpers(env, settings.languages, assets)

    templates: dict[str, Template] = {}
    for path in sorted(root.glob(settings.template_glob)):
        if not path.is_file():
            continue
        template_id = path.relative_to(root).as_posix()
        try:
            templates[template_id] = env.get_template(template_id)
        except TemplateSyntaxError as e:
            raise TemplateInitError(
                f"Failed to parse '{template_id}' (line {e.lineno}): {e.message}",
                details={"template": template_id, "line": e.lineno},
            ) from e

    return TemplateEngine(env, templates, settings.dev)


def describe_error(error: BaseException) -> str:
    """Error text followed by its chain of causes, one per line."""
    message = error.message if isinstance(error, TemplateException) else f"{type(error).__name__}: {error}"
    lines = [message]
    cause = error.__cause__
    while cause is not None:
        lines.append(f"caused by {type(cause).__name__}: {cause}")
        cause = cause.__cause__
    return "\n".join(lines)


def render_html_error(title: str, error: BaseException) -> HTMLResponse:
    """Diagnostic page for template failures.

    Both the title and the message are HTML-escaped: error text can echo
    template data, which may be user-controlled.

    Returns:
        HTMLResponse with status 500
    """
    body = f"<h2>{escape(title)}</h2>\n<pre>{escape(describe_error(error))}</pre>"
    return HTMLResponse(content=body, status_code=500)


_engine_manager = TemplateEngineManager(lambda: build_template_engine(get_settings()))


def get_template_engine_manager() -> TemplateEngineManager:
    """Get the process-wide template engine manager."""
    return _engine_manager


class TemplateRenderer:
    """Renders templates from the shared engine with the standard context.

    Every render receives:
    - ``object``: the response data in its JSON-compatible form
    - ``account``: the caller's account as a dict, or None when anonymous
    - ``dev``: whether this is a development build
    """

    def __init__(self, manager: TemplateEngineManager | None = None):
        self.manager = manager or get_template_engine_manager()

    def render(self, template_id: str, data: Any, account: Account | None = None) -> str:
        """Render a template to HTML.

        Args:
            template_id: Template path relative to the templates root
            data: Response payload, exposed as ``object``
            account: Resolved identity, or None

        Returns:
            Rendered HTML

        Raises:
            TemplateInitError: If the shared engine could not be built
            TemplateRenderError: If the template is unknown or rendering fails
        """
        engine = self.manager.get_engine()

        template = engine.get(template_id)
        if template is None:
            raise TemplateRenderError(f"Template '{template_id}' not found", template=template_id)

        try:
            context = {
                "object": jsonable_encoder(data),
                "account": account.model_dump(mode="json") if account else None,
                "dev": engine.dev,
            }
            return template.render(context)
        except Exception as e:
            log_with_context(
                logger,
                "warning",
                "Template render failed",
                template=template_id,
                error=str(e),
                error_type=type(e).__name__,
                event_type="template_render_error",
            )
            raise TemplateRenderError(f"Failed to render '{template_id}'", template=template_id) from e
