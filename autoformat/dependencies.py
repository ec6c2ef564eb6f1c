"""FastAPI dependencies for dependency injection."""

from fastapi import Request

from autoformat.config import Settings, get_settings
from autoformat.models.format import Format
from autoformat.negotiation import negotiate_format
from autoformat.protocols import IdentityResolver
from autoformat.security import AnonymousIdentityResolver
from autoformat.state_managers import TemplateEngineManager
from autoformat.views.template_renderer import TemplateRenderer


def get_path_and_query(request: Request) -> str:
    """Request path with its query string, as the client sent it.

    Uses the undecoded ``raw_path`` so that ``/index%2Ejson`` does not look
    like a ``.json`` request.
    """
    raw_path = request.scope.get("raw_path")
    path = raw_path.decode("latin-1") if raw_path else request.url.path
    query = request.scope.get("query_string", b"").decode("latin-1")
    return f"{path}?{query}" if query else path


async def get_identity_resolver(request: Request) -> IdentityResolver:
    """
    Get the identity resolver from app state.

    Args:
        request: The FastAPI request object.

    Returns:
        The configured resolver, or an anonymous one when none is installed.
    """
    resolver: IdentityResolver | None = getattr(request.app.state, "identity_resolver", None)
    return resolver or AnonymousIdentityResolver()


async def get_output_format(request: Request) -> Format:
    """
    Negotiate the response format for this request.

    Never fails: identity lookup errors degrade to an anonymous HTML context.

    Args:
        request: The FastAPI request object.

    Returns:
        JsonFormat or HtmlFormat.
    """
    resolver = await get_identity_resolver(request)

    async def lookup():
        return await resolver.resolve(request)

    return await negotiate_format(get_path_and_query(request), request.headers.get("accept"), lookup)


async def get_template_manager(request: Request) -> TemplateEngineManager:
    """
    Get the template engine manager from app state.

    Args:
        request: The FastAPI request object.

    Returns:
        The shared TemplateEngineManager instance.

    Raises:
        RuntimeError: If the manager is not initialized.
    """
    manager: TemplateEngineManager | None = getattr(request.app.state, "template_manager", None)

    if manager is None:
        raise RuntimeError("Template engine manager not initialized.")

    return manager


async def get_renderer(request: Request) -> TemplateRenderer:
    """
    Get a template renderer bound to the app's template engine manager.

    Args:
        request: The FastAPI request object.

    Returns:
        TemplateRenderer for the HTML response path.
    """
    return TemplateRenderer(await get_template_manager(request))


async def get_app_settings(request: Request) -> Settings:
    """
    Get the settings the application was created with.

    Args:
        request: The FastAPI request object.

    Returns:
        The app's Settings, falling back to the process-wide instance.
    """
    settings: Settings | None = getattr(request.app.state, "settings", None)
    return settings or get_settings()
