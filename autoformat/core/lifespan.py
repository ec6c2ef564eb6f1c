"""Application lifespan management."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from autoformat import __version__
from autoformat.logging_config import get_logger, log_with_context
from autoformat.security import AnonymousIdentityResolver, ApiKeyIdentityResolver

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan - startup and shutdown events.

    Exceptions raised after yield are logged and re-raised so cleanup still
    runs and nothing is silently swallowed.
    """
    settings = app.state.settings
    manager = app.state.template_manager

    log_with_context(
        logger,
        "info",
        "Starting autoformat application",
        version=__version__,
        dev=settings.dev,
        event_type="app_startup",
    )

    # Identity resolver, unless the app was built with one already
    if getattr(app.state, "identity_resolver", None) is None:
        if settings.api_accounts:
            app.state.identity_resolver = ApiKeyIdentityResolver(settings)
        else:
            app.state.identity_resolver = AnonymousIdentityResolver()
    log_with_context(
        logger,
        "info",
        "Identity resolver installed",
        resolver=type(app.state.identity_resolver).__name__,
        event_type="identity_resolver_ready",
    )

    # Build the shared template engine now; a failure is cached, not fatal
    await manager.initialize()
    log_with_context(
        logger,
        "info",
        "Template engine warmed",
        status=manager.status(),
        event_type="template_engine_warm",
    )

    try:
        yield
    except Exception as e:
        log_with_context(
            logger,
            "error",
            "Application error during lifespan",
            error=str(e),
            error_type=type(e).__name__,
            event_type="app_error",
        )
        raise
    finally:
        log_with_context(
            logger,
            "info",
            "Shutting down autoformat application",
            event_type="app_shutdown",
        )
        await manager.cleanup()
