"""Application factory for creating and configuring the FastAPI app."""

from functools import partial

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from autoformat import __version__
from autoformat.config import BASE_DIR, Settings, get_settings
from autoformat.core.lifespan import lifespan
from autoformat.core.middleware import setup_middleware
from autoformat.middleware.error_handlers import register_error_handlers
from autoformat.protocols import IdentityResolver
from autoformat.routers import health_router, pages_router
from autoformat.state_managers import TemplateEngineManager
from autoformat.views.template_renderer import build_template_engine, get_template_engine_manager

STATIC_DIR = BASE_DIR / "static"


def create_app(
    settings: Settings | None = None,
    identity_resolver: IdentityResolver | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Without explicit settings the app uses the process-wide settings and the
    process-wide template engine. With explicit settings it gets its own
    engine manager built from them, which keeps differently configured apps
    (tests, embedded sub-apps) from sharing one engine.

    Args:
        settings: Settings to use instead of the process-wide instance
        identity_resolver: Resolver to install instead of the configured default

    Returns:
        Configured FastAPI application instance
    """
    if settings is None:
        settings = get_settings()
        template_manager = get_template_engine_manager()
    else:
        template_manager = TemplateEngineManager(partial(build_template_engine, settings))

    app = FastAPI(
        title="autoformat",
        description="""
        Every page is available as HTML and as JSON.

        ## Choosing JSON
        - Append `.json` to the path, e.g. `/index.json`
        - Or send `Accept: application/json`

        Anything else gets server-rendered HTML.

        ## Sending data
        POST bodies may be `application/json` or
        `application/x-www-form-urlencoded`; other content types are
        rejected with 400.
        """,
        version=__version__,
        lifespan=lifespan,
        license_info={
            "name": "MIT",
        },
    )

    app.state.settings = settings
    app.state.template_manager = template_manager
    app.state.identity_resolver = identity_resolver

    setup_middleware(app, settings)

    register_error_handlers(app)

    if STATIC_DIR.is_dir():
        app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    app.include_router(health_router.router, tags=["health"])
    app.include_router(pages_router.router, tags=["pages"])

    return app
