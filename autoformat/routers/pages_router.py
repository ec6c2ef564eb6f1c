"""Pages served as HTML or JSON from the same handler."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from autoformat import __version__
from autoformat.config import Settings
from autoformat.decoding import auto_input
from autoformat.dependencies import get_app_settings, get_output_format, get_renderer
from autoformat.models.format import Format
from autoformat.views.response_emitter import AutoOutputFormat
from autoformat.views.template_renderer import TemplateRenderer

router = APIRouter()

ABOUT_MARKDOWN = """\
Every page of this service is served **twice**: as HTML for browsers and as
JSON for scripts.

- append `.json` to a path, or
- send `Accept: application/json`
"""


class IndexPage(BaseModel):
    """Landing page payload."""

    title: str
    version: str
    languages: list[str]


class AboutPage(BaseModel):
    """About page payload; `body` is markdown."""

    title: str
    body: str


class EchoIn(BaseModel):
    """Input accepted by POST /echo as JSON or form data."""

    message: str = Field(min_length=1, max_length=2000)
    tags: list[str] = Field(default_factory=list)


class EchoOut(BaseModel):
    """What POST /echo answers with."""

    message: str
    tags: list[str]
    length: int


@router.get("/")
@router.get("/index.json")
async def index(
    fmt: Format = Depends(get_output_format),
    renderer: TemplateRenderer = Depends(get_renderer),
    settings: Settings = Depends(get_app_settings),
):
    """Landing page."""
    page = IndexPage(title="autoformat", version=__version__, languages=settings.languages)
    return AutoOutputFormat(page, "pages/index.html.jinja", fmt).to_response(renderer)


@router.get("/about")
@router.get("/about.json")
async def about(
    fmt: Format = Depends(get_output_format),
    renderer: TemplateRenderer = Depends(get_renderer),
):
    """About page, rendered from markdown for HTML clients."""
    page = AboutPage(title="About", body=ABOUT_MARKDOWN)
    return AutoOutputFormat(page, "pages/about.html.jinja", fmt).to_response(renderer)


@router.post("/echo")
@router.post("/echo.json")
async def echo(
    payload: EchoIn = Depends(auto_input(EchoIn)),
    fmt: Format = Depends(get_output_format),
    renderer: TemplateRenderer = Depends(get_renderer),
):
    """Echo the decoded input back with status 201.

    Accepts application/json and application/x-www-form-urlencoded bodies.
    """
    result = EchoOut(message=payload.message, tags=payload.tags, length=len(payload.message))
    return AutoOutputFormat(result, "pages/echo.html.jinja", fmt).with_status(201).to_response(renderer)
