"""Functions and filters registered on the shared Jinja2 environment.

Usage in templates::

    {% for lang in languages() %}...{% endfor %}
    {{ modules("src/main.ts") }}
    {{ object.description | markdown }}

Call :func:`register_template_helpers` once while building the engine, before
any template is compiled.
"""

from collections.abc import Callable

import markdown as markdown_lib
import nh3
from jinja2 import Environment, TemplateRuntimeError
from markupsafe import Markup

from autoformat.assets import ViteAssets

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "sane_lists"]


def make_languages_function(languages: list[str]) -> Callable[..., list[str]]:
    """Build the zero-argument ``languages()`` template function."""
    frozen = tuple(languages)

    def languages_function(*args, **kwargs) -> list[str]:
        if args or kwargs:
            raise TemplateRuntimeError("languages() takes no arguments")
        return list(frozen)

    return languages_function


def markdown_filter(value: str | None) -> Markup:
    """Convert markdown text to sanitized HTML.

    Raw HTML in the source is passed through the sanitizer, so script tags
    and event handler attributes never reach the page.
    """
    if not value:
        return Markup("")
    html = markdown_lib.markdown(str(value), extensions=MARKDOWN_EXTENSIONS)
    return Markup(nh3.clean(html))


def register_template_helpers(env: Environment, languages: list[str], assets: ViteAssets) -> None:
    """Register all template globals and filters on *env*.

    Registered globals:

    * ``languages()`` - supported language codes
    * ``modules(name)`` - script/link tags for a bundled module

    Registered filters:

    * ``markdown`` - markdown text to sanitized HTML
    """
    env.globals["languages"] = make_languages_function(languages)
    env.globals["modules"] = assets
    env.filters["markdown"] = markdown_filter
