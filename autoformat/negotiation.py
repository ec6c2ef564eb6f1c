"""Content negotiation: JSON or server-rendered HTML.

Decision order (first match wins):
1. The request path+query ends with ``.json``.
2. The ``Accept`` header is exactly ``application/json`` (any letter case).
3. Otherwise HTML, with the caller's identity attached when it resolves.

Negotiation never fails. An identity resolver that raises simply yields an
anonymous HTML context.
"""

from collections.abc import Awaitable, Callable

from autoformat.logging_config import get_logger, log_with_context
from autoformat.models.account import Account
from autoformat.models.format import Format, HtmlContext, HtmlFormat, JsonFormat

logger = get_logger(__name__)

JSON_SUFFIX = ".json"
JSON_MEDIA_TYPE = "application/json"

IdentityLookup = Callable[[], Awaitable[Account | None]]


def wants_json(path_and_query: str, accept: str | None) -> bool:
    """Return True when the request asks for JSON.

    The suffix check runs on the raw path+query string, and the Accept check
    compares the whole header value; no q-values or media-type lists are
    parsed.
    """
    if path_and_query.endswith(JSON_SUFFIX):
        return True
    return accept is not None and accept.lower() == JSON_MEDIA_TYPE


async def resolve_html_context(resolve_identity: IdentityLookup | None) -> HtmlContext:
    """Build the HTML context, degrading to anonymous on any resolver failure."""
    if resolve_identity is None:
        return HtmlContext()

    try:
        account = await resolve_identity()
    except Exception as e:
        log_with_context(
            logger,
            "debug",
            "Identity not resolved, rendering anonymously",
            error=str(e),
            error_type=type(e).__name__,
            event_type="identity_anonymous",
        )
        account = None

    return HtmlContext(account=account)


async def negotiate_format(
    path_and_query: str,
    accept: str | None,
    resolve_identity: IdentityLookup | None = None,
) -> Format:
    """Choose the output format for a request.

    Args:
        path_and_query: Request path including the query string, if any
        accept: Raw Accept header value, or None when absent
        resolve_identity: Looks up the caller's account; only awaited for HTML

    Returns:
        JsonFormat, or HtmlFormat carrying the resolved context
    """
    if wants_json(path_and_query, accept):
        return JsonFormat()
    return HtmlFormat(context=await resolve_html_context(resolve_identity))
