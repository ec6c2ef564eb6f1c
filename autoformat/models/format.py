"""Negotiated output format.

Format is a tagged union: JsonFormat carries nothing, HtmlFormat carries the
context needed to render a page. It is decided once per request and frozen.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict

from autoformat.models.account import Account


class HtmlContext(BaseModel):
    """Request-scoped values every HTML render receives."""

    model_config = ConfigDict(frozen=True)

    account: Account | None = None

    @property
    def is_anonymous(self) -> bool:
        return self.account is None


class JsonFormat(BaseModel):
    """Serialize the response data as JSON."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["json"] = "json"


class HtmlFormat(BaseModel):
    """Render the response data through a template."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["html"] = "html"
    context: HtmlContext = HtmlContext()


Format = JsonFormat | HtmlFormat
