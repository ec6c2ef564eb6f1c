"""Caller identity exposed to templates."""

from pydantic import BaseModel, ConfigDict, Field


class Account(BaseModel):
    """An authenticated caller.

    Rendered into the template context as `account`; absent for anonymous
    requests.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Stable account identifier")
    username: str = Field(..., min_length=1, description="Login name")
    display_name: str | None = Field(default=None, description="Name shown in page chrome")
