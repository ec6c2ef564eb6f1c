"""Protocol definitions for dependency injection."""

from typing import Protocol

from fastapi import Request

from autoformat.models.account import Account


class IdentityResolver(Protocol):
    """Looks up the account behind a request.

    Implementations may raise (IdentityResolutionError or anything else);
    content negotiation treats every failure as an anonymous caller.
    """

    async def resolve(self, request: Request) -> Account | None:
        """Resolve the caller.

        Args:
            request: Incoming request

        Returns:
            The caller's account, or None for anonymous requests
        """
        ...
