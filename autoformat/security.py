"""Identity resolution and host/origin policy for autoformat."""

import secrets

from fastapi import Request
from fastapi.security import HTTPBearer

from autoformat.config import Settings
from autoformat.exceptions import IdentityResolutionError
from autoformat.logging_config import get_logger, log_with_context
from autoformat.models.account import Account

logger = get_logger(__name__)

# HTTP Bearer token scheme; a missing header means anonymous, not an error
security = HTTPBearer(auto_error=False)


class AnonymousIdentityResolver:
    """Resolver for deployments without accounts: everyone is anonymous."""

    async def resolve(self, request: Request) -> Account | None:
        return None


class ApiKeyIdentityResolver:
    """Resolves ``Authorization: Bearer <key>`` against configured API keys.

    Keys and usernames come from the ``api_accounts`` setting. Comparison is
    constant-time.

    Example:
        Authorization: Bearer your-api-key-here
    """

    def __init__(self, settings: Settings):
        self._accounts = dict(settings.api_accounts)

    async def resolve(self, request: Request) -> Account | None:
        """Resolve the caller's account.

        Args:
            request: The FastAPI request object

        Returns:
            Account for a known key, None when no credentials were sent

        Raises:
            IdentityResolutionError: If a key was sent but is not recognized
        """
        credentials = await security(request)
        if credentials is None:
            return None

        for api_key, username in self._accounts.items():
            if secrets.compare_digest(credentials.credentials.encode(), api_key.encode()):
                log_with_context(
                    logger,
                    "debug",
                    "API key resolved to account",
                    username=username,
                    event_type="identity_resolved",
                )
                return Account(id=username, username=username)

        log_with_context(
            logger,
            "warning",
            "Unknown API key",
            event_type="identity_failure",
            path=request.url.path,
            ip=request.client.host if request.client else "unknown",
        )
        raise IdentityResolutionError("Invalid API key")


def get_cors_origins(settings: Settings) -> list[str]:
    """Get allowed CORS origins from settings.

    Args:
        settings: Settings instance with CORS configuration

    Returns:
        List of allowed origins
    """
    return [origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()]


def get_trusted_hosts(settings: Settings) -> list[str]:
    """Get trusted host patterns from settings.

    Args:
        settings: Settings instance with trusted hosts configuration

    Returns:
        List of trusted host patterns
    """
    return [host.strip() for host in settings.trusted_hosts.split(",") if host.strip()]
