"""
Have I Been Pwned API client.

Bundles the HIBP v3 APIs behind one object sharing a single transport:
- Pwned Passwords range lookups with k-anonymity (SHA-1 or NTLM)
- Breach and paste lookups
- Subscription status

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import asyncio

import aiohttp

from pwnedkit.hibp.breaches import BreachAPI
from pwnedkit.hibp.config import ClientConfig
from pwnedkit.hibp.models import Breach, Match
from pwnedkit.hibp.passwords import PwnedPassAPI, PwnedPasswordOptions
from pwnedkit.hibp.pastes import PasteAPI
from pwnedkit.hibp.subscription import SubscriptionAPI
from pwnedkit.hibp.transport import HTTPTransport


class HIBPClient:
    """Client for Have I Been Pwned API v3.

    Example:
        async with HIBPClient(api_key="...", rate_limit_sleep=True) as client:
            match = await client.passwords.check_password("hunter2")
            breaches = await client.breaches.breached_account("user@example.com")
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        api_key: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        rate_limit_sleep: bool | None = None,
        password_options: PwnedPasswordOptions | None = None,
        session: aiohttp.ClientSession | None = None,
        base_url: str | None = None,
        password_base_url: str | None = None,
    ):
        """Initialize HIBP client.

        Keyword arguments override the matching ``config`` field.

        Args:
            config: Base configuration (defaults to ClientConfig())
            api_key: HIBP API key (required for account, paste and
                subscription lookups)
            user_agent: User-Agent header for requests
            timeout: Request timeout in seconds
            rate_limit_sleep: Sleep and retry once on HTTP 429
            password_options: Hash mode and padding for Pwned Passwords
            session: Externally managed aiohttp session
            base_url: Override for the breach API base URL
            password_base_url: Override for the Pwned Passwords base URL
        """
        self.config = config if config is not None else ClientConfig()

        self.transport = HTTPTransport(
            api_key=api_key if api_key is not None else self.config.api_key,
            user_agent=user_agent or self.config.user_agent,
            timeout=timeout if timeout is not None else self.config.timeout,
            rate_limit_sleep=(
                rate_limit_sleep
                if rate_limit_sleep is not None
                else self.config.rate_limit_sleep
            ),
            max_rate_limit_retries=self.config.max_rate_limit_retries,
            session=session,
            extra_headers=self.config.extra_headers,
        )

        if password_options is None:
            password_options = PwnedPasswordOptions(
                hash_mode=self.config.hash_mode,
                with_padding=self.config.with_padding,
            )

        base_url = base_url or self.config.base_url
        self.passwords = PwnedPassAPI(
            self.transport,
            password_options,
            base_url=password_base_url or self.config.password_base_url,
        )
        self.breaches = BreachAPI(self.transport, base_url=base_url)
        self.pastes = PasteAPI(self.transport, base_url=base_url)
        self.subscription = SubscriptionAPI(self.transport, base_url=base_url)

    @classmethod
    def from_env(cls, **kwargs) -> "HIBPClient":
        """Create a client configured from environment variables."""
        return cls(ClientConfig.from_env(), **kwargs)

    async def close(self) -> None:
        """Close HTTP session."""
        await self.transport.close()

    async def __aenter__(self) -> "HIBPClient":
        """Async context manager entry."""
        await self.transport.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()


# Convenience functions for synchronous usage
def check_password_sync(password: str, **kwargs) -> Match:
    """Synchronous wrapper for checking password exposure.

    Args:
        password: Password to check
        **kwargs: Passed to HIBPClient

    Returns:
        Match (``present`` is False if the password was not found)
    """
    async def _check():
        async with HIBPClient(**kwargs) as client:
            return await client.passwords.check_password(password)

    return asyncio.run(_check())


def list_hashes_prefix_sync(prefix: str, **kwargs) -> list[Match]:
    """Synchronous wrapper for a raw range query."""
    async def _list():
        async with HIBPClient(**kwargs) as client:
            return await client.passwords.list_hashes_prefix(prefix)

    return asyncio.run(_list())


def breached_account_sync(account: str, **kwargs) -> list[Breach]:
    """Synchronous wrapper for checking account breaches.

    Args:
        account: Email address or username
        **kwargs: Passed to HIBPClient (api_key is required by the API)
    """
    async def _check():
        async with HIBPClient(**kwargs) as client:
            return await client.breaches.breached_account(account)

    return asyncio.run(_check())
