"""
Breaches API client.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import logging
from urllib.parse import quote

from pwnedkit.errors import (
    NoAccountIDError,
    NoNameError,
    NonPositiveResponseError,
)
from pwnedkit.hibp.config import BASE_URL
from pwnedkit.hibp.models import Breach, SubscribedDomain
from pwnedkit.hibp.transport import HTTPTransport, expect_json_list, expect_json_object

logger = logging.getLogger(__name__)


def _flag(value: bool) -> str:
    return "true" if value else "false"


class BreachAPI:
    """Client for the HIBP breaches endpoints."""

    def __init__(self, transport: HTTPTransport, base_url: str = BASE_URL):
        self.transport = transport
        self.base_url = base_url.rstrip("/")

    async def breaches(
        self,
        domain: str | None = None,
        truncate: bool = True,
        include_unverified: bool = True,
    ) -> list[Breach]:
        """Get all breaches in the HIBP database.

        Args:
            domain: Optional domain to filter breaches
            truncate: Only return breach names (truncateResponse)
            include_unverified: Include unverified breaches

        Returns:
            List of all breaches
        """
        url = f"{self.base_url}/breaches"
        params = {
            "truncateResponse": _flag(truncate),
            "includeUnverified": _flag(include_unverified),
        }
        if domain:
            params["domain"] = domain

        data = await self.transport.get_json(url, params)
        return [Breach.from_api_response(b) for b in expect_json_list(data, url)]

    async def breach_by_name(self, name: str) -> Breach:
        """Get details for a specific breach.

        Args:
            name: Breach name (e.g., 'Adobe', 'LinkedIn')
        """
        if not name:
            raise NoNameError()

        url = f"{self.base_url}/breach/{quote(name, safe='')}"
        data = await self.transport.get_json(url)
        return Breach.from_api_response(expect_json_object(data, url))

    async def latest_breach(self) -> Breach:
        """Get the most recently added breach."""
        url = f"{self.base_url}/latestbreach"
        data = await self.transport.get_json(url)
        return Breach.from_api_response(expect_json_object(data, url))

    async def data_classes(self) -> list[str]:
        """Get all data classes (types of compromised data)."""
        url = f"{self.base_url}/dataclasses"
        data = await self.transport.get_json(url)
        return [str(dc) for dc in expect_json_list(data, url)]

    async def breached_account(
        self,
        account: str,
        truncate: bool = True,
        include_unverified: bool = True,
        domain: str | None = None,
    ) -> list[Breach]:
        """Get all breaches an account has been involved in.

        Requires an API key. An account that is not pwned yields an empty
        list (the API answers HTTP 404).

        Args:
            account: Email address or username
            truncate: Only return breach names
            include_unverified: Include unverified breaches
            domain: Only return breaches against this domain
        """
        if not account:
            raise NoAccountIDError()

        url = f"{self.base_url}/breachedaccount/{quote(account, safe='@')}"
        params = {
            "truncateResponse": _flag(truncate),
            "includeUnverified": _flag(include_unverified),
        }
        if domain:
            params["domain"] = domain

        try:
            data = await self.transport.get_json(url, params)
        except NonPositiveResponseError as e:
            if e.status == 404:
                logger.debug("Account not found in any breach")
                return []
            raise

        return [Breach.from_api_response(b) for b in expect_json_list(data, url)]

    async def subscribed_domains(self) -> list[SubscribedDomain]:
        """Get the domains verified in the domain search dashboard.

        Requires an API key.
        """
        url = f"{self.base_url}/subscribeddomains"
        data = await self.transport.get_json(url)
        return [SubscribedDomain.from_api_response(d) for d in expect_json_list(data, url)]

    async def breached_domain(self, domain: str) -> dict[str, list[str]]:
        """Get breached aliases on a verified domain and their breach names.

        Requires an API key and a verified domain.

        Returns:
            Mapping of alias (the part before the @) to breach names
        """
        url = f"{self.base_url}/breacheddomain/{quote(domain, safe='')}"
        data = await self.transport.get_json(url)
        return {
            alias: list(names)
            for alias, names in expect_json_object(data, url).items()
        }
