"""
Pastes API client.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

from urllib.parse import quote

from pwnedkit.errors import NoAccountIDError, NonPositiveResponseError
from pwnedkit.hibp.config import BASE_URL
from pwnedkit.hibp.models import Paste
from pwnedkit.hibp.transport import HTTPTransport, expect_json_list


class PasteAPI:
    """Client for the HIBP pastes endpoint."""

    def __init__(self, transport: HTTPTransport, base_url: str = BASE_URL):
        self.transport = transport
        self.base_url = base_url.rstrip("/")

    async def pasted_account(self, account: str) -> list[Paste]:
        """Check if an email has appeared in any pastes.

        Requires an API key. HTTP 404 means no pastes and yields [].

        Args:
            account: Email address to check
        """
        if not account:
            raise NoAccountIDError()

        url = f"{self.base_url}/pasteaccount/{quote(account, safe='@')}"
        try:
            data = await self.transport.get_json(url)
        except NonPositiveResponseError as e:
            if e.status == 404:
                return []
            raise

        # The API answers null instead of [] for accounts with no pastes
        if data is None:
            return []
        return [Paste.from_api_response(p) for p in expect_json_list(data, url)]
