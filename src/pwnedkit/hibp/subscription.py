"""
Subscription status API client.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

from pwnedkit.hibp.config import BASE_URL
from pwnedkit.hibp.models import SubscriptionStatus
from pwnedkit.hibp.transport import HTTPTransport, expect_json_object


class SubscriptionAPI:
    """Client for the HIBP subscription endpoint."""

    def __init__(self, transport: HTTPTransport, base_url: str = BASE_URL):
        self.transport = transport
        self.base_url = base_url.rstrip("/")

    async def status(self) -> SubscriptionStatus:
        """Get details of the current subscription. Requires an API key."""
        url = f"{self.base_url}/subscription/status"
        data = await self.transport.get_json(url)
        return SubscriptionStatus.from_api_response(expect_json_object(data, url))
