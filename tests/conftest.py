"""Pytest configuration and fixtures."""

import json

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from pwnedkit.hibp.client import HIBPClient

class RecordedRequest:
    """What the fake API saw for one request."""

    def __init__(self, request: web.Request):
        self.path = request.path
        self.query = dict(request.query)
        self.headers = request.headers


class FakeHIBP:
    """In-process stand-in for the HIBP APIs.

    Responses are queued per path. The last queued response for a path is
    repeated for every further request; unknown paths answer 404.
    """

    def __init__(self):
        self.requests: list[RecordedRequest] = []
        self.routes: dict[str, list[tuple[int, str, str, dict]]] = {}
        self.base_url = ""
        self.app = web.Application()
        self.app.router.add_get("/{tail:.*}", self._handle)

    def add(
        self,
        path: str,
        body: str = "",
        status: int = 200,
        content_type: str = "text/plain",
        headers: dict | None = None,
    ) -> None:
        self.routes.setdefault(path, []).append((status, body, content_type, headers or {}))

    def add_json(self, path: str, data, status: int = 200) -> None:
        self.add(path, json.dumps(data), status=status, content_type="application/json")

    def requests_to(self, path: str) -> list[RecordedRequest]:
        return [r for r in self.requests if r.path == path]

    async def _handle(self, request: web.Request) -> web.Response:
        self.requests.append(RecordedRequest(request))
        queue = self.routes.get(request.path)
        if not queue:
            return web.Response(status=404, reason="Not Found")

        status, body, content_type, headers = queue.pop(0) if len(queue) > 1 else queue[0]
        return web.Response(
            status=status,
            text=body,
            content_type=content_type,
            headers=headers,
        )


@pytest_asyncio.fixture
async def fake_hibp():
    """Running fake HIBP server."""
    fake = FakeHIBP()
    server = TestServer(fake.app)
    await server.start_server()
    fake.base_url = str(server.make_url("/")).rstrip("/")
    yield fake
    await server.close()


@pytest_asyncio.fixture
async def client(fake_hibp):
    """HIBPClient pointed at the fake server."""
    async with HIBPClient(
        api_key="test-api-key",
        base_url=f"{fake_hibp.base_url}/api/v3",
        password_base_url=fake_hibp.base_url,
    ) as c:
        yield c


@pytest.fixture
def make_client(fake_hibp):
    """Factory for clients with custom options against the fake server."""

    def _make(**kwargs) -> HIBPClient:
        kwargs.setdefault("base_url", f"{fake_hibp.base_url}/api/v3")
        kwargs.setdefault("password_base_url", fake_hibp.base_url)
        return HIBPClient(**kwargs)

    return _make
