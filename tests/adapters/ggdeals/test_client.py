"""Tests for the GG.deals HTTP client."""

from __future__ import annotations

import json
import unittest

import httpx

from ggdeals_sync.adapters.ggdeals.client import GGDealsApiClient
from ggdeals_sync.adapters.ggdeals.errors import (
    AuthenticationError,
    GamePageNotFoundError,
    GGDealsApiClientError,
)
from ggdeals_sync.adapters.ggdeals.models import AddToCollectionResult, GameWithLauncher, GGLauncher

API_URL = "https://api.gg.deals/playnite/collection/import/"

GAMES = [
    GameWithLauncher(id="a", name="Portal 2", game_id="620", launcher=GGLauncher.STEAM),
    GameWithLauncher(id="b", name="Unknown Game"),
]


def _ok_body(items: list[dict]) -> dict:
    return {"success": True, "data": {"result": items}}


class TestGGDealsApiClient(unittest.IsolatedAsyncioTestCase):
    def _make_client(self, handler, token: str = "secret", max_retries: int = 2):
        return GGDealsApiClient(
            API_URL,
            token,
            max_retries=max_retries,
            retry_base_delay=0.0,
            retry_max_delay=0.0,
            transport=httpx.MockTransport(handler),
        )

    async def test_import_games_success(self):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(
                200,
                json=_ok_body(
                    [
                        {"id": "a", "status": "added", "url": "https://gg.deals/game/portal-2/"},
                        {"id": "b", "status": "not_found"},
                    ]
                ),
            )

        async with self._make_client(handler) as client:
            results = await client.import_games(GAMES)

        assert results["a"].result is AddToCollectionResult.ADDED
        assert results["a"].url == "https://gg.deals/game/portal-2/"
        assert results["b"].result is AddToCollectionResult.NOT_FOUND

        assert len(requests) == 1
        body = json.loads(requests[0].content)
        assert body["token"] == "secret"
        submitted = json.loads(body["data"])
        assert submitted[0] == {
            "id": "a",
            "name": "Portal 2",
            "game_id": "620",
            "launcher": "steam",
        }

    async def test_missing_and_unknown_statuses_are_errors(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=_ok_body([{"id": "a", "status": "mystery"}]))

        async with self._make_client(handler) as client:
            results = await client.import_games(GAMES)

        assert results["a"].result is AddToCollectionResult.ERROR
        assert results["b"].result is AddToCollectionResult.ERROR

    async def test_auth_status_codes(self):
        for status_code in (401, 403):
            with self.subTest(status_code=status_code):

                def handler(request: httpx.Request, code: int = status_code) -> httpx.Response:
                    return httpx.Response(code)

                async with self._make_client(handler) as client:
                    with self.assertRaises(AuthenticationError):
                        await client.import_games(GAMES)

    async def test_not_found(self):
        async with self._make_client(lambda request: httpx.Response(404)) as client:
            with self.assertRaises(GamePageNotFoundError):
                await client.import_games(GAMES)

    async def test_auth_and_not_found_are_not_retried(self):
        for status_code, error in ((401, AuthenticationError), (404, GamePageNotFoundError)):
            with self.subTest(status_code=status_code):
                calls = {"count": 0}

                def handler(request: httpx.Request, code: int = status_code) -> httpx.Response:
                    calls["count"] += 1
                    return httpx.Response(code)

                async with self._make_client(handler, max_retries=3) as client:
                    with self.assertRaises(error):
                        await client.import_games(GAMES)

                assert calls["count"] == 1

    async def test_retries_transient_errors(self):
        calls = {"count": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            calls["count"] += 1
            if calls["count"] == 1:
                return httpx.Response(503)
            return httpx.Response(200, json=_ok_body([{"id": "a", "status": "synced"}]))

        async with self._make_client(handler) as client:
            results = await client.import_games(GAMES[:1])

        assert calls["count"] == 2
        assert results["a"].result is AddToCollectionResult.SYNCED

    async def test_retries_exhausted(self):
        calls = {"count": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            calls["count"] += 1
            return httpx.Response(500)

        async with self._make_client(handler, max_retries=2) as client:
            with self.assertRaises(GGDealsApiClientError):
                await client.import_games(GAMES)

        assert calls["count"] == 3

    async def test_connection_error_is_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with self._make_client(handler, max_retries=0) as client:
            with self.assertRaises(GGDealsApiClientError):
                await client.import_games(GAMES)

    async def test_unsuccessful_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"success": False, "message": "bad request"})

        async with self._make_client(handler) as client:
            with self.assertRaisesRegex(GGDealsApiClientError, "bad request"):
                await client.import_games(GAMES)

    async def test_malformed_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>oops</html>")

        async with self._make_client(handler) as client:
            with self.assertRaises(GGDealsApiClientError):
                await client.import_games(GAMES)

    async def test_check_logged_in(self):
        async with self._make_client(lambda request: httpx.Response(200), token="") as client:
            with self.assertRaises(AuthenticationError):
                await client.check_logged_in()

        async with self._make_client(lambda request: httpx.Response(200)) as client:
            await client.check_logged_in()

    async def test_requires_context_manager(self):
        client = self._make_client(lambda request: httpx.Response(200))
        with self.assertRaises(GGDealsApiClientError):
            await client.import_games(GAMES)
