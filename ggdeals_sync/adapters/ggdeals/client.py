"""GG.deals collection import API client."""

from __future__ import annotations

import asyncio
import json
import logging
import random
from typing import TYPE_CHECKING, Any

import httpx

from ggdeals_sync import __version__
from ggdeals_sync.adapters.ggdeals.errors import (
    AuthenticationError,
    GamePageNotFoundError,
    GGDealsApiClientError,
)
from ggdeals_sync.adapters.ggdeals.models import (
    AddResult,
    AddToCollectionResult,
    GameWithLauncher,
    ImportRequest,
    ImportResponse,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from typing import Self

logger = logging.getLogger(__name__)

# Statuses worth another attempt; everything else is decided by the first answer
RETRYABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}
AUTH_STATUS_CODES = {401, 403}
PAGE_NOT_FOUND_STATUS = 404

DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY = 1.0  # seconds
DEFAULT_MAX_DELAY = 30.0  # seconds
DEFAULT_JITTER = 0.1  # 10% jitter


class GGDealsApiClient:
    """Async HTTP client for the GG.deals collection import endpoint."""

    def __init__(
        self,
        api_url: str,
        auth_token: str,
        timeout: float = 30.0,
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_base_delay: float = DEFAULT_BASE_DELAY,
        retry_max_delay: float = DEFAULT_MAX_DELAY,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_url: Full URL of the collection import endpoint
            auth_token: User token from the GG.deals settings page
            timeout: Request timeout in seconds
            max_retries: Maximum number of retry attempts for transient failures
            retry_base_delay: Base delay between retries in seconds
            retry_max_delay: Maximum delay between retries in seconds
            transport: Optional httpx transport (tests use ``httpx.MockTransport``)
        """
        self.api_url = api_url
        self.auth_token = auth_token
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self.retry_max_delay = retry_max_delay
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> Self:
        self._client = httpx.AsyncClient(
            headers={
                "Content-Type": "application/json",
                "User-Agent": f"ggdeals-sync/{__version__}",
            },
            timeout=self.timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise GGDealsApiClientError("Client not initialized. Use async context manager.")
        return self._client

    async def check_logged_in(self) -> None:
        """Verify that a token is available.

        Raises:
            AuthenticationError: If no token is configured.
        """
        if not self.auth_token:
            raise AuthenticationError("GG.deals auth token is not configured")

    async def import_games(self, games: Sequence[GameWithLauncher]) -> dict[str, AddResult]:
        """Submit one batch of games to the user's collection.

        Args:
            games: Submission records of a single batch

        Returns:
            Outcome per game id. Games the response does not mention are
            reported as ``error``.

        Raises:
            AuthenticationError: The token was rejected.
            GamePageNotFoundError: The endpoint could not be resolved.
            GGDealsApiClientError: Transport failure or unsuccessful response.
        """
        if not games:
            return {}

        request = ImportRequest(
            token=self.auth_token,
            version=__version__,
            data=json.dumps([game.model_dump(mode="json") for game in games]),
        )

        body = await self._post_import(request.model_dump())

        if not body.success or body.data is None:
            raise GGDealsApiClientError(
                f"GG.deals import was not successful: {body.message or 'no details'}"
            )

        results: dict[str, AddResult] = {
            item.id: AddResult(result=item.status, url=item.url, message=item.message)
            for item in body.data.result
        }
        for game in games:
            if game.id not in results:
                results[game.id] = AddResult(
                    result=AddToCollectionResult.ERROR,
                    message="Game missing from GG.deals response",
                )

        logger.info(
            "ggdeals_games_imported",
            extra={"submitted": len(games), "results": len(body.data.result)},
        )
        return results

    async def _post_import(self, payload: dict[str, Any]) -> ImportResponse:
        """POST the import request, retrying only transient failures.

        Connect errors, timeouts and ``RETRYABLE_STATUS_CODES`` are retried
        with exponential backoff. A rejected token or a missing endpoint is
        final on the first answer.

        Raises:
            AuthenticationError: HTTP 401/403.
            GamePageNotFoundError: HTTP 404.
            GGDealsApiClientError: Any other failure, including transient
                ones that outlived ``max_retries``.
        """
        attempt = 0
        while True:
            try:
                response = await self.client.post(self.api_url, json=payload)
            except (httpx.ConnectError, httpx.TimeoutException) as exc:
                failure = f"{type(exc).__name__}: {exc}"
            except httpx.HTTPError as exc:
                raise GGDealsApiClientError(f"GG.deals request failed: {exc}") from exc
            else:
                status_code = response.status_code
                if status_code in AUTH_STATUS_CODES:
                    raise AuthenticationError(
                        "GG.deals rejected the auth token", {"status_code": status_code}
                    )
                if status_code == PAGE_NOT_FOUND_STATUS:
                    raise GamePageNotFoundError(
                        "GG.deals import endpoint not found", {"url": self.api_url}
                    )
                if status_code not in RETRYABLE_STATUS_CODES:
                    return self._parse_response(response)
                failure = f"HTTP {status_code}"

            if attempt >= self.max_retries:
                logger.error(
                    "ggdeals_import_retries_exhausted",
                    extra={"attempts": attempt + 1, "error": failure},
                )
                raise GGDealsApiClientError(
                    f"GG.deals import failed after {attempt + 1} attempts: {failure}"
                )

            delay = self._backoff_delay(attempt)
            logger.warning(
                "ggdeals_import_retry",
                extra={
                    "attempt": attempt + 1,
                    "max_retries": self.max_retries,
                    "delay_seconds": round(delay, 2),
                    "error": failure,
                },
            )
            await asyncio.sleep(delay)
            attempt += 1

    def _backoff_delay(self, attempt: int) -> float:
        delay = min(self.retry_base_delay * (2**attempt), self.retry_max_delay)
        return delay + delay * DEFAULT_JITTER * random.random()

    @staticmethod
    def _parse_response(response: httpx.Response) -> ImportResponse:
        if response.is_error:
            raise GGDealsApiClientError(
                f"GG.deals returned HTTP {response.status_code}",
                {"status_code": response.status_code},
            )
        try:
            return ImportResponse.model_validate(response.json())
        except ValueError as exc:
            raise GGDealsApiClientError(f"Malformed GG.deals response: {exc}") from exc
