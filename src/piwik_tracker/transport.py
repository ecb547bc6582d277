"""HTTP transport for sending tracking requests to the collector."""

import logging
import time

import httpx

from .errors import TrackingTimeoutError, TransportError
from .models import TrackingResponse

logger = logging.getLogger(__name__)


class HttpTransport:
    """Sends GET and bulk POST requests with httpx.

    Args:
        transport: Optional httpx transport (for example ``httpx.MockTransport``)
            used instead of the network.
    """

    def __init__(self, transport: httpx.BaseTransport | httpx.AsyncBaseTransport | None = None):
        self._transport = transport

    def _client_kwargs(self, timeout: float) -> dict:
        kwargs = {"timeout": timeout or None}
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return kwargs

    @staticmethod
    def _respond(response: httpx.Response, url: str, started: float) -> TrackingResponse:
        elapsed = time.perf_counter() - started
        if response.is_success:
            logger.debug(f"Tracking request succeeded ({response.status_code}) in {elapsed:.3f}s")
        else:
            logger.warning(f"Tracking request returned HTTP {response.status_code}")
        return TrackingResponse(status_code=response.status_code, requested_url=url, elapsed=elapsed)

    @staticmethod
    def _wrap(exc: httpx.HTTPError, url: str, timeout: float) -> TransportError:
        if isinstance(exc, httpx.TimeoutException):
            logger.warning(f"Tracking request timed out after {timeout}s")
            return TrackingTimeoutError(f"Tracking request timed out after {timeout}s", url=url)
        logger.warning(f"Tracking request failed: {exc}")
        return TransportError(f"Tracking request failed: {exc}", url=url)

    def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: str | None = None,
        timeout: float = 600.0,
    ) -> TrackingResponse:
        """Send one request and report the status code."""
        started = time.perf_counter()
        try:
            with httpx.Client(**self._client_kwargs(timeout)) as client:
                response = client.request(method, url, headers=headers, content=body)
        except httpx.HTTPError as exc:
            raise self._wrap(exc, url, timeout) from exc
        return self._respond(response, url, started)

    async def send_async(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: str | None = None,
        timeout: float = 600.0,
    ) -> TrackingResponse:
        """Async variant of :meth:`send`."""
        started = time.perf_counter()
        try:
            async with httpx.AsyncClient(**self._client_kwargs(timeout)) as client:
                response = await client.request(method, url, headers=headers, content=body)
        except httpx.HTTPError as exc:
            raise self._wrap(exc, url, timeout) from exc
        return self._respond(response, url, started)
