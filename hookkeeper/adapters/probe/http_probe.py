"""HTTP validation probe adapter.

Implements ProbePort with httpx. The probe is a POST carrying the
validation header, bounded by the client timeout and never retried.
"""

import logging

import httpx

from hookkeeper.core.exceptions import NetworkError
from hookkeeper.core.models import ProbeResponse
from hookkeeper.core.ports import ProbePort
from hookkeeper.core.validator import VALIDATION_PROBE_HEADER

logger = logging.getLogger(__name__)


class HttpxProbe(ProbePort):
    """Sends validation probes with an httpx.AsyncClient."""

    def __init__(
        self,
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the probe.

        Args:
            timeout_seconds: Connect and read timeout for the probe.
            client: Optional preconfigured client (tests pass one with a
                mock transport).
        """
        self.timeout_seconds = timeout_seconds
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_seconds),
                follow_redirects=False,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def probe(self, url: str) -> ProbeResponse:
        """POST a validation probe to the URL.

        Raises:
            NetworkError: If the URL is malformed, unreachable or times out.
        """
        client = await self._get_client()
        try:
            response = await client.post(
                url,
                headers={VALIDATION_PROBE_HEADER: "true"},
            )
        except httpx.InvalidURL as e:
            raise NetworkError(f"Invalid URL: {e}") from e
        except httpx.RequestError as e:
            raise NetworkError(str(e) or type(e).__name__) from e

        logger.debug(
            f"Probe of {url} returned {response.status_code}",
            extra={"url": url, "status_code": response.status_code},
        )
        return ProbeResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
        )
