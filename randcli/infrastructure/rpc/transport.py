"""Concrete implementation of the RpcTransport interface using httpx.

Hides the HTTP client behind the transport port and translates httpx
failures into the client's error taxonomy.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from randcli.domain.interfaces.transport import RpcTransport
from randcli.domain.models.common import CONTENT_TYPE, DEFAULT_ENDPOINT, DEFAULT_REQUEST_TIMEOUT_S
from randcli.domain.models.errors import MalformedResponse, TransportFailure

logger = logging.getLogger(__name__)


class HttpxTransport(RpcTransport):
    """Posts JSON-RPC envelopes to a single HTTPS endpoint."""

    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout_s: float = DEFAULT_REQUEST_TIMEOUT_S,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initializes the transport.

        Args:
            endpoint: The JSON-RPC invoke URL.
            timeout_s: Client-side deadline for the whole round trip.
            http_transport: Optional httpx transport (e.g. httpx.MockTransport
                in tests). Uses the default network transport when None.
        """
        if timeout_s <= 0:
            raise ValueError("timeout_s must be positive.")
        self.endpoint = endpoint
        self.timeout_s = timeout_s
        self._http_transport = http_transport
        self._client: Optional[httpx.AsyncClient] = None
        logger.info(f"HttpxTransport initialized for endpoint: {endpoint} (timeout={timeout_s}s)")

    def _get_client(self) -> httpx.AsyncClient:
        # Created lazily so the client binds to the loop that actually sends.
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout_s,
                transport=self._http_transport,
                headers={"Content-Type": CONTENT_TYPE},
            )
        return self._client

    async def send(self, payload: Dict[str, Any]) -> Any:
        method = payload.get("method")
        logger.debug(f"POST {self.endpoint} method={method} id={payload.get('id')}")
        try:
            response = await self._get_client().post(self.endpoint, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP {e.response.status_code} from {self.endpoint} for {method}")
            raise TransportFailure(
                f"Server answered {method} with HTTP {e.response.status_code}"
            ) from e
        except httpx.TimeoutException as e:
            logger.error(f"Request for {method} timed out after {self.timeout_s}s")
            raise TransportFailure(f"Request for {method} timed out after {self.timeout_s}s") from e
        except httpx.RequestError as e:
            logger.error(f"Network error while calling {method}: {type(e).__name__} - {e}")
            raise TransportFailure(f"Network error while calling {method}: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Response body for {method} is not valid JSON: {e}")
            raise MalformedResponse(f"Response body for {method} is not valid JSON") from e

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.debug("HttpxTransport closed.")
