"""Interface for RPC transports.

Defines the contract for delivering a request envelope to the server and
returning the decoded JSON response.
"""

import abc
from typing import Any, Dict


class RpcTransport(abc.ABC):
    """Abstract Base Class for sending JSON-RPC payloads."""

    @abc.abstractmethod
    async def send(self, payload: Dict[str, Any]) -> Any:
        """Sends one request payload and returns the decoded response body.

        Args:
            payload: The wire representation of a RequestEnvelope.

        Returns:
            The decoded JSON document. Its shape is validated by the caller.

        Raises:
            TransportFailure: If the HTTP round trip fails.
            MalformedResponse: If the body is not valid JSON.
        """
        pass

    async def aclose(self) -> None:
        """Releases any connections held by the transport."""
        return None
