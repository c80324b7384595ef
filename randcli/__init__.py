"""randcli: a self-throttling client for the random.org JSON-RPC API.

The async `RandomService` and the blocking `BlockingRandomService` are the
two public entry points; the `randcli` command wraps the blocking one.
"""

from randcli.core.services.random_service import RandomService, create_random_service
from randcli.core.services.blocking_service import BlockingRandomService
from randcli.domain.models.errors import (
    RandomClientError,
    InvalidArgument,
    Unauthorized,
    ThrottleExceeded,
    ServerError,
    MalformedResponse,
    Interrupted,
    TransportFailure,
)

__version__ = "0.1.0"

__all__ = [
    "RandomService",
    "create_random_service",
    "BlockingRandomService",
    "RandomClientError",
    "InvalidArgument",
    "Unauthorized",
    "ThrottleExceeded",
    "ServerError",
    "MalformedResponse",
    "Interrupted",
    "TransportFailure",
]
