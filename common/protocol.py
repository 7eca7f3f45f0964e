"""Protocol definitions for services-userclient.

Contains:
- Remote method names for the services endpoint
- RpcTransport Protocol for type checking
- Default connection constants
- Logging configuration
"""

import logging
from collections.abc import Sequence
from typing import Any, Protocol

# TRACE logging level (below DEBUG)
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

# Default HTTP port of the services endpoint
DEFAULT_PORT = 80
DEFAULT_SCHEME = "http"

# Nonce prefix and random part size in bytes
NONCE_PREFIX = "nonce_"
NONCE_RANDOM_BYTES = 8

# Separator used to join the signed tuple
SIGNATURE_SEPARATOR = ";"

# Integer range of the XML-RPC i4 type
MIN_INT = -(2**31)
MAX_INT = 2**31 - 1


class Method:
    """Remote method names."""

    CONNECT = "system.connect"
    LOGIN = "user.login"
    LOGOUT = "user.logout"
    SAVE = "user.save"
    DELETE = "user.delete"
    GET = "user.get"


class RpcTransport(Protocol):
    """Protocol for the remote call capability needed by the session layer.

    Implementations return the decoded result, raise RemoteFault when the
    service answers with a fault and TransportError on network failures.
    """

    def call(
        self, method: str, params: Sequence[Any], timeout: float | None = None
    ) -> Any: ...
