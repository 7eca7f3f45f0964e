"""XML-RPC transport for services-userclient.

Contains:
- XmlRpcTransport: RpcTransport over HTTP using xmlrpc.client marshalling

Faults become RemoteFault; socket, HTTP and XML-RPC protocol failures
become TransportError. Other exceptions propagate unchanged.
"""

import http.client
import logging
import xmlrpc.client
from collections.abc import Sequence
from typing import Any
from urllib.parse import urlsplit
from xml.parsers.expat import ExpatError

from common.config import ConnectionConfig
from common.errors import RemoteFault, ResponseError, TransportError, ValidationError
from common.protocol import TRACE

logger = logging.getLogger(__name__)


class _TimeoutMixin:
    """Applies a per-request timeout to new and reused connections."""

    timeout: float | None = None

    def make_connection(self, host: Any) -> http.client.HTTPConnection:
        conn = super().make_connection(host)  # type: ignore[misc]
        conn.timeout = self.timeout
        if conn.sock is not None:
            conn.sock.settimeout(self.timeout)
        return conn


class _TimeoutTransport(_TimeoutMixin, xmlrpc.client.Transport):
    pass


class _TimeoutSafeTransport(_TimeoutMixin, xmlrpc.client.SafeTransport):
    pass


class XmlRpcTransport:
    """Send calls to one services endpoint.

    Not thread-safe on its own; SessionManager serializes calls.
    """

    def __init__(self, config: ConnectionConfig) -> None:
        self.url = config.url
        parts = urlsplit(self.url)
        self._host = parts.netloc
        self._handler = parts.path or "/"
        if parts.scheme == "https":
            self._transport: _TimeoutTransport | _TimeoutSafeTransport = _TimeoutSafeTransport()
        else:
            self._transport = _TimeoutTransport()

    def call(
        self, method: str, params: Sequence[Any], timeout: float | None = None
    ) -> Any:
        """Send one call and return its decoded result.

        Raises:
            RemoteFault: If the service answers with a fault.
            TransportError: On connection, HTTP or protocol failure.
            ValidationError: If an argument cannot be marshalled.

        Each request is sent once. A connection dropped by the server
        surfaces as TransportError; the request is not resent.
        """
        try:
            request = xmlrpc.client.dumps(tuple(params), methodname=method, allow_none=True)
        except (OverflowError, TypeError) as e:
            raise ValidationError(f"{method}: cannot marshal arguments ({e})") from e
        logger.log(TRACE, f"POST {self.url} {method} ({len(request)} bytes)")

        self._transport.timeout = timeout

        try:
            response = self._transport.single_request(self._host, self._handler, request.encode("utf-8"))
        except xmlrpc.client.Fault as e:
            logger.debug(f"{method} fault {e.faultCode}: {e.faultString}")
            raise RemoteFault(method, e.faultString, code=e.faultCode) from e
        except xmlrpc.client.ProtocolError as e:
            self._transport.close()
            raise TransportError(f"{method}: HTTP {e.errcode} {e.errmsg}") from e
        except (OSError, http.client.HTTPException, xmlrpc.client.ResponseError) as e:
            self._transport.close()
            raise TransportError(f"{method}: {e}") from e
        except ExpatError as e:
            self._transport.close()
            raise ResponseError(f"{method}: malformed XML-RPC response ({e})") from e

        # Responses always carry exactly one value
        return response[0] if len(response) == 1 else response

    def close(self) -> None:
        """Close the underlying HTTP connection."""
        self._transport.close()
