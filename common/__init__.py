"""Common modules for services-userclient.

This package contains shared code used by the auth, session and users packages:
- protocol: Method names, defaults, RpcTransport Protocol, TRACE level
- errors: ErrorKind and the exception taxonomy
- config: ConnectionConfig
- values: Scalar / Record call arguments
- envelope: Anonymous and signed call building
- transport: XmlRpcTransport
- report: Reporting abstractions
"""

from common.config import ConnectionConfig
from common.errors import (
    ConfigurationError,
    ErrorKind,
    RemoteFault,
    ResponseError,
    ServiceError,
    StateError,
    TransportError,
    ValidationError,
)
from common.protocol import DEFAULT_PORT, TRACE, Method, RpcTransport
from common.values import CallArgument, Record, Scalar, to_argument, to_wire

__all__ = [
    # Protocol
    "DEFAULT_PORT",
    "Method",
    "RpcTransport",
    "TRACE",
    # Config
    "ConnectionConfig",
    # Values
    "CallArgument",
    "Record",
    "Scalar",
    "to_argument",
    "to_wire",
    # Exceptions
    "ConfigurationError",
    "ErrorKind",
    "RemoteFault",
    "ResponseError",
    "ServiceError",
    "StateError",
    "TransportError",
    "ValidationError",
]
