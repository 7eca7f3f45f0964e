"""Error taxonomy for services-userclient.

Contains:
- ErrorKind: Enum tagging the five failure classes
- ServiceError: Base exception carrying its kind
- ConfigurationError, ValidationError, StateError: local failures
- RemoteFault: Fault answered by the remote service
- TransportError, ResponseError: network and payload failures
"""

from enum import Enum


class ErrorKind(Enum):
    """Failure classes callers can branch on."""

    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    STATE = "state"
    REMOTE_FAULT = "remote_fault"
    TRANSPORT = "transport"


class ServiceError(Exception):
    """Base class for all client errors."""

    kind: ErrorKind


class ConfigurationError(ServiceError):
    """Raised when required construction arguments are missing."""

    kind = ErrorKind.CONFIGURATION


class ValidationError(ServiceError):
    """Raised when a call is rejected locally before reaching the network."""

    kind = ErrorKind.VALIDATION


class StateError(ServiceError):
    """Raised when an operation is attempted in the wrong lifecycle state."""

    kind = ErrorKind.STATE


class RemoteFault(ServiceError):
    """Raised when the remote service answers a call with a fault."""

    kind = ErrorKind.REMOTE_FAULT

    def __init__(self, method: str, message: str, code: int | None = None) -> None:
        self.method = method
        self.message = message
        self.code = code
        super().__init__(f"An error occurred on {method}: {message}")


class TransportError(ServiceError):
    """Raised when the call could not be delivered or its answer not read."""

    kind = ErrorKind.TRANSPORT


class ResponseError(TransportError):
    """Raised when a successful answer does not have the expected shape."""

    pass
