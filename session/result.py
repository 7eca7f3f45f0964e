"""Call outcome types for services-userclient.

Contains:
- CallOutcome: Tagged success/failure of one service operation
- capture: Run an operation and return its CallOutcome
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from common.errors import ErrorKind, ServiceError

logger = logging.getLogger(__name__)


@dataclass
class CallOutcome:
    """Result of one service operation.

    Attributes:
        operation: Name of the operation, e.g. create or login.
        success: True if the operation completed.
        value: Decoded result on success (None for operations with no result).
        error: The error raised on failure.
    """

    operation: str
    success: bool
    value: Any = None
    error: ServiceError | None = None

    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.success and self.error is not None:
            raise ValueError("error must be None when success=True")
        if not self.success and self.error is None:
            raise ValueError("error is required when success=False")

    @property
    def kind(self) -> ErrorKind | None:
        """Error kind on failure, None on success."""
        return self.error.kind if self.error is not None else None

    def unwrap(self) -> Any:
        """Return the value, or raise the captured error."""
        if self.error is not None:
            raise self.error
        return self.value


def capture(operation: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> CallOutcome:
    """Call fn and wrap its result or ServiceError in a CallOutcome.

    Exceptions that are not ServiceError propagate.
    """
    try:
        value = fn(*args, **kwargs)
    except ServiceError as e:
        logger.debug(f"{operation} failed ({e.kind.value}): {e}")
        return CallOutcome(operation=operation, success=False, error=e)
    return CallOutcome(operation=operation, success=True, value=value)
