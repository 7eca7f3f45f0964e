"""Session state for services-userclient.

Contains:
- SessionState: Enum for the connection lifecycle
- Session: Immutable snapshot of session id and authenticated user
- DISCONNECTED_SESSION: Initial snapshot of a fresh client

Snapshots are never mutated; each lifecycle step returns a new one.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class SessionState(Enum):
    """Lifecycle state of a client session."""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class Session:
    """Session identifier and authenticated user at one point in time.

    When state is CONNECTED or AUTHENTICATED, session_id is required.
    user_id is set only when state is AUTHENTICATED.
    """

    state: SessionState = SessionState.DISCONNECTED
    session_id: str | None = None
    user_id: Any = None  # Service-assigned, passed back verbatim

    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.state is SessionState.DISCONNECTED:
            if self.session_id is not None or self.user_id is not None:
                raise ValueError("Disconnected session carries no session_id or user_id")
            return
        if not self.session_id:
            raise ValueError(f"session_id is required when state={self.state.value}")
        if self.state is SessionState.AUTHENTICATED and self.user_id is None:
            raise ValueError("user_id is required when state=authenticated")
        if self.state is SessionState.CONNECTED and self.user_id is not None:
            raise ValueError("user_id must be cleared when state=connected")

    @property
    def connected(self) -> bool:
        return self.state is not SessionState.DISCONNECTED

    @property
    def authenticated(self) -> bool:
        return self.state is SessionState.AUTHENTICATED

    def with_connection(self, session_id: str) -> "Session":
        """Snapshot after system.connect."""
        return Session(state=SessionState.CONNECTED, session_id=session_id)

    def with_login(self, session_id: str, user_id: Any) -> "Session":
        """Snapshot after user.login; the service may rotate the session id."""
        return Session(
            state=SessionState.AUTHENTICATED, session_id=session_id, user_id=user_id
        )

    def with_logout(self) -> "Session":
        """Snapshot after user.logout."""
        return Session(state=SessionState.CONNECTED, session_id=self.session_id)

    def with_connection_lost(self) -> "Session":
        """Snapshot after the caller detected a lost connection."""
        return DISCONNECTED_SESSION


DISCONNECTED_SESSION = Session()
