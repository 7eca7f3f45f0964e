"""Reporting abstractions for services-userclient.

Contains:
- Report ABC: Base class for all reports
- SessionReport: Report after connect/login completes
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from session.state import Session, SessionState


class Report(ABC):
    """Abstract base class for command reports."""

    @abstractmethod
    def print(self) -> None:
        """Print the report to stdout."""
        pass

    @abstractmethod
    def success(self) -> bool:
        """Return True if the report indicates success."""
        pass


@dataclass
class SessionReport(Report):
    """Report on the session after connect and optional login.

    When session is None, error should be set.
    """

    session: Session | None = None
    error: Exception | None = None

    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.session is None and self.error is None:
            raise ValueError("error is required when session is None")

    def print(self) -> None:
        """Print the session report."""
        if self.error is not None or self.session is None:
            print(f"Session: FAILED ({self.error})")
            return

        s = self.session
        if s.state is SessionState.AUTHENTICATED:
            print(f"Session: AUTHENTICATED (sessid={s.session_id}, uid={s.user_id})")
        else:
            print(f"Session: {s.state.name} (sessid={s.session_id})")

    def success(self) -> bool:
        """Return True if a session was opened."""
        return self.error is None and self.session is not None and self.session.connected
