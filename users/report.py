"""User operation reporting for services-userclient.

Contains:
- CallReport: Report after one user operation completes
"""

from dataclasses import dataclass

from common.report import Report
from session.result import CallOutcome
from users.service import UserRecord


@dataclass
class CallReport(Report):
    """Report after one user operation completes."""

    outcome: CallOutcome

    def print(self) -> None:
        """Print the operation report."""
        o = self.outcome

        if not o.success:
            assert o.kind is not None
            print(f"{o.operation}: FAILED [{o.kind.value}] ({o.error})")
            return

        match o.value:
            case UserRecord() as user:
                print(f"{o.operation}: SUCCESS (uid={user.uid}, name={user.name}, mail={user.mail})")
                for key in sorted(user.extra):
                    print(f"  {key}: {user.extra[key]}")
            case None:
                print(f"{o.operation}: SUCCESS")
            case value:
                print(f"{o.operation}: SUCCESS ({value})")

    def success(self) -> bool:
        """Return True if the operation succeeded."""
        return self.outcome.success
