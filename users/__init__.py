"""User operations package for services-userclient.

- service: UserRecord, UserService
- report: CallReport

Note: run_command and ExitCode are not exported here. Import directly
from users.runner when needed.
"""

from users.report import CallReport
from users.service import UserRecord, UserService

__all__ = [
    "CallReport",
    "UserRecord",
    "UserService",
]
