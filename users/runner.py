"""Command runner for services-userclient.

Contains run_command() which connects, optionally logs in, performs one
user operation and logs out, returning an exit code based on the result.
"""

import logging
from enum import IntEnum
from typing import Any

from common.config import ConnectionConfig
from common.errors import ErrorKind, ServiceError
from common.protocol import RpcTransport
from common.report import SessionReport
from session.manager import SessionManager
from users.report import CallReport
from users.service import UserService

logger = logging.getLogger(__name__)


class ExitCode(IntEnum):
    """Exit codes for user commands."""

    SUCCESS = 0
    CONNECT_FAILED = 1  # system.connect or login failed
    REMOTE_FAULT = 2  # Operation answered with a fault
    TRANSPORT_FAILED = 3  # Network failure during the operation
    INVALID_ARGUMENTS = 4  # Rejected locally before the network


_EXIT_CODES = {
    ErrorKind.REMOTE_FAULT: ExitCode.REMOTE_FAULT,
    ErrorKind.TRANSPORT: ExitCode.TRANSPORT_FAILED,
    ErrorKind.VALIDATION: ExitCode.INVALID_ARGUMENTS,
    ErrorKind.CONFIGURATION: ExitCode.INVALID_ARGUMENTS,
    ErrorKind.STATE: ExitCode.CONNECT_FAILED,
}


def run_command(
    config: ConnectionConfig,
    operation: str,
    args: tuple[Any, ...],
    username: str | None = None,
    password: str | None = None,
    transport: RpcTransport | None = None,
    timeout: float | None = None,
) -> int:
    """Run one user operation. Returns exit code.

    The runner:
    - Connects (system.connect)
    - Logs in when username is given
    - Runs the operation and prints its report
    - Logs out again if it logged in
    """
    service = UserService(SessionManager(config, transport=transport))

    try:
        service.connect(timeout=timeout)
        if username:
            service.login(username, password or "", timeout=timeout)
    except ServiceError as e:
        logger.warning(f"Session setup failed: {e}")
        SessionReport(error=e).print()
        if e.kind is ErrorKind.VALIDATION:
            return ExitCode.INVALID_ARGUMENTS
        return ExitCode.CONNECT_FAILED

    SessionReport(session=service.session).print()

    outcome = service.attempt(operation, *args, timeout=timeout)
    CallReport(outcome).print()

    if service.session.authenticated:
        logout = service.attempt("logout", timeout=timeout)
        if not logout.success:
            logger.warning(f"Logout failed: {logout.error}")

    if outcome.success:
        return ExitCode.SUCCESS
    assert outcome.kind is not None
    return _EXIT_CODES[outcome.kind]
