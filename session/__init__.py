"""Session package for services-userclient.

This package handles the session lifecycle after configuration:
- Immutable Session snapshots and their states
- connect / login / logout round trips
- Signed calls bound to the current session id
- Tagged call outcomes
"""

from session.lifecycle import signed_call, system_connect, user_login, user_logout
from session.manager import SessionManager
from session.result import CallOutcome, capture
from session.state import DISCONNECTED_SESSION, Session, SessionState

__all__ = [
    "CallOutcome",
    "DISCONNECTED_SESSION",
    "Session",
    "SessionManager",
    "SessionState",
    "capture",
    "signed_call",
    "system_connect",
    "user_login",
    "user_logout",
]
