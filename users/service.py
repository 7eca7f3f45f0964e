"""User operations for services-userclient.

Contains:
- UserRecord: The user object returned by user.get
- UserService: create / get / update / delete, login / logout
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from common.errors import ResponseError
from common.protocol import Method
from common.values import Record, Scalar
from session.manager import SessionManager
from session.result import CallOutcome, capture
from session.state import Session

logger = logging.getLogger(__name__)


@dataclass
class UserRecord:
    """A user object as returned by the service.

    Only uid, name and mail are modelled; every other field is kept
    verbatim in extra.
    """

    uid: Any
    name: str | None = None
    mail: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_response(cls, response: Any) -> "UserRecord":
        """Build from a user.get response.

        Raises ResponseError if the response is not a struct with a uid.
        """
        if not isinstance(response, Mapping) or response.get("uid") is None:
            raise ResponseError(f"{Method.GET}: response is not a user struct")
        extra = {k: v for k, v in response.items() if k not in ("uid", "name", "mail")}
        return cls(
            uid=response["uid"],
            name=response.get("name"),
            mail=response.get("mail"),
            extra=extra,
        )


class UserService:
    """User lifecycle operations over one SessionManager.

    Operations need a connected session. Whether they also need a
    logged-in user is enforced by the service, not here.
    """

    def __init__(self, manager: SessionManager) -> None:
        self.manager = manager

    @property
    def session(self) -> Session:
        return self.manager.session

    def connect(self, timeout: float | None = None) -> Session:
        return self.manager.connect(timeout=timeout)

    def login(self, username: str, password: str, timeout: float | None = None) -> Session:
        return self.manager.login(username, password, timeout=timeout)

    def logout(self, timeout: float | None = None) -> Session:
        return self.manager.logout(timeout=timeout)

    def create(self, name: str, password: str, mail: str, timeout: float | None = None) -> Any:
        """Create a user. Returns the new user id."""
        account = Record({"name": name, "pass": password, "mail": mail})
        user_id = self.manager.call(Method.SAVE, (account,), timeout=timeout)
        logger.info(f"Created user {name} (uid={user_id})")
        return user_id

    def update(
        self,
        user_id: Any,
        name: str,
        password: str,
        mail: str,
        timeout: float | None = None,
    ) -> None:
        """Replace the name, password and mail of an existing user."""
        account = Record({"uid": user_id, "name": name, "pass": password, "mail": mail})
        self.manager.call(Method.SAVE, (account,), timeout=timeout)
        logger.info(f"Updated user {user_id}")

    def delete(self, user_id: Any, timeout: float | None = None) -> None:
        """Delete a user."""
        self.manager.call(Method.DELETE, (Scalar(user_id),), timeout=timeout)
        logger.info(f"Deleted user {user_id}")

    def get(self, user_id: Any, timeout: float | None = None) -> UserRecord:
        """Fetch a user."""
        response = self.manager.call(Method.GET, (Scalar(user_id),), timeout=timeout)
        return UserRecord.from_response(response)

    def attempt(self, operation: str, *args: Any, **kwargs: Any) -> CallOutcome:
        """Run a named operation and return a CallOutcome instead of raising.

        operation is one of connect, login, logout, create, update,
        delete or get.
        """
        if operation not in _OPERATIONS:
            raise ValueError(f"Unknown operation: {operation!r}")
        return capture(operation, getattr(self, operation), *args, **kwargs)


_OPERATIONS = frozenset({"connect", "login", "logout", "create", "update", "delete", "get"})
