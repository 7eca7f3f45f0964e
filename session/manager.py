"""Session manager for services-userclient.

Contains SessionManager, which owns the connection configuration and the
current Session snapshot, and drives connect -> login -> logout.
"""

import logging
import threading
from collections.abc import Iterable
from typing import Any

from auth.signer import AuthSigner
from common.config import ConnectionConfig
from common.errors import StateError, ValidationError
from common.protocol import RpcTransport
from common.transport import XmlRpcTransport
from session.lifecycle import signed_call, system_connect, user_login, user_logout
from session.state import DISCONNECTED_SESSION, Session

logger = logging.getLogger(__name__)


class SessionManager:
    """Serialized access to one session on one services endpoint.

    Every public operation holds the instance lock for its whole round
    trip. The stored snapshot is replaced only after a successful
    response, so a failed call leaves the state as it was.
    """

    def __init__(
        self,
        config: ConnectionConfig,
        transport: RpcTransport | None = None,
        signer: AuthSigner | None = None,
    ) -> None:
        self.config = config
        self.transport: RpcTransport = transport if transport is not None else XmlRpcTransport(config)
        if signer is None and config.has_credentials:
            signer = AuthSigner.from_config(config)
        self._signer = signer
        self._session = DISCONNECTED_SESSION
        self._lock = threading.Lock()

    @property
    def session(self) -> Session:
        """Current snapshot."""
        return self._session

    @property
    def signer(self) -> AuthSigner:
        """Signer for privileged calls.

        Raises ValidationError if the config has no secret or app_id.
        """
        if self._signer is None:
            if not self.config.secret:
                raise ValidationError("API key required for signed calls")
            raise ValidationError("Application domain required for signed calls")
        return self._signer

    def connect(self, timeout: float | None = None) -> Session:
        """Open a session. Must be called first on a fresh manager."""
        with self._lock:
            self._session = system_connect(self.transport, self._session, timeout=timeout)
            return self._session

    def login(self, username: str, password: str, timeout: float | None = None) -> Session:
        """Log in. Allowed when connected or already logged in."""
        with self._lock:
            if not self._session.connected:
                raise StateError("login requires a connected session, call connect() first")
            self._session = user_login(
                self.transport, self.signer, self._session, username, password, timeout=timeout
            )
            return self._session

    def logout(self, timeout: float | None = None) -> Session:
        """Log out the current user."""
        with self._lock:
            if not self._session.authenticated:
                raise StateError(f"logout requires a logged-in user (state={self._session.state.value})")
            self._session = user_logout(self.transport, self.signer, self._session, timeout=timeout)
            return self._session

    def call(self, method: str, args: Iterable[object] = (), timeout: float | None = None) -> Any:
        """Send a signed call with the current session id and return its result."""
        with self._lock:
            if not self._session.connected:
                raise StateError(f"{method} requires a connected session, call connect() first")
            return signed_call(
                self.transport, self.signer, self._session, method, args, timeout=timeout
            )

    def mark_disconnected(self) -> Session:
        """Record a connection loss detected by the caller.

        Drops the session id and any logged-in user. connect() must be
        called again before further operations.
        """
        with self._lock:
            if self._session.connected:
                logger.warning(f"Connection lost (session={self._session.session_id})")
            self._session = self._session.with_connection_lost()
            return self._session
