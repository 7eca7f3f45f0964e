"""Session lifecycle functions for services-userclient.

Implements the client side of the session protocol:
  1. system.connect (anonymous) returns a session id
  2. user.login (signed) may rotate the session id and returns the user
  3. user.logout (signed) ends the authenticated period

Each function takes the current Session snapshot and returns a new one.
A failed call raises and the caller keeps its previous snapshot.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from auth.signer import AuthSigner
from common.envelope import build_anonymous, build_signed
from common.errors import ResponseError, StateError, ValidationError
from common.protocol import Method, RpcTransport
from session.state import DISCONNECTED_SESSION, Session, SessionState

logger = logging.getLogger(__name__)


def _require_connected(session: Session, method: str) -> str:
    if not session.connected or session.session_id is None:
        raise StateError(f"{method} requires a connected session, call connect() first")
    return session.session_id


def _session_id_from(response: Any, method: str) -> str:
    if not isinstance(response, Mapping):
        raise ResponseError(f"{method}: expected a struct, got {type(response).__name__}")
    sessid = response.get("sessid")
    if not isinstance(sessid, str) or not sessid:
        raise ResponseError(f"{method}: response has no sessid")
    return sessid


def signed_call(
    transport: RpcTransport,
    signer: AuthSigner,
    session: Session,
    method: str,
    args: Iterable[object] = (),
    timeout: float | None = None,
) -> Any:
    """Send a signed call with the session id currently held.

    Only requires a connected session; whether the call needs a logged-in
    user is for the service to decide.

    Raises:
        StateError: If the session is not connected.
        ValidationError: If an argument violates the flat shape.
        RemoteFault, TransportError: From the transport.
    """
    session_id = _require_connected(session, method)
    envelope = build_signed(method, session_id, signer, args)
    return transport.call(envelope.method, envelope.params, timeout=timeout)


def system_connect(
    transport: RpcTransport,
    session: Session = DISCONNECTED_SESSION,
    timeout: float | None = None,
) -> Session:
    """Open a session with system.connect.

    Returns a CONNECTED snapshot. Connecting again drops any logged-in user.
    """
    if session.connected:
        logger.info(f"Reconnecting (previous session={session.session_id})")

    envelope = build_anonymous(Method.CONNECT)
    response = transport.call(envelope.method, envelope.params, timeout=timeout)
    sessid = _session_id_from(response, Method.CONNECT)

    logger.info(f"Connected (session={sessid})")
    return session.with_connection(sessid)


def user_login(
    transport: RpcTransport,
    signer: AuthSigner,
    session: Session,
    username: str,
    password: str,
    timeout: float | None = None,
) -> Session:
    """Log in with user.login.

    Re-login from AUTHENTICATED is allowed. Returns an AUTHENTICATED
    snapshot holding the session id from the response.
    """
    if not username or not password:
        raise ValidationError("Username and password are required to login")
    _require_connected(session, Method.LOGIN)

    response = signed_call(
        transport, signer, session, Method.LOGIN, (username, password), timeout=timeout
    )

    sessid = _session_id_from(response, Method.LOGIN)
    user = response.get("user")
    if not isinstance(user, Mapping) or user.get("uid") is None:
        raise ResponseError(f"{Method.LOGIN}: response has no user uid")

    # Only the uid is kept; the rest of the user object is not needed here
    uid = user["uid"]
    if sessid != session.session_id:
        logger.debug(f"Session id rotated on login ({session.session_id} -> {sessid})")
    logger.info(f"Logged in as {username} (uid={uid})")
    return session.with_login(sessid, uid)


def user_logout(
    transport: RpcTransport,
    signer: AuthSigner,
    session: Session,
    timeout: float | None = None,
) -> Session:
    """Log out with user.logout. Returns a CONNECTED snapshot."""
    if session.state is not SessionState.AUTHENTICATED:
        raise StateError(f"{Method.LOGOUT} requires a logged-in user (state={session.state.value})")

    signed_call(transport, signer, session, Method.LOGOUT, timeout=timeout)

    logger.info(f"Logged out (uid={session.user_id})")
    return session.with_logout()
