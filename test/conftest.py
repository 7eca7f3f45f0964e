"""pytest configuration and fixtures for services-userclient tests.

Provides:
- MockTransport: Scripted RpcTransport that records every call
- BlockingTransport: MockTransport that holds one method until released
- FakeServicesServer: In-process XML-RPC server that checks signatures
- DroppingServer: Keep-alive HTTP server that drops one request unanswered
- Markers for unit vs integration tests
"""

import threading
import xmlrpc.client
from collections.abc import Generator
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any
from xmlrpc.server import SimpleXMLRPCRequestHandler, SimpleXMLRPCServer

import pytest

from auth.signer import AuthSigner, sign
from common.config import ConnectionConfig
from common.protocol import Method
from session.manager import SessionManager
from users.service import UserService

SECRET = "s3cret-api-key"
APP_ID = "app.example.com"
SERVER_PATH = "services/xmlrpc"


@dataclass
class RecordedCall:
    """One call seen by MockTransport."""

    method: str
    params: tuple[Any, ...]
    timeout: float | None


class MockTransport:
    """Mock RpcTransport for unit testing.

    Responses are queued per method name and consumed in order. A queued
    exception instance is raised instead of returned. Methods with no
    queued response return None.
    """

    def __init__(self) -> None:
        self.calls: list[RecordedCall] = []
        self._responses: dict[str, list[Any]] = {}
        self._lock = threading.Lock()

    def respond(self, method: str, *values: Any) -> "MockTransport":
        """Queue responses (or exceptions) for method."""
        with self._lock:
            self._responses.setdefault(method, []).extend(values)
        return self

    def call(self, method: str, params: Any, timeout: float | None = None) -> Any:
        with self._lock:
            self.calls.append(RecordedCall(method, tuple(params), timeout))
            queued = self._responses.get(method)
            value = queued.pop(0) if queued else None
        if isinstance(value, BaseException):
            raise value
        return value

    def last(self, method: str | None = None) -> RecordedCall:
        """Return the most recent call, optionally for one method."""
        calls = [c for c in self.calls if method is None or c.method == method]
        assert calls, f"no calls recorded for {method}"
        return calls[-1]


class BlockingTransport(MockTransport):
    """MockTransport that holds the first call to one method until released."""

    def __init__(self, method: str) -> None:
        super().__init__()
        self.method = method
        self.entered = threading.Event()
        self.release = threading.Event()

    def call(self, method: str, params: Any, timeout: float | None = None) -> Any:
        if method == self.method and not self.release.is_set():
            self.entered.set()
            assert self.release.wait(timeout=5), "BlockingTransport never released"
        return super().call(method, params, timeout)


class FixedClock:
    """Clock returning a settable time."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class _Handler(SimpleXMLRPCRequestHandler):
    rpc_paths = ("/" + SERVER_PATH,)


class FakeServicesServer:
    """Minimal services endpoint with user storage.

    Verifies the signature of every privileged call against SECRET and
    APP_ID, rejects reused nonces and rotates the session id on login.
    """

    def __init__(self) -> None:
        self._server = SimpleXMLRPCServer(
            ("127.0.0.1", 0), requestHandler=_Handler, logRequests=False, allow_none=True
        )
        self.port = self._server.server_address[1]
        self.accounts = {"admin": "adminpw"}
        self.users: dict[int, dict[str, Any]] = {1: {"uid": 1, "name": "admin", "mail": "admin@example.com"}}
        self.sessions: dict[str, int | None] = {}
        self.seen_nonces: set[str] = set()
        self._next_uid = 2
        self._next_sessid = 1
        self._thread: threading.Thread | None = None

        self._server.register_function(self._connect, Method.CONNECT)
        self._server.register_function(self._login, Method.LOGIN)
        self._server.register_function(self._logout, Method.LOGOUT)
        self._server.register_function(self._save, Method.SAVE)
        self._server.register_function(self._delete, Method.DELETE)
        self._server.register_function(self._get, Method.GET)

    def start(self) -> None:
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._server.shutdown()
        self._server.server_close()
        if self._thread is not None:
            self._thread.join(timeout=5)

    def _new_sessid(self) -> str:
        sessid = f"sess{self._next_sessid}"
        self._next_sessid += 1
        return sessid

    def _check(self, method: str, hash_: str, app_id: str, timestamp: str, nonce: str, sessid: str) -> None:
        if app_id != APP_ID:
            raise xmlrpc.client.Fault(401, "Access denied: unknown domain")
        if nonce in self.seen_nonces:
            raise xmlrpc.client.Fault(401, "Token has been used previously for a request")
        if hash_ != sign(SECRET, app_id, method, timestamp, nonce):
            raise xmlrpc.client.Fault(401, "Invalid API key")
        if sessid not in self.sessions:
            raise xmlrpc.client.Fault(401, "Invalid session")
        self.seen_nonces.add(nonce)

    def _require_login(self, sessid: str) -> None:
        if self.sessions.get(sessid) is None:
            raise xmlrpc.client.Fault(401, "Access denied")

    def _connect(self) -> dict[str, Any]:
        sessid = self._new_sessid()
        self.sessions[sessid] = None
        return {"sessid": sessid, "user": {"uid": 0}}

    def _login(self, hash_, app_id, timestamp, nonce, sessid, username, password):
        self._check(Method.LOGIN, hash_, app_id, timestamp, nonce, sessid)
        if self.accounts.get(username) != password:
            raise xmlrpc.client.Fault(401, "Wrong username or password.")
        uid = next(u["uid"] for u in self.users.values() if u["name"] == username)
        del self.sessions[sessid]
        new_sessid = self._new_sessid()
        self.sessions[new_sessid] = uid
        return {"sessid": new_sessid, "user": dict(self.users[uid])}

    def _logout(self, hash_, app_id, timestamp, nonce, sessid):
        self._check(Method.LOGOUT, hash_, app_id, timestamp, nonce, sessid)
        self._require_login(sessid)
        self.sessions[sessid] = None
        return True

    def _save(self, hash_, app_id, timestamp, nonce, sessid, account):
        self._check(Method.SAVE, hash_, app_id, timestamp, nonce, sessid)
        self._require_login(sessid)
        if "uid" in account:
            uid = int(account["uid"])
            if uid not in self.users:
                raise xmlrpc.client.Fault(404, "User not found")
        else:
            uid = self._next_uid
            self._next_uid += 1
        self.users[uid] = {"uid": uid, "name": account["name"], "mail": account["mail"], "status": 1}
        self.accounts[account["name"]] = account["pass"]
        return uid

    def _delete(self, hash_, app_id, timestamp, nonce, sessid, uid):
        self._check(Method.DELETE, hash_, app_id, timestamp, nonce, sessid)
        self._require_login(sessid)
        if self.users.pop(int(uid), None) is None:
            raise xmlrpc.client.Fault(404, "User not found")
        return True

    def _get(self, hash_, app_id, timestamp, nonce, sessid, uid):
        self._check(Method.GET, hash_, app_id, timestamp, nonce, sessid)
        user = self.users.get(int(uid))
        if user is None:
            raise xmlrpc.client.Fault(404, "User not found")
        return user


class _DroppingHandler(BaseHTTPRequestHandler):
    protocol_version = "HTTP/1.1"

    def log_message(self, format: str, *args: Any) -> None:
        pass

    def do_POST(self) -> None:
        body = self.rfile.read(int(self.headers["Content-Length"]))
        params, method = xmlrpc.client.loads(body)
        server: DroppingServer = self.server.owner  # type: ignore[attr-defined]
        with server.lock:
            server.requests.append((method, params))
            drop = method == server.drop_method
        if drop:
            # Close the kept-alive connection without answering
            self.close_connection = True
            return
        payload = xmlrpc.client.dumps((server.results.get(method),), methodresponse=True, allow_none=True)
        data = payload.encode("utf-8")
        self.send_response(200)
        self.send_header("Content-Type", "text/xml")
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)


class DroppingServer:
    """HTTP/1.1 keep-alive XML-RPC endpoint that never answers one method.

    Every request is recorded. Requests for drop_method are read and the
    connection is closed without a response; other methods get the
    canned value in results.
    """

    def __init__(self, drop_method: str, results: dict[str, Any]) -> None:
        self._server = ThreadingHTTPServer(("127.0.0.1", 0), _DroppingHandler)
        self._server.daemon_threads = True
        self._server.owner = self  # type: ignore[attr-defined]
        self.port = self._server.server_address[1]
        self.drop_method = drop_method
        self.results = results
        self.requests: list[tuple[str, tuple[Any, ...]]] = []
        self.lock = threading.Lock()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._server.shutdown()
        self._server.server_close()
        if self._thread is not None:
            self._thread.join(timeout=5)

    def received(self, method: str) -> list[tuple[Any, ...]]:
        """Params of every request received for method."""
        with self.lock:
            return [params for name, params in self.requests if name == method]


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test (local XML-RPC server)")


@pytest.fixture
def config() -> ConnectionConfig:
    return ConnectionConfig(
        server=SERVER_PATH, host="example.com", port=80, secret=SECRET, app_id=APP_ID
    )


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def signer(clock: FixedClock) -> AuthSigner:
    return AuthSigner(SECRET, APP_ID, clock=clock)


@pytest.fixture
def transport() -> MockTransport:
    return MockTransport()


@pytest.fixture
def manager(config: ConnectionConfig, transport: MockTransport, signer: AuthSigner) -> SessionManager:
    return SessionManager(config, transport=transport, signer=signer)


@pytest.fixture
def connected(manager: SessionManager, transport: MockTransport) -> SessionManager:
    """SessionManager already connected with session id S1."""
    transport.respond(Method.CONNECT, {"sessid": "S1"})
    manager.connect()
    return manager


@pytest.fixture
def service(manager: SessionManager) -> UserService:
    return UserService(manager)


@pytest.fixture
def services_server() -> Generator[FakeServicesServer, None, None]:
    """Start a FakeServicesServer on a free local port."""
    server = FakeServicesServer()
    server.start()
    try:
        yield server
    finally:
        server.stop()


@pytest.fixture
def server_config(services_server: FakeServicesServer) -> ConnectionConfig:
    return ConnectionConfig(
        server=SERVER_PATH,
        host="127.0.0.1",
        port=services_server.port,
        secret=SECRET,
        app_id=APP_ID,
    )


@pytest.fixture
def dropping_server() -> Generator[DroppingServer, None, None]:
    """Keep-alive endpoint that answers system.connect and drops user.get."""
    server = DroppingServer(Method.GET, {Method.CONNECT: {"sessid": "S1"}})
    server.start()
    try:
        yield server
    finally:
        server.stop()
