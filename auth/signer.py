"""Per-call request signing for services-userclient.

Every privileged call carries an HMAC-SHA256 over
"timestamp;app_id;nonce;method", keyed by the API key shared with the
service. The service rejects stale or replayed tuples, so a packet is
minted right before the call it authenticates and never reused.

This module provides:
- hmac_sha256_hex(): Keyed hash primitive (lowercase hex)
- sign(): Signature for one (timestamp, nonce, app_id, method) tuple
- SignaturePacket: Timestamp, nonce and hash for a single call
- AuthSigner: Mints fresh packets from a secret and app id
"""

import itertools
import logging
import secrets
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Union

from cryptography.hazmat.primitives import hashes, hmac

from common.config import ConnectionConfig
from common.errors import ValidationError
from common.protocol import NONCE_PREFIX, NONCE_RANDOM_BYTES, SIGNATURE_SEPARATOR, TRACE

logger = logging.getLogger(__name__)

# Process-wide, so two signers never hand out the same nonce
_nonce_counter = itertools.count(1)
_nonce_lock = threading.Lock()


def hmac_sha256_hex(key: Union[str, bytes], message: Union[str, bytes]) -> str:
    """Return the lowercase hex HMAC-SHA256 of `message` keyed by `key`."""
    if isinstance(key, str):
        key = key.encode("utf-8")
    if isinstance(message, str):
        message = message.encode("utf-8")

    h = hmac.HMAC(key, hashes.SHA256())
    h.update(message)
    return h.finalize().hex()


def sign(secret: str, app_id: str, method: str, timestamp: str, nonce: str) -> str:
    """Compute the signature for one call.

    Args:
        secret: API key shared with the service
        app_id: Application domain the key is scoped to
        method: Remote method name, e.g. user.login
        timestamp: Seconds since epoch, string form
        nonce: Single-use value

    Returns:
        Lowercase hex digest

    Raises:
        ValidationError: If secret or app_id is empty
    """
    if not secret:
        raise ValidationError("API key required for signed calls")
    if not app_id:
        raise ValidationError("Application domain required for signed calls")

    data = SIGNATURE_SEPARATOR.join((timestamp, app_id, nonce, method))
    return hmac_sha256_hex(secret, data)


def generate_nonce() -> str:
    """Generate a nonce unique within this process.

    Random hex plus a monotonic counter, so uniqueness does not depend on
    the random part alone.
    """
    with _nonce_lock:
        seq = next(_nonce_counter)
    return f"{NONCE_PREFIX}{secrets.token_hex(NONCE_RANDOM_BYTES)}.{seq:x}"


@dataclass(frozen=True)
class SignaturePacket:
    """Signature material for exactly one call."""

    timestamp: str
    nonce: str
    hash: str
    method: str


class AuthSigner:
    """Mints a fresh SignaturePacket for each signed call."""

    def __init__(
        self,
        secret: str | None,
        app_id: str | None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret:
            raise ValidationError("API key required for signed calls")
        if not app_id:
            raise ValidationError("Application domain required for signed calls")
        self._secret = secret
        self.app_id = app_id
        self._clock = clock

    @classmethod
    def from_config(cls, config: ConnectionConfig) -> "AuthSigner":
        """Build a signer from the config credentials.

        Raises ValidationError if the config has no secret or app_id.
        """
        return cls(config.secret, config.app_id)

    def sign(self, method: str, timestamp: str, nonce: str) -> str:
        """Sign an explicit (timestamp, nonce, method) tuple."""
        return sign(self._secret, self.app_id, method, timestamp, nonce)

    def fresh_challenge(self, method: str) -> SignaturePacket:
        """Mint a new packet for `method`. Call right before sending."""
        timestamp = str(int(self._clock()))
        nonce = generate_nonce()
        packet = SignaturePacket(
            timestamp=timestamp,
            nonce=nonce,
            hash=self.sign(method, timestamp, nonce),
            method=method,
        )
        logger.log(TRACE, f"Signed {method} (timestamp={timestamp}, nonce={nonce})")
        return packet
