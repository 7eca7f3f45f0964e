"""Call envelope building for services-userclient.

Contains functions for assembling the positional parameters of a call:
- Anonymous calls (system.connect)
- Signed calls, prefixed with [hash, app_id, timestamp, nonce, session_id]
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from auth.signer import AuthSigner
from common.errors import ValidationError
from common.protocol import TRACE
from common.values import to_argument, to_wire

logger = logging.getLogger(__name__)

# Number of positional parameters a signed call carries before its own args
SIGNED_PREFIX_SIZE = 5


@dataclass(frozen=True)
class CallEnvelope:
    """A method name and its ordered wire parameters."""

    method: str
    params: tuple[Any, ...]


def _convert(args: Iterable[object]) -> tuple[Any, ...]:
    return tuple(to_wire(to_argument(arg)) for arg in args)


def build_anonymous(method: str, args: Iterable[object] = ()) -> CallEnvelope:
    """Wrap args as the method's positional parameters, no signature."""
    envelope = CallEnvelope(method=method, params=_convert(args))
    logger.log(TRACE, f"Built anonymous {method} ({len(envelope.params)} params)")
    return envelope


def build_signed(
    method: str,
    session_id: str,
    signer: AuthSigner,
    args: Iterable[object] = (),
) -> CallEnvelope:
    """Build a signed call with a freshly minted signature packet.

    Params: [hash, app_id, timestamp, nonce, session_id, *args]

    Raises ValidationError if session_id is empty or an argument is nested.
    """
    if not session_id:
        raise ValidationError(f"Session id required for {method}")

    # Convert first so a rejected argument never consumes a nonce
    converted = _convert(args)
    packet = signer.fresh_challenge(method)
    envelope = CallEnvelope(
        method=method,
        params=(
            packet.hash,
            signer.app_id,
            packet.timestamp,
            packet.nonce,
            session_id,
        )
        + converted,
    )
    logger.log(TRACE, f"Built signed {method} (session={session_id}, {len(converted)} args)")
    return envelope
