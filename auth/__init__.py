"""Request signing package for services-userclient.

- signer: hmac_sha256_hex, sign, generate_nonce, SignaturePacket, AuthSigner
"""

from auth.signer import (
    AuthSigner,
    SignaturePacket,
    generate_nonce,
    hmac_sha256_hex,
    sign,
)

__all__ = [
    "AuthSigner",
    "SignaturePacket",
    "generate_nonce",
    "hmac_sha256_hex",
    "sign",
]
