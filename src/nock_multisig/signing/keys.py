"""Local secp256k1 signer — development and test backend.

Keys are compressed SEC public keys in hex; signatures are DER-encoded
RFC 6979 deterministic ECDSA over the 32 digest bytes, also in hex.
"""

from __future__ import annotations

import hashlib
from typing import Self

from ecdsa import SECP256k1, BadSignatureError, SigningKey, VerifyingKey
from ecdsa.der import UnexpectedDER
from ecdsa.errors import MalformedPointError
from ecdsa.util import sigdecode_der, sigencode_der

from nock_multisig.signing.backend import SignedDigest, UserRejectedError

_CURVE = SECP256k1


def _digest_bytes(digest: str) -> bytes:
    raw = bytes.fromhex(digest)
    if len(raw) != 32:
        msg = f"Digest must be 32 bytes, got {len(raw)}"
        raise ValueError(msg)
    return raw


def public_key_hex(privkey_bytes: bytes) -> str:
    """Derive the compressed public key (hex) of a 32-byte private key."""
    sk = SigningKey.from_string(privkey_bytes, curve=_CURVE)
    return sk.get_verifying_key().to_string("compressed").hex()


def sign_digest(privkey_bytes: bytes, digest: str) -> str:
    """Sign a hex digest, returning a hex DER signature."""
    sk = SigningKey.from_string(privkey_bytes, curve=_CURVE)
    return sk.sign_digest_deterministic(
        _digest_bytes(digest),
        hashfunc=hashlib.sha256,
        sigencode=sigencode_der,
    ).hex()


def verify_signature(pubkey_hex: str, digest: str, signature_hex: str) -> bool:
    """Check a hex DER signature over a hex digest. Returns False on any mismatch."""
    try:
        vk = VerifyingKey.from_string(bytes.fromhex(pubkey_hex), curve=_CURVE)
        return vk.verify_digest(
            bytes.fromhex(signature_hex),
            _digest_bytes(digest),
            sigdecode=sigdecode_der,
        )
    except (BadSignatureError, MalformedPointError, UnexpectedDER, ValueError):
        return False


class LocalKeySigner:
    """Signing backend backed by an in-memory private key."""

    def __init__(self, privkey_bytes: bytes, *, approve: bool = True) -> None:
        if len(privkey_bytes) != 32:
            msg = f"Private key must be 32 bytes, got {len(privkey_bytes)}"
            raise ValueError(msg)
        self._privkey = privkey_bytes
        self._approve = approve
        self.public_key = public_key_hex(privkey_bytes)

    @classmethod
    def generate(cls, *, approve: bool = True) -> Self:
        """Create a signer with a fresh random key."""
        return cls(SigningKey.generate(curve=_CURVE).to_string(), approve=approve)

    async def sign(self, digest: str) -> SignedDigest:
        if not self._approve:
            raise UserRejectedError
        signature = sign_digest(self._privkey, digest)
        return SignedDigest(public_key=self.public_key, signature=signature)
