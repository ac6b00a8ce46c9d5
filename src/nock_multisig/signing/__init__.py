"""Signing-backend boundary — external signers and a local reference signer."""

from nock_multisig.signing.backend import (
    SignedDigest,
    SigningBackend,
    SigningBackendError,
    UserRejectedError,
    WalletNotConnectedError,
    collect_signature,
)
from nock_multisig.signing.keys import LocalKeySigner

__all__ = [
    "LocalKeySigner",
    "SignedDigest",
    "SigningBackend",
    "SigningBackendError",
    "UserRejectedError",
    "WalletNotConnectedError",
    "collect_signature",
]
