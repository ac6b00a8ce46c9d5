"""Signing-backend contract.

A backend (browser wallet extension, hardware device, local key) receives a
spend's digest and answers with the signer's public key and a signature.
The core treats both as opaque strings and only checks that the key belongs
to the spend's lock.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from nock_multisig.core.digest import check_spend_index
from nock_multisig.core.ledger import add_signature
from nock_multisig.errors.multisig_errors import MultisigError

if TYPE_CHECKING:
    from nock_multisig.core.models import Transaction

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class SignedDigest:
    """A backend's answer to a signing request."""

    public_key: str
    signature: str


class SigningBackendError(MultisigError):
    """Base error raised by signing backends."""

    def __init__(self, message: str, *, status_code: int = 502, code: str = "signer-error") -> None:
        super().__init__(message, status_code=status_code, code=code)


class UserRejectedError(SigningBackendError):
    """The user declined the signing request."""

    def __init__(self, message: str = "signing request rejected by user") -> None:
        super().__init__(message, status_code=409, code="signer-rejected")


class WalletNotConnectedError(SigningBackendError):
    """No wallet is connected to answer signing requests."""

    def __init__(self, message: str = "no signing wallet connected") -> None:
        super().__init__(message, status_code=503, code="signer-not-connected")


@runtime_checkable
class SigningBackend(Protocol):
    """Anything that can sign a hex digest."""

    async def sign(self, digest: str) -> SignedDigest: ...


async def collect_signature(
    tx: Transaction,
    spend_index: int,
    backend: SigningBackend,
) -> Transaction:
    """Ask *backend* to sign spend *spend_index* and record the result.

    The backend signs the spend's stored ``message_hash``.  Backend failures
    propagate unchanged and leave *tx* untouched.

    Raises:
        SpendIndexOutOfRange: If *spend_index* does not address a spend.
        UnauthorizedSigner: If the backend's key is not in the spend's lock.
        SigningBackendError: If the backend fails or the user declines.
    """
    check_spend_index(tx, spend_index)
    digest = tx.spends[spend_index].seeds.message_hash
    signed = await backend.sign(digest)
    logger.debug("Backend %s signed spend %d", signed.public_key, spend_index)
    return add_signature(tx, spend_index, signed.public_key, signed.signature)
