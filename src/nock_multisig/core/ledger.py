"""Signature ledger — attach signatures to spends.

Every call returns a new :class:`Transaction`; the caller's value is never
mutated.  Untouched spends and outputs are shared between the old and new
values, which is safe because all of them are frozen.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING

from nock_multisig.core.digest import check_spend_index
from nock_multisig.errors.definitions import UnauthorizedSigner

if TYPE_CHECKING:
    from nock_multisig.core.models import PublicKey, Signature, Transaction

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class SignatureAccepted:
    """The signature was recorded."""

    transaction: Transaction
    accepted: bool = dataclasses.field(default=True, init=False)


@dataclasses.dataclass(frozen=True)
class SignatureRejected:
    """The signer is not part of the spend's policy; nothing changed."""

    error: UnauthorizedSigner
    accepted: bool = dataclasses.field(default=False, init=False)


SignatureResult = SignatureAccepted | SignatureRejected


def add_signature(
    tx: Transaction,
    spend_index: int,
    pubkey: PublicKey,
    signature: Signature,
) -> Transaction:
    """Record *signature* from *pubkey* on spend *spend_index*.

    Re-signing with a key that already signed drops its old entry and
    appends the new one (last write wins); a new key is appended.  The
    signature itself is not verified, only the signer's membership in the
    spend's lock.

    Raises:
        SpendIndexOutOfRange: If *spend_index* does not address a spend.
        UnauthorizedSigner: If *pubkey* is not allowed by the spend's lock.
    """
    check_spend_index(tx, spend_index)
    spend = tx.spends[spend_index]
    if not spend.lock.allows(pubkey):
        logger.warning("Rejected signer %s for spend %d", pubkey, spend_index)
        raise UnauthorizedSigner(spend_index, pubkey)

    replaced = spend.seeds.has_signature(pubkey)
    updated = dataclasses.replace(spend, seeds=spend.seeds.with_signature(pubkey, signature))
    logger.debug(
        "%s signature from %s on spend %d",
        "Replaced" if replaced else "Added",
        pubkey,
        spend_index,
    )
    return tx.with_spend(spend_index, updated)


def try_add_signature(
    tx: Transaction,
    spend_index: int,
    pubkey: PublicKey,
    signature: Signature,
) -> SignatureResult:
    """Like :func:`add_signature`, but an unauthorized signer is a result, not an error.

    Raises:
        SpendIndexOutOfRange: If *spend_index* does not address a spend.
    """
    try:
        return SignatureAccepted(add_signature(tx, spend_index, pubkey, signature))
    except UnauthorizedSigner as exc:
        return SignatureRejected(exc)
