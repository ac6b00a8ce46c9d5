"""Deterministic per-spend signing digests.

The digest of spend *k* is ``sha256(canonical({k, structure}))`` where
*structure* is the transaction with every spend's signatures removed and
every ``message_hash`` blanked.  Signature state anywhere in the
transaction therefore never changes any digest, and the digest computed at
assembly time equals the one recomputed later from the assembled value.
"""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING

from nock_multisig.core.encoding import encode_signing_payload
from nock_multisig.core.models import Seeds
from nock_multisig.errors.definitions import SpendIndexOutOfRange
from nock_multisig.utils.crypto import sha256_hex

if TYPE_CHECKING:
    from nock_multisig.core.models import Transaction

# Placeholder message_hash used inside the hashed structure.
BLANK_MESSAGE_HASH = ""


def structural_copy(tx: Transaction) -> Transaction:
    """Strip all signing state (signatures and digests) from *tx*."""
    blank = Seeds(message_hash=BLANK_MESSAGE_HASH)
    return dataclasses.replace(
        tx,
        spends=tuple(dataclasses.replace(spend, seeds=blank) for spend in tx.spends),
    )


def check_spend_index(tx: Transaction, spend_index: int) -> None:
    """Raise :class:`SpendIndexOutOfRange` unless *spend_index* addresses a spend."""
    if (
        isinstance(spend_index, bool)
        or not isinstance(spend_index, int)
        or not 0 <= spend_index < len(tx.spends)
    ):
        raise SpendIndexOutOfRange(spend_index, len(tx.spends))


def signing_payload(spend_index: int, tx: Transaction) -> bytes:
    """Return the canonical bytes hashed for spend *spend_index*."""
    check_spend_index(tx, spend_index)
    return encode_signing_payload(spend_index, structural_copy(tx))


def spend_digest(spend_index: int, tx: Transaction) -> str:
    """Return the lowercase hex SHA-256 digest signers of one spend must sign.

    Raises:
        SpendIndexOutOfRange: If *spend_index* is not a valid spend index.
    """
    return sha256_hex(signing_payload(spend_index, tx))


def spend_digests(tx: Transaction) -> tuple[str, ...]:
    """Digests of every spend, in spend order."""
    structure = structural_copy(tx)
    return tuple(
        sha256_hex(encode_signing_payload(i, structure)) for i in range(len(structure.spends))
    )
