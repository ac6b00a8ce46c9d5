"""Multisig transaction core — assemble, digest, sign, validate."""

from nock_multisig.core.assembler import assemble
from nock_multisig.core.digest import signing_payload, spend_digest
from nock_multisig.core.ledger import add_signature, try_add_signature
from nock_multisig.core.models import (
    Lock,
    Note,
    NoteName,
    Output,
    PkhCondition,
    PkhLock,
    Seeds,
    SigningStatus,
    Spend,
    Transaction,
    pkh_lock,
)
from nock_multisig.core.policy import DuplicateKeyPolicy
from nock_multisig.core.validator import (
    ValidationIncomplete,
    ValidationPassed,
    require_valid,
    signing_status,
    validate,
)

__all__ = [
    "DuplicateKeyPolicy",
    "Lock",
    "Note",
    "NoteName",
    "Output",
    "PkhCondition",
    "PkhLock",
    "Seeds",
    "SigningStatus",
    "Spend",
    "Transaction",
    "ValidationIncomplete",
    "ValidationPassed",
    "add_signature",
    "assemble",
    "pkh_lock",
    "require_valid",
    "signing_payload",
    "signing_status",
    "spend_digest",
    "try_add_signature",
    "validate",
]
