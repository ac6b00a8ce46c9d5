"""Signing status and completeness validation.

``validate`` never raises for an unfinished transaction.  It returns either
:class:`ValidationPassed` or :class:`ValidationIncomplete`, the latter listing
every problem found so a caller can show feedback per spend.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING, ClassVar

from nock_multisig.core import policy
from nock_multisig.core.digest import check_spend_index, spend_digests
from nock_multisig.core.models import SigningStatus
from nock_multisig.errors.definitions import TransactionIncomplete

if TYPE_CHECKING:
    from nock_multisig.core.models import PublicKey, Transaction
    from nock_multisig.core.policy import DuplicateKeyPolicy

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Reasons
# ---------------------------------------------------------------------------


@dataclasses.dataclass(frozen=True)
class BalanceMismatch:
    """Inputs and outputs carry different totals."""

    total_input: int
    total_output: int
    code: ClassVar[str] = "balance-mismatch"

    @property
    def delta(self) -> int:
        return self.total_input - self.total_output

    @property
    def message(self) -> str:
        return (
            f"inputs total {self.total_input} but outputs total {self.total_output} "
            f"(delta {self.delta})"
        )


@dataclasses.dataclass(frozen=True)
class SpendIncomplete:
    """A spend does not have enough authorized signatures yet."""

    spend_index: int
    threshold: int
    signed_count: int
    pending: tuple[PublicKey, ...]
    code: ClassVar[str] = "spend-incomplete"

    @property
    def message(self) -> str:
        return (
            f"spend {self.spend_index} has {self.signed_count}/{self.threshold} "
            f"signatures; pending: {', '.join(self.pending) or 'none'}"
        )


@dataclasses.dataclass(frozen=True)
class MalformedLock:
    """A spend's lock is not well-formed under the key policy."""

    spend_index: int
    detail: str
    code: ClassVar[str] = "malformed-lock"

    @property
    def message(self) -> str:
        return f"spend {self.spend_index} lock is malformed: {self.detail}"


@dataclasses.dataclass(frozen=True)
class DigestMismatch:
    """A spend's stored message_hash does not match its recomputed digest."""

    spend_index: int
    expected: str
    actual: str
    code: ClassVar[str] = "digest-mismatch"

    @property
    def message(self) -> str:
        return f"spend {self.spend_index} message_hash does not match transaction content"


ValidationReason = BalanceMismatch | SpendIncomplete | MalformedLock | DigestMismatch


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclasses.dataclass(frozen=True)
class ValidationSummary:
    """Totals and per-spend signing status of a validated transaction."""

    total_input: int
    total_output: int
    statuses: tuple[SigningStatus, ...]

    @property
    def complete_spends(self) -> int:
        return sum(1 for s in self.statuses if s.complete)


@dataclasses.dataclass(frozen=True)
class ValidationPassed:
    """The transaction is balanced and every spend is fully signed."""

    summary: ValidationSummary
    valid: ClassVar[bool] = True
    reasons: ClassVar[tuple[ValidationReason, ...]] = ()


@dataclasses.dataclass(frozen=True)
class ValidationIncomplete:
    """The transaction is not ready to broadcast; *reasons* says why."""

    summary: ValidationSummary
    reasons: tuple[ValidationReason, ...]
    valid: ClassVar[bool] = False

    @property
    def pending_by_spend(self) -> dict[int, tuple[PublicKey, ...]]:
        """Pending signers of every incomplete spend, keyed by spend index."""
        return {r.spend_index: r.pending for r in self.reasons if isinstance(r, SpendIncomplete)}


ValidationResult = ValidationPassed | ValidationIncomplete


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


def _status(
    tx: Transaction,
    spend_index: int,
    duplicate_keys: DuplicateKeyPolicy,
) -> SigningStatus:
    spend = tx.spends[spend_index]
    lock = spend.lock
    present = set(spend.seeds.signers)
    authorized = policy.authorized_keys(lock)
    signed = tuple(pk for pk in authorized if pk in present)
    pending = tuple(pk for pk in authorized if pk not in present)
    return SigningStatus(
        spend_index=spend_index,
        threshold=policy.threshold(lock),
        signed=signed,
        pending=pending,
        complete=policy.is_satisfied(lock, signed, duplicate_keys),
    )


def signing_status(
    tx: Transaction,
    spend_index: int,
    *,
    duplicate_keys: DuplicateKeyPolicy = policy.DEFAULT_DUPLICATE_POLICY,
) -> SigningStatus:
    """Return the signing progress of one spend.

    Signature entries from keys outside the spend's lock are ignored.

    Raises:
        SpendIndexOutOfRange: If *spend_index* does not address a spend.
    """
    check_spend_index(tx, spend_index)
    return _status(tx, spend_index, duplicate_keys)


def validate(
    tx: Transaction,
    *,
    duplicate_keys: DuplicateKeyPolicy = policy.DEFAULT_DUPLICATE_POLICY,
    verify_digests: bool = True,
) -> ValidationResult:
    """Decide whether *tx* is balanced and fully signed.

    Args:
        tx: Transaction to check, assembled or imported.
        duplicate_keys: Policy for duplicate keys inside a lock.
        verify_digests: Also compare every stored ``message_hash`` with the
            digest recomputed from the transaction content.
    """
    reasons: list[ValidationReason] = []

    if not tx.is_balanced:
        reasons.append(BalanceMismatch(tx.total_input, tx.total_output))

    expected = spend_digests(tx) if verify_digests else ()
    statuses = []
    for index, spend in enumerate(tx.spends):
        problem = policy.lock_problem(spend.lock, duplicate_keys)
        if problem is not None:
            reasons.append(MalformedLock(index, problem))

        if verify_digests and spend.seeds.message_hash != expected[index]:
            logger.warning("Spend %d message_hash does not match its content", index)
            reasons.append(DigestMismatch(index, expected[index], spend.seeds.message_hash))

        status = _status(tx, index, duplicate_keys)
        statuses.append(status)
        if not status.complete:
            reasons.append(
                SpendIncomplete(index, status.threshold, status.signed_count, status.pending)
            )

    summary = ValidationSummary(tx.total_input, tx.total_output, tuple(statuses))
    if reasons:
        return ValidationIncomplete(summary, tuple(reasons))
    return ValidationPassed(summary)


def require_valid(
    tx: Transaction,
    *,
    duplicate_keys: DuplicateKeyPolicy = policy.DEFAULT_DUPLICATE_POLICY,
    verify_digests: bool = True,
) -> ValidationPassed:
    """Validate *tx* and raise if it is not ready to broadcast.

    Raises:
        TransactionIncomplete: Carrying every reason found.
    """
    result = validate(tx, duplicate_keys=duplicate_keys, verify_digests=verify_digests)
    if isinstance(result, ValidationIncomplete):
        raise TransactionIncomplete(result.reasons)
    return result
