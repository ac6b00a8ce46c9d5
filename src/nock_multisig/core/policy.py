"""Lock-policy evaluation.

One branch per lock variant.  The duplicate-key policy decides what a public
key listed more than once in a :class:`PkhCondition` means:

- ``reject``: the condition is malformed.
- ``distinct``: legal, the key counts once toward the threshold.
- ``weighted``: legal, the key counts once per occurrence.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING

from nock_multisig.core.models import PkhLock
from nock_multisig.errors.definitions import InvalidLock

if TYPE_CHECKING:
    from collections.abc import Iterable

    from nock_multisig.core.models import Lock, PublicKey


class DuplicateKeyPolicy(enum.StrEnum):
    """How duplicate public keys inside one pkh condition are treated."""

    REJECT = "reject"
    DISTINCT = "distinct"
    WEIGHTED = "weighted"


DEFAULT_DUPLICATE_POLICY = DuplicateKeyPolicy.REJECT


def _unsupported(lock: object) -> TypeError:
    return TypeError(f"unsupported lock variant: {type(lock).__name__}")


def lock_problem(lock: Lock, policy: DuplicateKeyPolicy = DEFAULT_DUPLICATE_POLICY) -> str | None:
    """Return a description of what is wrong with *lock*, or None if well-formed."""
    if isinstance(lock, PkhLock):
        if policy is DuplicateKeyPolicy.REJECT and lock.pkh.has_duplicates:
            return "duplicate public key in multisig set"
        return None
    raise _unsupported(lock)


def check_lock(lock: Lock, policy: DuplicateKeyPolicy = DEFAULT_DUPLICATE_POLICY) -> None:
    """Raise :class:`InvalidLock` if *lock* is malformed under *policy*."""
    problem = lock_problem(lock, policy)
    if problem is not None:
        raise InvalidLock(problem)


def threshold(lock: Lock) -> int:
    """Number of signatures (or signature weight) required by *lock*."""
    if isinstance(lock, PkhLock):
        return lock.pkh.threshold
    raise _unsupported(lock)


def authorized_keys(lock: Lock) -> tuple[PublicKey, ...]:
    """Keys allowed to sign under *lock*, in policy order, each once."""
    if isinstance(lock, PkhLock):
        return lock.pkh.distinct_pubkeys
    raise _unsupported(lock)


def signed_weight(
    lock: Lock,
    signers: Iterable[PublicKey],
    policy: DuplicateKeyPolicy = DEFAULT_DUPLICATE_POLICY,
) -> int:
    """Count how much of the threshold *signers* cover.

    Keys not listed in the lock contribute nothing.
    """
    if isinstance(lock, PkhLock):
        present = set(signers)
        if policy is DuplicateKeyPolicy.WEIGHTED:
            return sum(1 for pk in lock.pkh.pubkeys if pk in present)
        return sum(1 for pk in lock.pkh.distinct_pubkeys if pk in present)
    raise _unsupported(lock)


def is_satisfied(
    lock: Lock,
    signers: Iterable[PublicKey],
    policy: DuplicateKeyPolicy = DEFAULT_DUPLICATE_POLICY,
) -> bool:
    """Return True if *signers* meet the threshold of *lock*."""
    return signed_weight(lock, signers, policy) >= threshold(lock)
