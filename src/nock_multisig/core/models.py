"""Value types for multisig transactions.

Provides the immutable building blocks shared by every core operation:
- NoteName / Note / Output (value being consumed or created)
- PkhCondition and the Lock variants guarding a note
- Seeds / Spend (a consumed note plus its unlocking material)
- Transaction and the derived SigningStatus

Sequences are stored as tuples; lists passed in are converted on construction.
"""

from __future__ import annotations

import dataclasses
import enum
from typing import ClassVar, TypeAlias

PublicKey: TypeAlias = str
Signature: TypeAlias = str
SignatureEntry: TypeAlias = tuple[PublicKey, Signature]


def _freeze(obj: object, name: str) -> None:
    """Convert a sequence field of a frozen dataclass to a tuple in place."""
    object.__setattr__(obj, name, tuple(getattr(obj, name)))


def _require_int(value: int, what: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"{what} must be an integer, got {type(value).__name__}"
        raise TypeError(msg)


def _require_value(value: int, what: str) -> None:
    _require_int(value, f"{what} value")
    if value < 0:
        msg = f"{what} value must be non-negative, got {value}"
        raise ValueError(msg)


def _require_text(value: str, what: str) -> None:
    """Reject non-strings and strings that cannot be encoded as UTF-8."""
    if not isinstance(value, str):
        msg = f"{what} must be a string, got {type(value).__name__}"
        raise TypeError(msg)
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as exc:
        msg = f"{what} is not valid UTF-8 text: {exc.reason}"
        raise ValueError(msg) from exc


# ---------------------------------------------------------------------------
# Locks
# ---------------------------------------------------------------------------


class LockKind(enum.StrEnum):
    """Tags of the supported lock variants (also their wire keys)."""

    PKH = "pkh"


@dataclasses.dataclass(frozen=True)
class PkhCondition:
    """M-of-N public-key-hash threshold policy.

    Attributes:
        threshold: Minimum number of distinct authorized signatures.
        pubkeys: Authorized signer keys, in policy order.
    """

    threshold: int
    pubkeys: tuple[PublicKey, ...]

    def __post_init__(self) -> None:
        _freeze(self, "pubkeys")
        _require_int(self.threshold, "threshold")
        if not self.pubkeys:
            msg = "pkh condition needs at least one public key"
            raise ValueError(msg)
        for pubkey in self.pubkeys:
            _require_text(pubkey, "public key")
        if not 1 <= self.threshold <= len(self.pubkeys):
            msg = (
                f"threshold must be between 1 and {len(self.pubkeys)}, "
                f"got {self.threshold}"
            )
            raise ValueError(msg)

    @property
    def distinct_pubkeys(self) -> tuple[PublicKey, ...]:
        """Pubkeys with duplicates removed, first occurrence kept."""
        return tuple(dict.fromkeys(self.pubkeys))

    @property
    def has_duplicates(self) -> bool:
        return len(self.distinct_pubkeys) != len(self.pubkeys)

    def allows(self, pubkey: PublicKey) -> bool:
        """Return True if *pubkey* is one of the authorized signers."""
        return pubkey in self.pubkeys


@dataclasses.dataclass(frozen=True)
class PkhLock:
    """Lock variant guarded by a single :class:`PkhCondition`."""

    pkh: PkhCondition
    kind: ClassVar[LockKind] = LockKind.PKH

    def allows(self, pubkey: PublicKey) -> bool:
        return self.pkh.allows(pubkey)


# Closed set of lock variants. A new policy is added here as `PkhLock | NewLock`
# plus one branch in core.policy.
Lock: TypeAlias = PkhLock
LOCK_VARIANTS: tuple[type, ...] = (PkhLock,)


def pkh_lock(threshold: int, pubkeys: tuple[PublicKey, ...] | list[PublicKey]) -> PkhLock:
    """Shortcut for ``PkhLock(PkhCondition(threshold, pubkeys))``."""
    return PkhLock(PkhCondition(threshold=threshold, pubkeys=tuple(pubkeys)))


# ---------------------------------------------------------------------------
# Notes and outputs
# ---------------------------------------------------------------------------


@dataclasses.dataclass(frozen=True)
class NoteName:
    """Pair of opaque labels identifying a note."""

    first: str
    last: str

    def __post_init__(self) -> None:
        _require_text(self.first, "note name")
        _require_text(self.last, "note name")


@dataclasses.dataclass(frozen=True)
class Note:
    """A unit of value being consumed by a transaction."""

    name: NoteName
    value: int
    lock: Lock

    def __post_init__(self) -> None:
        _require_value(self.value, "note")


@dataclasses.dataclass(frozen=True)
class Output:
    """A note under construction, created by a transaction."""

    recipient: str
    value: int
    lock: Lock

    def __post_init__(self) -> None:
        _require_value(self.value, "output")
        _require_text(self.recipient, "recipient")


# ---------------------------------------------------------------------------
# Spends
# ---------------------------------------------------------------------------


@dataclasses.dataclass(frozen=True)
class Seeds:
    """Digest and collected signatures for one spend.

    Attributes:
        message_hash: Hex digest every signer of this spend signs.
        signatures: Ordered ``(pubkey, signature)`` pairs, one per key.
    """

    message_hash: str
    signatures: tuple[SignatureEntry, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "signatures",
            tuple((pk, sig) for pk, sig in self.signatures),
        )
        keys = [pk for pk, _ in self.signatures]
        if len(set(keys)) != len(keys):
            msg = "duplicate public key in signature entries"
            raise ValueError(msg)

    @property
    def signers(self) -> tuple[PublicKey, ...]:
        return tuple(pk for pk, _ in self.signatures)

    @property
    def signature_count(self) -> int:
        return len(self.signatures)

    def has_signature(self, pubkey: PublicKey) -> bool:
        return any(pk == pubkey for pk, _ in self.signatures)

    def signature_for(self, pubkey: PublicKey) -> Signature | None:
        """Return the signature stored for *pubkey*, or None."""
        for pk, sig in self.signatures:
            if pk == pubkey:
                return sig
        return None

    def with_signature(self, pubkey: PublicKey, signature: Signature) -> Seeds:
        """Return a copy with *pubkey*'s entry moved to the end with *signature*.

        Any earlier entry for *pubkey* is dropped, so the newest signature is
        always last.
        """
        entries = tuple((pk, sig) for pk, sig in self.signatures if pk != pubkey)
        return dataclasses.replace(self, signatures=(*entries, (pubkey, signature)))

    def cleared(self) -> Seeds:
        """Return a copy with no signatures."""
        return dataclasses.replace(self, signatures=())


@dataclasses.dataclass(frozen=True)
class Spend:
    """A consumed note paired with its in-progress unlocking material."""

    note: Note
    seeds: Seeds

    @property
    def lock(self) -> Lock:
        return self.note.lock


# ---------------------------------------------------------------------------
# Transaction
# ---------------------------------------------------------------------------


@dataclasses.dataclass(frozen=True)
class Transaction:
    """Ordered spends and outputs of one multisig transaction."""

    spends: tuple[Spend, ...]
    outputs: tuple[Output, ...]

    def __post_init__(self) -> None:
        _freeze(self, "spends")
        _freeze(self, "outputs")

    @property
    def total_input(self) -> int:
        return sum(spend.note.value for spend in self.spends)

    @property
    def total_output(self) -> int:
        return sum(output.value for output in self.outputs)

    @property
    def delta(self) -> int:
        """Input total minus output total; zero for a balanced transaction."""
        return self.total_input - self.total_output

    @property
    def is_balanced(self) -> bool:
        return self.delta == 0

    def with_spend(self, spend_index: int, spend: Spend) -> Transaction:
        """Return a copy with one spend replaced; other spends are shared."""
        spends = list(self.spends)
        spends[spend_index] = spend
        return dataclasses.replace(self, spends=tuple(spends))

    def without_signatures(self) -> Transaction:
        """Return a copy where every spend's signatures are cleared."""
        return dataclasses.replace(
            self,
            spends=tuple(
                dataclasses.replace(spend, seeds=spend.seeds.cleared()) for spend in self.spends
            ),
        )


@dataclasses.dataclass(frozen=True)
class SigningStatus:
    """Derived signing progress of one spend.

    ``signed`` and ``pending`` follow the policy's key order, each key once.
    """

    spend_index: int
    threshold: int
    signed: tuple[PublicKey, ...]
    pending: tuple[PublicKey, ...]
    complete: bool

    @property
    def signed_count(self) -> int:
        return len(self.signed)

    @property
    def progress(self) -> str:
        """Human-readable ``signed/threshold`` counter, e.g. ``"1/2"``."""
        return f"{self.signed_count}/{self.threshold}"
