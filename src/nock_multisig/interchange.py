"""Export / import of transactions and merging of partially signed copies.

The textual form is JSON described by the pydantic documents below.  It keeps
every note, lock, ``message_hash`` and the order of signature pairs, so
``import_transaction(export_transaction(tx)) == tx``.

Public keys and signatures are accepted either as plain strings or as
``{"value": "..."}`` objects, the shape browser front ends pass around.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any, Self

from pydantic import (
    BaseModel,
    BeforeValidator,
    Field,
    StrictInt,
    ValidationError,
    model_validator,
)

from nock_multisig.core.digest import structural_copy
from nock_multisig.core.ledger import add_signature
from nock_multisig.core.models import (
    Note,
    NoteName,
    Output,
    PkhCondition,
    PkhLock,
    Seeds,
    Spend,
    Transaction,
)
from nock_multisig.errors.definitions import TransactionImportError, TransactionMismatch

logger = logging.getLogger(__name__)


def _unwrap_value(v: Any) -> Any:
    if isinstance(v, dict) and set(v) == {"value"}:
        return v["value"]
    return v


KeyString = Annotated[str, BeforeValidator(_unwrap_value)]


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


class NoteNameDocument(BaseModel):
    first: str
    last: str


class PkhDocument(BaseModel):
    threshold: StrictInt = Field(..., ge=1)
    pubkeys: list[KeyString] = Field(..., min_length=1)

    @model_validator(mode="after")
    def _threshold_within_keys(self) -> Self:
        if self.threshold > len(self.pubkeys):
            msg = f"threshold {self.threshold} exceeds {len(self.pubkeys)} public key(s)"
            raise ValueError(msg)
        return self


class LockDocument(BaseModel):
    """Externally tagged lock; ``pkh`` is the only variant."""

    model_config = {"extra": "forbid"}

    pkh: PkhDocument

    def to_domain(self) -> PkhLock:
        return PkhLock(PkhCondition(threshold=self.pkh.threshold, pubkeys=tuple(self.pkh.pubkeys)))

    @classmethod
    def from_domain(cls, lock: PkhLock) -> Self:
        return cls(pkh=PkhDocument(threshold=lock.pkh.threshold, pubkeys=list(lock.pkh.pubkeys)))


class NoteDocument(BaseModel):
    name: NoteNameDocument
    value: StrictInt = Field(..., ge=0)
    lock: LockDocument

    def to_domain(self) -> Note:
        return Note(
            name=NoteName(first=self.name.first, last=self.name.last),
            value=self.value,
            lock=self.lock.to_domain(),
        )

    @classmethod
    def from_domain(cls, note: Note) -> Self:
        return cls(
            name=NoteNameDocument(first=note.name.first, last=note.name.last),
            value=note.value,
            lock=LockDocument.from_domain(note.lock),
        )


class SeedsDocument(BaseModel):
    message_hash: str
    signatures: list[tuple[KeyString, KeyString]] = Field(default_factory=list)


class SpendDocument(BaseModel):
    note: NoteDocument
    seeds: SeedsDocument


class OutputDocument(BaseModel):
    recipient: str
    value: StrictInt = Field(..., ge=0)
    lock: LockDocument

    def to_domain(self) -> Output:
        return Output(recipient=self.recipient, value=self.value, lock=self.lock.to_domain())

    @classmethod
    def from_domain(cls, output: Output) -> Self:
        return cls(
            recipient=output.recipient,
            value=output.value,
            lock=LockDocument.from_domain(output.lock),
        )


class TransactionDocument(BaseModel):
    """Serialized transaction shared between signers."""

    spends: list[SpendDocument]
    outputs: list[OutputDocument]

    def to_domain(self) -> Transaction:
        """Convert to a :class:`Transaction`.

        Raises:
            TransactionImportError: If the content breaks a value-type invariant.
        """
        try:
            return Transaction(
                spends=tuple(
                    Spend(
                        note=s.note.to_domain(),
                        seeds=Seeds(
                            message_hash=s.seeds.message_hash,
                            signatures=tuple(s.seeds.signatures),
                        ),
                    )
                    for s in self.spends
                ),
                outputs=tuple(o.to_domain() for o in self.outputs),
            )
        except ValueError as exc:
            raise TransactionImportError(f"invalid transaction: {exc}") from exc

    @classmethod
    def from_domain(cls, tx: Transaction) -> Self:
        return cls(
            spends=[
                SpendDocument(
                    note=NoteDocument.from_domain(s.note),
                    seeds=SeedsDocument(
                        message_hash=s.seeds.message_hash,
                        signatures=list(s.seeds.signatures),
                    ),
                )
                for s in tx.spends
            ],
            outputs=[OutputDocument.from_domain(o) for o in tx.outputs],
        )


# ---------------------------------------------------------------------------
# Export / import
# ---------------------------------------------------------------------------


def export_transaction(tx: Transaction, *, indent: int | None = 2) -> str:
    """Serialize *tx* to JSON text for sharing with other signers."""
    return TransactionDocument.from_domain(tx).model_dump_json(indent=indent)


def import_transaction(text: str | bytes) -> Transaction:
    """Parse JSON text produced by :func:`export_transaction`.

    Raises:
        TransactionImportError: If the text is not a well-formed transaction.
    """
    try:
        document = TransactionDocument.model_validate_json(text)
    except ValidationError as exc:
        msg = f"malformed transaction document: {exc.error_count()} error(s)"
        raise TransactionImportError(msg) from exc
    return document.to_domain()


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------


def merge_signatures(base: Transaction, *others: Transaction) -> Transaction:
    """Union the signature entries of partially signed copies of one transaction.

    Every entry of every copy is re-applied with :func:`add_signature` in
    copy order, so a key signed in several copies ends up last, carrying
    the signature from the last copy that has it.

    Raises:
        TransactionMismatch: If a copy differs from *base* in structure or digests.
        UnauthorizedSigner: If a copy carries a signer outside a spend's lock.
    """
    base_structure = structural_copy(base)
    base_hashes = [s.seeds.message_hash for s in base.spends]

    merged = base
    for copy_index, other in enumerate(others):
        if structural_copy(other) != base_structure:
            msg = f"copy {copy_index} does not have the same notes and outputs"
            raise TransactionMismatch(msg)
        if [s.seeds.message_hash for s in other.spends] != base_hashes:
            msg = f"copy {copy_index} carries different message hashes"
            raise TransactionMismatch(msg)
        for spend_index, spend in enumerate(other.spends):
            for pubkey, signature in spend.seeds.signatures:
                merged = add_signature(merged, spend_index, pubkey, signature)

    logger.debug("Merged %d copy(ies) into transaction", len(others))
    return merged
