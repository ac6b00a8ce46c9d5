"""V1 API request/response schemas (Pydantic models)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Self

from pydantic import BaseModel, Field, StrictInt

from nock_multisig.core.validator import (
    BalanceMismatch,
    DigestMismatch,
    MalformedLock,
    SpendIncomplete,
)
from nock_multisig.interchange import (  # noqa: TC001 - Pydantic needs these at runtime
    NoteDocument,
    OutputDocument,
    TransactionDocument,
)

if TYPE_CHECKING:
    from nock_multisig.core.models import SigningStatus
    from nock_multisig.core.validator import ValidationReason, ValidationResult

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class AssembleRequest(BaseModel):
    """Notes to consume and outputs to create."""

    notes: list[NoteDocument]
    outputs: list[OutputDocument]


class SpendRequest(BaseModel):
    """A transaction and one of its spend indexes."""

    transaction: TransactionDocument
    spend_index: StrictInt


class AddSignatureRequest(SpendRequest):
    """A signature produced by a signing backend for one spend."""

    public_key: str
    signature: str


class ValidateRequest(BaseModel):
    transaction: TransactionDocument


class MergeRequest(BaseModel):
    """Partially signed copies of one transaction; the first is the base."""

    transactions: list[TransactionDocument] = Field(..., min_length=1)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class DigestResponse(BaseModel):
    spend_index: int
    message_hash: str


class SigningStatusResponse(BaseModel):
    """Signing progress of one spend."""

    spend_index: int
    threshold: int
    signed: list[str]
    pending: list[str]
    complete: bool
    progress: str

    @classmethod
    def from_status(cls, status: SigningStatus) -> Self:
        return cls(
            spend_index=status.spend_index,
            threshold=status.threshold,
            signed=list(status.signed),
            pending=list(status.pending),
            complete=status.complete,
            progress=status.progress,
        )


class ReasonResponse(BaseModel):
    """One reason a transaction is not ready to broadcast."""

    code: str
    message: str
    spend_index: int | None = None
    pending: list[str] | None = None
    delta: int | None = None

    @classmethod
    def from_reason(cls, reason: ValidationReason) -> Self:
        if isinstance(reason, BalanceMismatch):
            return cls(code=reason.code, message=reason.message, delta=reason.delta)
        if isinstance(reason, SpendIncomplete):
            return cls(
                code=reason.code,
                message=reason.message,
                spend_index=reason.spend_index,
                pending=list(reason.pending),
            )
        if isinstance(reason, MalformedLock | DigestMismatch):
            return cls(code=reason.code, message=reason.message, spend_index=reason.spend_index)
        msg = f"unknown validation reason: {type(reason).__name__}"
        raise TypeError(msg)


class ValidationResponse(BaseModel):
    """Outcome of ``validate``; returned with HTTP 200 whether valid or not."""

    valid: bool
    total_input: int
    total_output: int
    statuses: list[SigningStatusResponse]
    reasons: list[ReasonResponse]

    @classmethod
    def from_result(cls, result: ValidationResult) -> Self:
        return cls(
            valid=result.valid,
            total_input=result.summary.total_input,
            total_output=result.summary.total_output,
            statuses=[SigningStatusResponse.from_status(s) for s in result.summary.statuses],
            reasons=[ReasonResponse.from_reason(r) for r in result.reasons],
        )
