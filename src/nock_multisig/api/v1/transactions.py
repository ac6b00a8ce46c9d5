"""V1 transaction endpoints.

Stateless: every request carries the transaction it operates on and every
mutating endpoint answers with the new transaction value.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from nock_multisig.api.dependencies import get_metrics, get_policy
from nock_multisig.api.v1.schemas import (
    AddSignatureRequest,
    AssembleRequest,
    DigestResponse,
    MergeRequest,
    SigningStatusResponse,
    SpendRequest,
    ValidateRequest,
    ValidationResponse,
)
from nock_multisig.config.settings import PolicyConfig  # noqa: TC001
from nock_multisig.core import assembler, digest, ledger, validator
from nock_multisig.errors.definitions import UnauthorizedSigner
from nock_multisig.interchange import (
    TransactionDocument,
    export_transaction,
    import_transaction,
    merge_signatures,
)
from nock_multisig.metrics.collector import MultisigMetrics  # noqa: TC001

router = APIRouter(tags=["transactions"])


@router.post("/transactions", status_code=201)
async def assemble_transaction(
    body: AssembleRequest,
    policy: Annotated[PolicyConfig, Depends(get_policy)],
    metrics: Annotated[MultisigMetrics, Depends(get_metrics)],
) -> TransactionDocument:
    """Assemble an unsigned transaction from notes and outputs."""
    with metrics.track("assemble"):
        tx = assembler.assemble(
            [n.to_domain() for n in body.notes],
            [o.to_domain() for o in body.outputs],
            duplicate_keys=policy.duplicate_keys,
        )
    metrics.transaction_assembled()
    return TransactionDocument.from_domain(tx)


@router.post("/transactions/digest")
async def spend_digest(body: SpendRequest) -> DigestResponse:
    """Recompute the digest signers of one spend must sign."""
    tx = body.transaction.to_domain()
    return DigestResponse(
        spend_index=body.spend_index,
        message_hash=digest.spend_digest(body.spend_index, tx),
    )


@router.post("/transactions/signatures")
async def add_signature(
    body: AddSignatureRequest,
    metrics: Annotated[MultisigMetrics, Depends(get_metrics)],
) -> TransactionDocument:
    """Record a signature on one spend and return the updated transaction."""
    tx = body.transaction.to_domain()
    try:
        with metrics.track("add_signature"):
            updated = ledger.add_signature(tx, body.spend_index, body.public_key, body.signature)
    except UnauthorizedSigner:
        metrics.signature_rejected()
        raise
    metrics.signature_added()
    return TransactionDocument.from_domain(updated)


@router.post("/transactions/status")
async def signing_status(
    body: SpendRequest,
    policy: Annotated[PolicyConfig, Depends(get_policy)],
) -> SigningStatusResponse:
    """Signing progress of one spend."""
    tx = body.transaction.to_domain()
    status = validator.signing_status(tx, body.spend_index, duplicate_keys=policy.duplicate_keys)
    return SigningStatusResponse.from_status(status)


@router.post("/transactions/validate")
async def validate_transaction(
    body: ValidateRequest,
    policy: Annotated[PolicyConfig, Depends(get_policy)],
    metrics: Annotated[MultisigMetrics, Depends(get_metrics)],
) -> ValidationResponse:
    """Check balance and signature completeness; 200 whether valid or not."""
    tx = body.transaction.to_domain()
    with metrics.track("validate"):
        result = validator.validate(
            tx,
            duplicate_keys=policy.duplicate_keys,
            verify_digests=policy.verify_digests,
        )
    metrics.validation(valid=result.valid)
    return ValidationResponse.from_result(result)


@router.post("/transactions/merge")
async def merge_transactions(body: MergeRequest) -> TransactionDocument:
    """Union the signatures of partially signed copies of one transaction."""
    base, *others = (doc.to_domain() for doc in body.transactions)
    return TransactionDocument.from_domain(merge_signatures(base, *others))


@router.post("/transactions/export", response_class=PlainTextResponse)
async def export_text(
    body: ValidateRequest,
    policy: Annotated[PolicyConfig, Depends(get_policy)],
) -> PlainTextResponse:
    """Render a transaction as the text signers pass to each other."""
    text = export_transaction(body.transaction.to_domain(), indent=policy.export_indent)
    return PlainTextResponse(text, media_type="application/json")


@router.post("/transactions/import")
async def import_text(request: Request) -> TransactionDocument:
    """Parse exported text, as read from a file or clipboard."""
    tx = import_transaction(await request.body())
    return TransactionDocument.from_domain(tx)
