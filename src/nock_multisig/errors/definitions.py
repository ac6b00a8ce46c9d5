"""Error definitions for the multisig transaction model.

Only ``ImbalancedTransaction``, ``SpendIndexOutOfRange`` and ``InvalidLock``
abort an operation outright.  ``UnauthorizedSigner`` is also offered as a
rejected result by :func:`nock_multisig.core.ledger.try_add_signature`, and an
incomplete transaction is reported by ``validate`` as a value, never raised.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from nock_multisig.errors.multisig_errors import MultisigError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from nock_multisig.core.validator import ValidationReason

# -- Construction ----------------------------------------------------------


class ImbalancedTransaction(MultisigError):
    """Selected notes and requested outputs do not carry the same value."""

    def __init__(self, total_input: int, total_output: int, message: str | None = None) -> None:
        self.total_input = total_input
        self.total_output = total_output
        self.delta = total_input - total_output
        if message is None:
            message = (
                f"inputs total {total_input} but outputs total {total_output} "
                f"(delta {self.delta})"
            )
        super().__init__(message, status_code=422, code="imbalanced-transaction")


class InvalidLock(MultisigError):
    """A lock condition is malformed under the active key policy."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=400, code="invalid-lock")


# -- Signing ---------------------------------------------------------------


class SpendIndexOutOfRange(MultisigError):
    """A spend index does not address any spend of the transaction."""

    def __init__(self, spend_index: int, spend_count: int) -> None:
        self.spend_index = spend_index
        self.spend_count = spend_count
        super().__init__(
            f"spend index {spend_index} out of range for {spend_count} spend(s)",
            status_code=400,
            code="spend-index-out-of-range",
        )


class UnauthorizedSigner(MultisigError):
    """A public key outside the spend's policy tried to sign."""

    def __init__(self, spend_index: int, pubkey: str) -> None:
        self.spend_index = spend_index
        self.pubkey = pubkey
        super().__init__(
            f"public key {pubkey} is not allowed to sign spend {spend_index}",
            status_code=403,
            code="unauthorized-signer",
        )


class TransactionIncomplete(MultisigError):
    """Raised by ``require_valid`` when a transaction is not ready to broadcast."""

    def __init__(self, reasons: Sequence[ValidationReason]) -> None:
        self.reasons = tuple(reasons)
        summary = "; ".join(r.message for r in self.reasons) or "transaction is incomplete"
        super().__init__(summary, status_code=422, code="transaction-incomplete")


# -- Interchange -----------------------------------------------------------


class TransactionImportError(MultisigError):
    """Serialized transaction text could not be parsed."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=400, code="transaction-import-error")


class TransactionMismatch(MultisigError):
    """Two transaction copies do not share the same structure."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=409, code="transaction-mismatch")
