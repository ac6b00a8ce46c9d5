"""Transaction assembler — notes + outputs into an unsigned transaction.

Assembly steps:
1. Require at least one note and one output
2. Check every lock under the duplicate-key policy
3. Enforce the balance invariant (inputs == outputs)
4. Create one spend per note, in input order, with empty signatures
5. Fill each spend's ``message_hash`` from the digest engine
"""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING

from nock_multisig.core.digest import BLANK_MESSAGE_HASH, spend_digests
from nock_multisig.core.models import Seeds, Spend, Transaction
from nock_multisig.core.policy import DEFAULT_DUPLICATE_POLICY, DuplicateKeyPolicy, check_lock
from nock_multisig.errors.definitions import ImbalancedTransaction

if TYPE_CHECKING:
    from collections.abc import Sequence

    from nock_multisig.core.models import Note, Output

logger = logging.getLogger(__name__)


def assemble(
    notes: Sequence[Note],
    outputs: Sequence[Output],
    *,
    duplicate_keys: DuplicateKeyPolicy = DEFAULT_DUPLICATE_POLICY,
) -> Transaction:
    """Build an unsigned transaction spending *notes* into *outputs*.

    Same inputs in the same order always produce an identical transaction,
    including every ``message_hash``.

    Args:
        notes: Notes to consume; order fixes the spend indexes.
        outputs: Outputs to create.
        duplicate_keys: Policy for duplicate keys inside a lock.

    Returns:
        A new :class:`Transaction` with empty signature sets.

    Raises:
        ImbalancedTransaction: If either side is empty or the totals differ.
        InvalidLock: If a lock is malformed under *duplicate_keys*.
    """
    total_input = sum(note.value for note in notes)
    total_output = sum(output.value for output in outputs)

    if not notes or not outputs:
        raise ImbalancedTransaction(
            total_input,
            total_output,
            f"transaction needs at least one note and one output "
            f"(got {len(notes)} note(s), {len(outputs)} output(s))",
        )

    for note in notes:
        check_lock(note.lock, duplicate_keys)
    for output in outputs:
        check_lock(output.lock, duplicate_keys)

    if total_input != total_output:
        raise ImbalancedTransaction(total_input, total_output)

    unsigned = Transaction(
        spends=tuple(Spend(note=note, seeds=Seeds(BLANK_MESSAGE_HASH)) for note in notes),
        outputs=tuple(outputs),
    )
    digests = spend_digests(unsigned)
    tx = dataclasses.replace(
        unsigned,
        spends=tuple(
            Spend(note=spend.note, seeds=Seeds(message_hash=digest))
            for spend, digest in zip(unsigned.spends, digests, strict=True)
        ),
    )

    logger.debug(
        "Assembled transaction: %d spend(s), %d output(s), value %d",
        len(tx.spends),
        len(tx.outputs),
        total_input,
    )
    return tx
