"""Tests for signing status and validation — core/validator.py."""

from __future__ import annotations

import dataclasses
import itertools

import pytest
from helpers import PK_A, PK_B, PK_C, PK_MALLORY, make_note, make_output

from nock_multisig.core.assembler import assemble
from nock_multisig.core.ledger import add_signature
from nock_multisig.core.models import Seeds, Transaction, pkh_lock
from nock_multisig.core.policy import DuplicateKeyPolicy
from nock_multisig.core.validator import (
    BalanceMismatch,
    DigestMismatch,
    MalformedLock,
    SpendIncomplete,
    ValidationIncomplete,
    ValidationPassed,
    require_valid,
    signing_status,
    validate,
)
from nock_multisig.errors.definitions import SpendIndexOutOfRange, TransactionIncomplete


class TestSigningStatus:
    def test_unsigned(self, tx: Transaction) -> None:
        status = signing_status(tx, 0)
        assert status.threshold == 2
        assert status.signed == ()
        assert status.pending == (PK_A, PK_B, PK_C)
        assert not status.complete

    def test_partial(self, tx: Transaction) -> None:
        status = signing_status(add_signature(tx, 0, PK_B, "sb"), 0)
        assert status.signed == (PK_B,)
        assert set(status.pending) == {PK_A, PK_C}
        assert status.progress == "1/2"
        assert not status.complete

    def test_ignores_foreign_entries(self, tx: Transaction) -> None:
        spend = tx.spends[0]
        forged = tx.with_spend(
            0,
            dataclasses.replace(
                spend, seeds=Seeds(spend.seeds.message_hash, ((PK_MALLORY, "x"), (PK_A, "sa")))
            ),
        )
        status = signing_status(forged, 0)
        assert status.signed == (PK_A,)
        assert PK_MALLORY not in status.pending
        assert not status.complete

    def test_out_of_range(self, tx: Transaction) -> None:
        with pytest.raises(SpendIndexOutOfRange):
            signing_status(tx, 1)


class TestThreshold:
    def test_one_of_three_signatures_is_incomplete(self, tx: Transaction) -> None:
        result = validate(add_signature(tx, 0, PK_A, "sa"))
        assert isinstance(result, ValidationIncomplete)
        assert not result.valid
        assert result.pending_by_spend == {0: (PK_B, PK_C)}

    @pytest.mark.parametrize("pair", list(itertools.permutations([PK_A, PK_B, PK_C], 2)))
    def test_any_two_complete(self, tx: Transaction, pair: tuple[str, str]) -> None:
        signed = tx
        for pk in pair:
            signed = add_signature(signed, 0, pk, f"sig-{pk}")
        result = validate(signed)
        assert isinstance(result, ValidationPassed)
        assert result.valid
        assert result.reasons == ()

    def test_all_three_complete(self, tx: Transaction) -> None:
        signed = tx
        for pk in (PK_A, PK_B, PK_C):
            signed = add_signature(signed, 0, pk, "s")
        assert validate(signed).valid

    def test_resigning_does_not_count_twice(self, tx: Transaction) -> None:
        signed = add_signature(tx, 0, PK_A, "one")
        signed = add_signature(signed, 0, PK_A, "two")
        assert not validate(signed).valid


class TestValidate:
    def test_reports_every_incomplete_spend(self, two_spend_tx: Transaction) -> None:
        signed = add_signature(two_spend_tx, 0, PK_A, "sa")
        signed = add_signature(signed, 0, PK_B, "sb")
        result = validate(signed)
        assert isinstance(result, ValidationIncomplete)
        incomplete = [r for r in result.reasons if isinstance(r, SpendIncomplete)]
        assert [r.spend_index for r in incomplete] == [1]
        assert result.summary.complete_spends == 1

    def test_imbalanced_import_reported(self, tx: Transaction) -> None:
        inflated = dataclasses.replace(tx, outputs=(*tx.outputs, make_output(5)))
        result = validate(inflated, verify_digests=False)
        balance = [r for r in result.reasons if isinstance(r, BalanceMismatch)]
        assert len(balance) == 1
        assert balance[0].delta == -5
        assert balance[0].code == "balance-mismatch"

    def test_balance_and_signatures_reported_together(self, tx: Transaction) -> None:
        inflated = dataclasses.replace(tx, outputs=(*tx.outputs, make_output(5)))
        result = validate(inflated, verify_digests=False)
        codes = {r.code for r in result.reasons}
        assert codes == {"balance-mismatch", "spend-incomplete"}

    def test_fully_signed_but_imbalanced_is_invalid(self, tx: Transaction) -> None:
        signed = add_signature(add_signature(tx, 0, PK_A, "a"), 0, PK_B, "b")
        inflated = dataclasses.replace(signed, outputs=signed.outputs[:1])
        result = validate(inflated, verify_digests=False)
        assert not result.valid

    def test_digest_mismatch(self, tx: Transaction) -> None:
        signed = add_signature(add_signature(tx, 0, PK_A, "a"), 0, PK_B, "b")
        spend = signed.spends[0]
        tampered = signed.with_spend(
            0,
            dataclasses.replace(
                spend, seeds=dataclasses.replace(spend.seeds, message_hash="ab" * 32)
            ),
        )
        result = validate(tampered)
        assert [type(r) for r in result.reasons] == [DigestMismatch]
        assert validate(tampered, verify_digests=False).valid

    def test_malformed_lock_on_import(self) -> None:
        note = make_note(lock=pkh_lock(1, [PK_A, PK_A]))
        tx = assemble([note], [make_output(1000)], duplicate_keys=DuplicateKeyPolicy.DISTINCT)
        signed = add_signature(tx, 0, PK_A, "sa")
        result = validate(signed)
        assert [type(r) for r in result.reasons] == [MalformedLock]
        assert validate(signed, duplicate_keys=DuplicateKeyPolicy.DISTINCT).valid

    def test_summary(self, tx: Transaction) -> None:
        result = validate(tx)
        assert result.summary.total_input == 1000
        assert result.summary.total_output == 1000
        assert [s.spend_index for s in result.summary.statuses] == [0]

    def test_pure(self, tx: Transaction) -> None:
        assert validate(tx) == validate(tx)

    def test_reason_messages(self, tx: Transaction) -> None:
        result = validate(add_signature(tx, 0, PK_A, "sa"))
        assert result.reasons[0].message == (
            "spend 0 has 1/2 signatures; pending: pk-bob, pk-carol"
        )


class TestRequireValid:
    def test_passes(self, tx: Transaction) -> None:
        signed = add_signature(add_signature(tx, 0, PK_A, "a"), 0, PK_C, "c")
        assert require_valid(signed).valid

    def test_raises_with_reasons(self, tx: Transaction) -> None:
        with pytest.raises(TransactionIncomplete) as exc_info:
            require_valid(tx)
        assert len(exc_info.value.reasons) == 1
        assert exc_info.value.code == "transaction-incomplete"


class TestEndToEnd:
    def test_two_of_three_scenario(self, note, outputs) -> None:
        tx = assemble([note], outputs)

        tx = add_signature(tx, 0, PK_A, "sigA")
        status = signing_status(tx, 0)
        assert status.progress == "1/2"
        assert set(status.pending) == {PK_B, PK_C}
        assert not status.complete

        tx = add_signature(tx, 0, PK_B, "sigB")
        status = signing_status(tx, 0)
        assert status.progress == "2/2"
        assert status.complete

        assert validate(tx).valid
