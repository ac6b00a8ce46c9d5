"""Tests for the /api/v1/transactions endpoints."""

from __future__ import annotations

import json

import pytest
from helpers import PK_A, PK_B, PK_C, PK_MALLORY, make_note, make_output

from nock_multisig.core.digest import spend_digest
from nock_multisig.core.ledger import add_signature
from nock_multisig.core.models import Transaction
from nock_multisig.interchange import TransactionDocument, export_transaction

BASE = "/api/v1/transactions"


def _doc(tx: Transaction) -> dict:
    return TransactionDocument.from_domain(tx).model_dump(mode="json")


def _lock(threshold: int, *pubkeys: str) -> dict:
    return {"pkh": {"threshold": threshold, "pubkeys": list(pubkeys)}}


@pytest.fixture
def assemble_body() -> dict:
    return {
        "notes": [
            {
                "name": {"first": "note", "last": "0"},
                "value": 1000,
                "lock": _lock(2, PK_A, PK_B, PK_C),
            }
        ],
        "outputs": [
            {"recipient": "xavier", "value": 700, "lock": _lock(1, "pk-xavier")},
            {"recipient": "yolanda", "value": 300, "lock": _lock(1, "pk-yolanda")},
        ],
    }


class TestAssemble:
    def test_matches_core(self, test_client, assemble_body, tx) -> None:
        response = test_client.post(BASE, json=assemble_body)
        assert response.status_code == 201
        assert response.json() == _doc(tx)

    def test_imbalanced(self, test_client, assemble_body) -> None:
        assemble_body["outputs"][0]["value"] = 650
        response = test_client.post(BASE, json=assemble_body)
        assert response.status_code == 422
        data = response.json()
        assert data["code"] == "imbalanced-transaction"
        assert "delta 50" in data["message"]

    def test_duplicate_key_rejected(self, test_client, assemble_body) -> None:
        assemble_body["notes"][0]["lock"] = _lock(2, PK_A, PK_A, PK_B)
        response = test_client.post(BASE, json=assemble_body)
        assert response.status_code == 400
        assert response.json()["code"] == "invalid-lock"

    def test_schema_violation(self, test_client, assemble_body) -> None:
        assemble_body["notes"][0]["lock"] = _lock(4, PK_A, PK_B, PK_C)
        response = test_client.post(BASE, json=assemble_body)
        assert response.status_code == 422

    def test_counts_metric(self, test_client, assemble_body) -> None:
        test_client.post(BASE, json=assemble_body)
        assert "multisig_transactions_assembled_total 1.0" in test_client.get("/metrics").text


class TestDigest:
    def test_recomputes(self, test_client, tx) -> None:
        body = {"transaction": _doc(tx), "spend_index": 0}
        response = test_client.post(f"{BASE}/digest", json=body)
        assert response.status_code == 200
        assert response.json() == {"spend_index": 0, "message_hash": spend_digest(0, tx)}

    def test_out_of_range(self, test_client, tx) -> None:
        body = {"transaction": _doc(tx), "spend_index": 2}
        response = test_client.post(f"{BASE}/digest", json=body)
        assert response.status_code == 400
        assert response.json()["code"] == "spend-index-out-of-range"


class TestSignatures:
    def test_add(self, test_client, tx) -> None:
        body = {"transaction": _doc(tx), "spend_index": 0, "public_key": PK_B, "signature": "sb"}
        response = test_client.post(f"{BASE}/signatures", json=body)
        assert response.status_code == 200
        assert response.json() == _doc(add_signature(tx, 0, PK_B, "sb"))

    def test_unauthorized(self, test_client, tx) -> None:
        body = {
            "transaction": _doc(tx),
            "spend_index": 0,
            "public_key": PK_MALLORY,
            "signature": "x",
        }
        response = test_client.post(f"{BASE}/signatures", json=body)
        assert response.status_code == 403
        assert response.json()["code"] == "unauthorized-signer"
        assert "multisig_signatures_rejected_total 1.0" in test_client.get("/metrics").text

    def test_bad_index(self, test_client, tx) -> None:
        body = {"transaction": _doc(tx), "spend_index": 3, "public_key": PK_A, "signature": "x"}
        response = test_client.post(f"{BASE}/signatures", json=body)
        assert response.status_code == 400


class TestStatus:
    def test_partial(self, test_client, tx) -> None:
        signed = add_signature(tx, 0, PK_A, "sa")
        response = test_client.post(
            f"{BASE}/status", json={"transaction": _doc(signed), "spend_index": 0}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["signed"] == [PK_A]
        assert data["pending"] == [PK_B, PK_C]
        assert data["progress"] == "1/2"
        assert data["complete"] is False


class TestValidate:
    def test_incomplete_is_200(self, test_client, tx) -> None:
        response = test_client.post(f"{BASE}/validate", json={"transaction": _doc(tx)})
        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is False
        assert [r["code"] for r in data["reasons"]] == ["spend-incomplete"]
        assert data["reasons"][0]["pending"] == [PK_A, PK_B, PK_C]

    def test_valid(self, test_client, tx) -> None:
        signed = add_signature(add_signature(tx, 0, PK_A, "sa"), 0, PK_C, "sc")
        response = test_client.post(f"{BASE}/validate", json={"transaction": _doc(signed)})
        data = response.json()
        assert data["valid"] is True
        assert data["reasons"] == []
        assert data["total_input"] == data["total_output"] == 1000

    def test_imbalanced_document(self, test_client, tx) -> None:
        doc = _doc(tx)
        doc["outputs"][0]["value"] = 600
        data = test_client.post(f"{BASE}/validate", json={"transaction": doc}).json()
        balance = [r for r in data["reasons"] if r["code"] == "balance-mismatch"]
        assert balance[0]["delta"] == 100

    def test_duplicate_signers_in_document(self, test_client, tx) -> None:
        doc = _doc(tx)
        doc["spends"][0]["seeds"]["signatures"] = [[PK_A, "1"], [PK_A, "2"]]
        response = test_client.post(f"{BASE}/validate", json={"transaction": doc})
        assert response.status_code == 400
        assert response.json()["code"] == "transaction-import-error"


class TestMerge:
    def test_union(self, test_client, tx) -> None:
        alice = add_signature(tx, 0, PK_A, "sa")
        bob = add_signature(tx, 0, PK_B, "sb")
        response = test_client.post(
            f"{BASE}/merge", json={"transactions": [_doc(alice), _doc(bob)]}
        )
        assert response.status_code == 200
        assert response.json()["spends"][0]["seeds"]["signatures"] == [[PK_A, "sa"], [PK_B, "sb"]]

    def test_mismatch(self, test_client, tx) -> None:
        from nock_multisig.core.assembler import assemble

        other = assemble([make_note(10)], [make_output(10)])
        response = test_client.post(f"{BASE}/merge", json={"transactions": [_doc(tx), _doc(other)]})
        assert response.status_code == 409

    def test_empty(self, test_client) -> None:
        assert test_client.post(f"{BASE}/merge", json={"transactions": []}).status_code == 422


class TestExportImport:
    def test_export(self, test_client, tx) -> None:
        response = test_client.post(f"{BASE}/export", json={"transaction": _doc(tx)})
        assert response.status_code == 200
        assert response.text == export_transaction(tx, indent=2)

    def test_import(self, test_client, tx) -> None:
        signed = add_signature(tx, 0, PK_C, "sc")
        response = test_client.post(f"{BASE}/import", content=export_transaction(signed))
        assert response.status_code == 200
        assert response.json() == _doc(signed)

    def test_import_malformed(self, test_client) -> None:
        response = test_client.post(f"{BASE}/import", content=json.dumps({"spends": 1}))
        assert response.status_code == 400
        assert response.json()["code"] == "transaction-import-error"
