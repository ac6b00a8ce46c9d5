"""Shared test fixtures for nock-multisig test suite."""

from __future__ import annotations

import pytest
from helpers import PK_X, PK_Y, make_note, make_output

from nock_multisig.core.assembler import assemble
from nock_multisig.core.models import Note, Output, Transaction


@pytest.fixture
def note() -> Note:
    """A 1000-unit note under a 2-of-3 lock over A, B, C."""
    return make_note()


@pytest.fixture
def outputs() -> list[Output]:
    """700 to X and 300 to Y, each 1-of-1."""
    return [make_output(700, "xavier", PK_X), make_output(300, "yolanda", PK_Y)]


@pytest.fixture
def tx(note: Note, outputs: list[Output]) -> Transaction:
    """Unsigned single-spend transaction."""
    return assemble([note], outputs)


@pytest.fixture
def two_spend_tx() -> Transaction:
    """Two structurally identical 2-of-3 notes spent into one output."""
    notes = [make_note(500, last="a"), make_note(500, last="a")]
    return assemble(notes, [make_output(1000)])


@pytest.fixture
def app_config():
    """Provide a test AppConfig with safe defaults."""
    from nock_multisig.config.settings import AppConfig

    return AppConfig(debug=True)


@pytest.fixture
def test_client(app_config):
    """Provide a FastAPI TestClient wired to the test config."""
    from fastapi.testclient import TestClient

    from nock_multisig.api.app import create_app

    app = create_app(config=app_config)
    return TestClient(app, raise_server_exceptions=False)
