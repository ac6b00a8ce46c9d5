"""Shared builders and key constants for the nock-multisig test suite."""

from __future__ import annotations

from nock_multisig.core.models import Lock, Note, NoteName, Output, pkh_lock

# Opaque signer keys; the core never interprets them.
PK_A = "pk-alice"
PK_B = "pk-bob"
PK_C = "pk-carol"
PK_X = "pk-xavier"
PK_Y = "pk-yolanda"
PK_MALLORY = "pk-mallory"


def make_note(
    value: int = 1000,
    *,
    first: str = "note",
    last: str = "0",
    lock: Lock | None = None,
) -> Note:
    return Note(
        name=NoteName(first=first, last=last),
        value=value,
        lock=lock or pkh_lock(2, [PK_A, PK_B, PK_C]),
    )


def make_output(value: int, recipient: str = "xavier", key: str = PK_X) -> Output:
    return Output(recipient=recipient, value=value, lock=pkh_lock(1, [key]))
