"""Canonical encoding of signing payloads.

Every signer hashes the same bytes, so the encoding is written out field by
field instead of going through a generic serializer:

- objects are emitted with a fixed field order taken from the schema below
- no whitespace anywhere
- integers in decimal
- strings in JSON quoting with non-ASCII characters left as raw UTF-8

Schema (field order)::

    payload      = {spend_index, transaction}
    transaction  = {spends, outputs}
    spend        = {note, seeds}
    note         = {name, value, lock}
    name         = {first, last}
    lock         = {<kind>: condition}          # externally tagged
    pkh          = {threshold, pubkeys}
    seeds        = {message_hash, signatures}    # signatures: [[pk, sig], ...]
    output       = {recipient, value, lock}
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from nock_multisig.core.models import PkhLock

if TYPE_CHECKING:
    from collections.abc import Iterable

    from nock_multisig.core.models import (
        Lock,
        Note,
        NoteName,
        Output,
        PkhCondition,
        Seeds,
        Spend,
        Transaction,
    )

# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------


def encode_str(value: str) -> str:
    """Quote a string; only ``"``, ``\\`` and control characters are escaped."""
    return json.dumps(value, ensure_ascii=False)


def encode_int(value: int) -> str:
    """Encode an integer in plain decimal."""
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"expected int, got {type(value).__name__}"
        raise TypeError(msg)
    return str(value)


def _obj(*fields: tuple[str, str]) -> str:
    return "{" + ",".join(f"{encode_str(k)}:{v}" for k, v in fields) + "}"


def _arr(items: Iterable[str]) -> str:
    return "[" + ",".join(items) + "]"


# ---------------------------------------------------------------------------
# Schema types
# ---------------------------------------------------------------------------


def encode_note_name(name: NoteName) -> str:
    return _obj(("first", encode_str(name.first)), ("last", encode_str(name.last)))


def encode_pkh(pkh: PkhCondition) -> str:
    return _obj(
        ("threshold", encode_int(pkh.threshold)),
        ("pubkeys", _arr(encode_str(pk) for pk in pkh.pubkeys)),
    )


def encode_lock(lock: Lock) -> str:
    if isinstance(lock, PkhLock):
        return _obj((lock.kind.value, encode_pkh(lock.pkh)))
    msg = f"unsupported lock variant: {type(lock).__name__}"
    raise TypeError(msg)


def encode_note(note: Note) -> str:
    return _obj(
        ("name", encode_note_name(note.name)),
        ("value", encode_int(note.value)),
        ("lock", encode_lock(note.lock)),
    )


def encode_seeds(seeds: Seeds) -> str:
    return _obj(
        ("message_hash", encode_str(seeds.message_hash)),
        (
            "signatures",
            _arr(_arr((encode_str(pk), encode_str(sig))) for pk, sig in seeds.signatures),
        ),
    )


def encode_spend(spend: Spend) -> str:
    return _obj(("note", encode_note(spend.note)), ("seeds", encode_seeds(spend.seeds)))


def encode_output(output: Output) -> str:
    return _obj(
        ("recipient", encode_str(output.recipient)),
        ("value", encode_int(output.value)),
        ("lock", encode_lock(output.lock)),
    )


def encode_transaction(tx: Transaction) -> str:
    return _obj(
        ("spends", _arr(encode_spend(s) for s in tx.spends)),
        ("outputs", _arr(encode_output(o) for o in tx.outputs)),
    )


def encode_signing_payload(spend_index: int, tx: Transaction) -> bytes:
    """Encode ``{spend_index, transaction}`` to canonical UTF-8 bytes.

    The caller is responsible for clearing signature state first; this
    function encodes exactly what it is given.
    """
    text = _obj(
        ("spend_index", encode_int(spend_index)),
        ("transaction", encode_transaction(tx)),
    )
    return text.encode("utf-8")
