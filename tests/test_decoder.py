"""Tests for the transaction decoder."""

import pytest

from programlens.analysis.decoder import (
    TransactionDecodeError,
    decode_transaction,
    parse_compute_units,
)
from tests.conftest import make_transaction

PAYER = "9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka"
POOL = "So11111111111111111111111111111111111111112"
MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"


def test_decode_jsonparsed_transaction():
    response = make_transaction(
        "sig1",
        compute_units=4200,
        accounts=[(PAYER, True), (POOL, True), (MINT, False)],
        logs=["Program A invoke [1]", "Program B invoke [2]", "Program B success", "Program A success"],
        instruction_count=3,
    )

    record = decode_transaction("sig1", response)

    assert record.signature == "sig1"
    assert record.compute_units_consumed == 4200
    assert record.accessed_accounts == {PAYER, POOL, MINT}
    assert record.writable_accounts == {PAYER, POOL}
    assert record.instruction_count == 3
    assert record.log_lines[0] == "Program A invoke [1]"
    assert record.cpi_depth == 2


def test_missing_compute_units_is_none_not_zero():
    record = decode_transaction("sig", make_transaction("sig", accounts=[(PAYER, True)]))
    assert record.compute_units_consumed is None
    assert not record.has_compute_units


def test_reported_zero_compute_units_is_kept():
    record = decode_transaction("sig", make_transaction("sig", compute_units=0))
    assert record.compute_units_consumed == 0


@pytest.mark.parametrize("raw, expected", [
    (1500, 1500),
    ("1500", 1500),
    (None, None),
    (-1, None),
    ("abc", None),
    (True, None),
    (1.5, None),
    ("²", None),
    (" 42 ", 42),
])
def test_parse_compute_units(raw, expected):
    assert parse_compute_units(raw) == expected


def test_json_encoding_uses_header_for_writability():
    response = {
        "meta": {"computeUnitsConsumed": 100, "logMessages": None},
        "transaction": {
            "signatures": ["sig"],
            "message": {
                "accountKeys": [PAYER, "Signer2ReadOnly", POOL, MINT],
                "header": {
                    "numRequiredSignatures": 2,
                    "numReadonlySignedAccounts": 1,
                    "numReadonlyUnsignedAccounts": 1,
                },
                "instructions": [{}, {}],
            },
        },
    }

    record = decode_transaction("sig", response)

    assert record.writable_accounts == {PAYER, POOL}
    assert record.accessed_accounts == {PAYER, "Signer2ReadOnly", POOL, MINT}
    assert record.log_lines == ()
    assert record.instruction_count == 2


def test_no_locking_info_treats_accounts_as_readonly():
    response = {
        "meta": {"computeUnitsConsumed": 100},
        "transaction": {"message": {"accountKeys": [PAYER, POOL], "instructions": []}},
    }

    record = decode_transaction("sig", response)

    assert record.accessed_accounts == {PAYER, POOL}
    assert record.writable_accounts == frozenset()


def test_loaded_addresses_are_included():
    response = make_transaction("sig", compute_units=10, accounts=[(PAYER, True)])
    response["meta"]["loadedAddresses"] = {"writable": [POOL], "readonly": [MINT]}

    record = decode_transaction("sig", response)

    assert record.accessed_accounts == {PAYER, POOL, MINT}
    assert record.writable_accounts == {PAYER, POOL}


@pytest.mark.parametrize("loaded", [
    {"writable": 5},
    {"readonly": "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"},
])
def test_malformed_loaded_addresses_raise(loaded):
    response = make_transaction("sig", compute_units=10, accounts=[(PAYER, True)])
    response["meta"]["loadedAddresses"] = loaded

    with pytest.raises(TransactionDecodeError, match="loadedAddresses"):
        decode_transaction("sig", response)


def test_missing_meta_still_decodes():
    response = make_transaction("sig", compute_units=10, accounts=[(PAYER, False)])
    response["meta"] = None

    record = decode_transaction("sig", response)

    assert record.compute_units_consumed is None
    assert record.log_lines == ()


@pytest.mark.parametrize("response", [
    None,
    "not a transaction",
    {"meta": {}},
    {"transaction": {"signatures": ["sig"]}},
    {"transaction": {"message": {"accountKeys": "oops"}}},
    {"transaction": {"message": {"accountKeys": [42]}}},
])
def test_malformed_response_raises(response):
    with pytest.raises(TransactionDecodeError):
        decode_transaction("sig", response)
