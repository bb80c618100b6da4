"""
Pytest fixtures for programlens tests.

FakeRpcClient stands in for SolanaRpcClient and serves canned
getTransaction results built by make_transaction().
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pytest

from programlens.analysis.models import ProgramSnapshot
from programlens.core.rpc import RpcError

PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"

# Rent-exempt minimum for an account is (128 + size) bytes at two years of rent
RENT_ACCOUNT_OVERHEAD = 128
RENT_LAMPORTS_PER_BYTE_YEAR = 6_960

_MISSING = object()


def make_transaction(
    signature: str,
    compute_units: Any = _MISSING,
    accounts: Iterable[Tuple[str, bool]] = (),
    logs: Optional[List[str]] = None,
    instruction_count: int = 1,
) -> Dict[str, Any]:
    """Build a jsonParsed getTransaction result."""
    meta: Dict[str, Any] = {"err": None, "fee": 5000, "logMessages": logs if logs is not None else []}
    if compute_units is not _MISSING:
        meta["computeUnitsConsumed"] = compute_units
    return {
        "slot": 1,
        "blockTime": 1700000000,
        "meta": meta,
        "transaction": {
            "signatures": [signature],
            "message": {
                "accountKeys": [
                    {"pubkey": key, "writable": writable, "signer": False, "source": "transaction"}
                    for key, writable in accounts
                ],
                "instructions": [{"programId": PROGRAM_ID, "data": ""} for _ in range(instruction_count)],
            },
        },
    }


class FakeRpcClient:
    """In-memory RPC collaborator with concurrency tracking."""

    def __init__(
        self,
        snapshot: Optional[ProgramSnapshot] = None,
        transactions: Optional[Dict[str, Any]] = None,
        signatures: Optional[List[str]] = None,
        failing_signatures: Iterable[str] = (),
        account_error: Optional[Exception] = None,
        signatures_error: Optional[Exception] = None,
    ):
        self.snapshot = snapshot or ProgramSnapshot(PROGRAM_ID, 1_000, 1_000_000)
        self.transactions = transactions or {}
        self.signatures = signatures if signatures is not None else list(self.transactions)
        self.failing_signatures = set(failing_signatures)
        self.account_error = account_error
        self.signatures_error = signatures_error
        self.requested_limits: List[int] = []
        self.rent_sizes: List[int] = []
        self.fetched: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def get_program_account(self, address: str) -> ProgramSnapshot:
        if self.account_error:
            raise self.account_error
        return self.snapshot

    async def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        self.rent_sizes.append(size)
        return (RENT_ACCOUNT_OVERHEAD + size) * RENT_LAMPORTS_PER_BYTE_YEAR

    async def get_recent_signatures(self, address: str, limit: int) -> List[str]:
        if self.signatures_error:
            raise self.signatures_error
        self.requested_limits.append(limit)
        return self.signatures[:limit]

    async def get_transaction_details(self, signature: str) -> Optional[Dict[str, Any]]:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0.001)
            if signature in self.failing_signatures:
                raise RpcError("getTransaction", "timed out after 30.0s")
            self.fetched.append(signature)
            return self.transactions.get(signature)
        finally:
            self.in_flight -= 1


@pytest.fixture
def program_id() -> str:
    return PROGRAM_ID


@pytest.fixture
def fake_client_factory():
    """Factory for FakeRpcClient instances."""
    return FakeRpcClient
