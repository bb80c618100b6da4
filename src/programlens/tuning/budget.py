"""Compute budget and account sizing helpers."""

from typing import List

from solders.compute_budget import set_compute_unit_limit, set_compute_unit_price
from solders.instruction import Instruction

# Max compute units a single transaction may request
MAX_COMPUTE_UNIT_LIMIT = 1_400_000

CU_LIMIT_BUFFER = 1.1


def calculate_optimal_cu_limit(average_usage: float) -> int:
    """Observed average usage plus a 10% buffer, capped at the runtime maximum."""
    if average_usage < 0:
        raise ValueError(f"average_usage must not be negative, got {average_usage}")
    return min(MAX_COMPUTE_UNIT_LIMIT, int(average_usage * CU_LIMIT_BUFFER))


def create_compute_budget_instructions(cu_limit: int, cu_price: int) -> List[Instruction]:
    """
    Build the ComputeBudget instructions to prepend to a transaction.

    Args:
        cu_limit: Compute unit limit for the transaction
        cu_price: Priority fee in micro-lamports per compute unit
    """
    return [
        set_compute_unit_limit(cu_limit),
        set_compute_unit_price(cu_price),
    ]


def aligned_account_size(required_size: int) -> int:
    """Round an account size up to an 8-byte boundary."""
    return ((required_size + 7) // 8) * 8
