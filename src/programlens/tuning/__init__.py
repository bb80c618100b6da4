"""Tuning helpers derived from analysis results."""

from .budget import (
    calculate_optimal_cu_limit,
    create_compute_budget_instructions,
    aligned_account_size,
)
from .batching import calculate_optimal_batch_size, group_independent_transactions

__all__ = [
    "calculate_optimal_cu_limit",
    "create_compute_budget_instructions",
    "aligned_account_size",
    "calculate_optimal_batch_size",
    "group_independent_transactions",
]
