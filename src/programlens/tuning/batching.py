"""Transaction batching helpers."""

from typing import List, Sequence, Set

from ..analysis.models import TransactionRecord

MIN_BATCH_SIZE = 4
MAX_BATCH_SIZE = 64


def calculate_optimal_batch_size(network_tps: int, target_confirmation_time_ms: int) -> int:
    """Transactions that fit in the target confirmation window, clamped to [4, 64]."""
    txs_per_ms = network_tps / 1000
    optimal = int(txs_per_ms * target_confirmation_time_ms)
    return max(MIN_BATCH_SIZE, min(MAX_BATCH_SIZE, optimal))


def group_independent_transactions(
    records: Sequence[TransactionRecord],
    max_batch_size: int = 8,
) -> List[List[TransactionRecord]]:
    """
    Group transactions into batches that never write-lock the same account.

    Greedy first-fit in input order: each transaction joins the first batch
    with room whose writable accounts it does not overlap.
    """
    if max_batch_size < 1:
        raise ValueError("max_batch_size must be at least 1")

    batches: List[List[TransactionRecord]] = []
    locked: List[Set[str]] = []

    for record in records:
        for batch, accounts in zip(batches, locked):
            if len(batch) < max_batch_size and accounts.isdisjoint(record.writable_accounts):
                batch.append(record)
                accounts.update(record.writable_accounts)
                break
        else:
            batches.append([record])
            locked.append(set(record.writable_accounts))

    return batches
