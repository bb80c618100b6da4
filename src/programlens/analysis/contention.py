"""Account Contention Aggregator: write-lock frequency across a batch."""

from collections import Counter
from typing import Dict, Iterable

from .models import TransactionRecord


def aggregate_account_locks(records: Iterable[TransactionRecord]) -> Dict[str, int]:
    """
    Count how many sampled transactions write-locked each account.

    Only accounts written at least once appear in the result. Counts cover
    the sampled batch, not the account's all-time history.
    """
    locks: Counter = Counter()
    for record in records:
        locks.update(record.writable_accounts)
    return dict(locks)
