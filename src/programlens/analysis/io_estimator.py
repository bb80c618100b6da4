"""
I/O Volume Estimator.

Byte volumes here are heuristics for ranking, not measurements: every
account access is charged a fixed read estimate and every write-locked
account a fixed, larger write estimate. Actual account data sizes are
never fetched.
"""

from typing import Iterable, Tuple

from ..config import READ_BYTES_PER_ACCESS, WRITE_BYTES_PER_ACCESS
from .models import TransactionRecord


def estimate_data_io(
    records: Iterable[TransactionRecord],
    read_bytes_per_access: int = READ_BYTES_PER_ACCESS,
    write_bytes_per_access: int = WRITE_BYTES_PER_ACCESS,
) -> Tuple[int, int]:
    """
    Estimate read and write byte volume for a batch of transactions.

    Returns:
        Tuple of (data_reads_bytes, data_writes_bytes)
    """
    total_reads = 0
    total_writes = 0

    for record in records:
        total_reads += len(record.accessed_accounts) * read_bytes_per_access
        total_writes += len(record.writable_accounts) * write_bytes_per_access

    return total_reads, total_writes
