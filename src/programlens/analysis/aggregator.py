"""
Metrics Aggregator: reduces decoded transactions into ProgramMetrics.
"""

from dataclasses import replace
from typing import Sequence

from ..config import (
    DEFAULT_COMPUTE_UNITS_LIMIT,
    READ_BYTES_PER_ACCESS,
    WRITE_BYTES_PER_ACCESS,
)
from ..scoring.scorer import score
from .contention import aggregate_account_locks
from .io_estimator import estimate_data_io
from .models import ProgramMetrics, ProgramSnapshot, TransactionRecord


def average_compute_units(records: Sequence[TransactionRecord]) -> float:
    """
    Mean CU per transaction over records that reported CU.

    Records without CU metadata are left out of both the sum and the count.
    """
    known = [r.compute_units_consumed for r in records if r.compute_units_consumed is not None]
    return sum(known) / max(len(known), 1)


def aggregate_metrics(
    snapshot: ProgramSnapshot,
    records: Sequence[TransactionRecord],
    compute_units_limit: int = DEFAULT_COMPUTE_UNITS_LIMIT,
    read_bytes_per_access: int = READ_BYTES_PER_ACCESS,
    write_bytes_per_access: int = WRITE_BYTES_PER_ACCESS,
) -> ProgramMetrics:
    """
    Combine per-transaction records and program state into one snapshot.

    An empty record list is valid and yields zeroed metrics with a score
    of 100.

    Args:
        snapshot: Program account state
        records: Successfully decoded transactions
        compute_units_limit: Configured CU ceiling used for scoring

    Returns:
        ProgramMetrics with optimization_score filled in
    """
    compute_units_used = sum(
        r.compute_units_consumed for r in records if r.compute_units_consumed is not None
    )
    data_reads, data_writes = estimate_data_io(
        records,
        read_bytes_per_access=read_bytes_per_access,
        write_bytes_per_access=write_bytes_per_access,
    )

    metrics = ProgramMetrics(
        compute_units_used=compute_units_used,
        compute_units_limit=compute_units_limit,
        account_data_size_bytes=snapshot.account_data_size_bytes,
        transaction_count=len(records),
        average_cu_per_tx=average_compute_units(records),
        cpi_depth=max((r.cpi_depth for r in records), default=0),
        account_locks=aggregate_account_locks(records),
        instruction_count=sum(r.instruction_count for r in records),
        data_reads_bytes=data_reads,
        data_writes_bytes=data_writes,
    )
    return replace(metrics, optimization_score=score(metrics))
