"""
Analysis module: decoding transactions and estimating execution signals.
"""

from .models import (
    ProgramSnapshot,
    TransactionRecord,
    ProgramMetrics,
    Priority,
    Recommendation,
)
from .decoder import TransactionDecodeError, decode_transaction
from .cpi import estimate_cpi_depth
from .contention import aggregate_account_locks
from .io_estimator import estimate_data_io

__all__ = [
    "ProgramSnapshot",
    "TransactionRecord",
    "ProgramMetrics",
    "Priority",
    "Recommendation",
    "TransactionDecodeError",
    "decode_transaction",
    "estimate_cpi_depth",
    "aggregate_account_locks",
    "estimate_data_io",
]
