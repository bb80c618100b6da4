"""
Data models for program performance analysis.

These models carry what is reconstructed from a program's recent
transaction history: one record per decoded transaction, the aggregate
metrics snapshot, and the recommendations derived from it.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class ProgramSnapshot:
    """Program account state captured at the start of an analysis."""
    address: str
    account_data_size_bytes: int
    lamport_balance: int


@dataclass(frozen=True)
class TransactionRecord:
    """Execution characteristics decoded from one transaction."""
    signature: str
    # None when the RPC metadata omitted the value; never read as zero
    compute_units_consumed: Optional[int]
    accessed_accounts: FrozenSet[str] = frozenset()
    writable_accounts: FrozenSet[str] = frozenset()
    instruction_count: int = 0
    log_lines: Tuple[str, ...] = ()
    cpi_depth: int = 0

    @property
    def has_compute_units(self) -> bool:
        return self.compute_units_consumed is not None


@dataclass(frozen=True)
class ProgramMetrics:
    """
    Aggregate performance snapshot for one program.

    Built once per analysis and never mutated. Use dataclasses.replace()
    to derive an edited copy.
    """
    compute_units_used: int = 0
    compute_units_limit: int = 2_000_000
    account_data_size_bytes: int = 0
    transaction_count: int = 0
    average_cu_per_tx: float = 0.0
    optimization_score: float = 100.0
    cpi_depth: int = 0
    account_locks: Mapping[str, int] = field(default_factory=dict, hash=False)
    instruction_count: int = 0
    data_reads_bytes: int = 0
    data_writes_bytes: int = 0

    def __post_init__(self):
        # Read-only view so the snapshot stays immutable
        object.__setattr__(self, "account_locks", MappingProxyType(dict(self.account_locks)))

    @property
    def max_lock_count(self) -> int:
        """Highest write count across all contended accounts (0 if none)."""
        return max(self.account_locks.values(), default=0)

    @property
    def cu_utilization_percent(self) -> float:
        """Average CU per transaction as a percentage of the limit."""
        if self.compute_units_limit <= 0:
            return 0.0
        return (self.average_cu_per_tx / self.compute_units_limit) * 100

    def top_contended_accounts(self, n: int = 3) -> List[Tuple[str, int]]:
        """Accounts by descending write count, ties broken by address."""
        ranked = sorted(self.account_locks.items(), key=lambda item: (-item[1], item[0]))
        return ranked[:n]

    def to_dict(self) -> Dict:
        return {
            "compute_units_used": self.compute_units_used,
            "compute_units_limit": self.compute_units_limit,
            "account_data_size_bytes": self.account_data_size_bytes,
            "transaction_count": self.transaction_count,
            "average_cu_per_tx": self.average_cu_per_tx,
            "optimization_score": self.optimization_score,
            "cpi_depth": self.cpi_depth,
            "account_locks": dict(self.account_locks),
            "instruction_count": self.instruction_count,
            "data_reads_bytes": self.data_reads_bytes,
            "data_writes_bytes": self.data_writes_bytes,
        }


class Priority(Enum):
    """Recommendation priority. HIGH outranks MEDIUM outranks LOW."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

    def __lt__(self, other):
        if not isinstance(other, Priority):
            return NotImplemented
        return self.rank < other.rank


_PRIORITY_RANK = {Priority.LOW: 0, Priority.MEDIUM: 1, Priority.HIGH: 2}


@dataclass(frozen=True)
class Recommendation:
    """A prioritized, quantified optimization suggestion."""
    category: str
    priority: Priority
    description: str
    estimated_improvement: str

    def to_dict(self) -> Dict:
        return {
            "category": self.category,
            "priority": self.priority.value,
            "description": self.description,
            "estimated_improvement": self.estimated_improvement,
        }
