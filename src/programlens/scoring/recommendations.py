"""
Recommendation Engine: threshold checks over a metrics snapshot.

Each check reads only from ProgramMetrics and emits at most one
Recommendation. The returned list follows check order; grouping by
priority is left to the presentation layer (see group_by_priority).
"""

from typing import Dict, List, Optional

from ..analysis.models import Priority, ProgramMetrics, Recommendation
from ..config import LAMPORTS_PER_SOL, RENT_LAMPORTS_PER_BYTE_YEAR

HIGH_CU_PER_TX = 150_000
HIGH_CU_UTILIZATION_PERCENT = 90.0
CU_SAVINGS_FRACTION = 0.3

DEEP_CPI_DEPTH = 3
CPI_IMPROVEMENT_PER_LEVEL = 5

HOT_ACCOUNT_WRITES = 15

LARGE_ACCOUNT_BYTES = 100_000
VERY_LARGE_ACCOUNT_BYTES = 500_000

WRITE_SHARE_THRESHOLD = 0.5

HIGH_TX_VOLUME = 100
BATCH_FACTOR = 10

DENSE_INSTRUCTIONS_PER_TX = 5.0

MEMORY_LAYOUT_BYTES = 1000


def estimate_annual_rent_sol(
    size_bytes: int,
    lamports_per_byte_year: int = RENT_LAMPORTS_PER_BYTE_YEAR,
) -> float:
    """Rough yearly rent for an account of the given size, in SOL."""
    return size_bytes * lamports_per_byte_year / LAMPORTS_PER_SOL


class RecommendationEngine:
    """
    Turns a ProgramMetrics snapshot into prioritized recommendations.

    Stateless between calls: recommend() depends only on its argument and
    the constants given at construction.
    """

    def __init__(self, rent_lamports_per_byte_year: int = RENT_LAMPORTS_PER_BYTE_YEAR):
        self.rent_lamports_per_byte_year = rent_lamports_per_byte_year

    def recommend(self, metrics: ProgramMetrics) -> List[Recommendation]:
        """
        Build the ordered recommendation list for a metrics snapshot.

        Args:
            metrics: Aggregated program metrics

        Returns:
            One Recommendation per triggered check, in check order
        """
        # Evaluation order doubles as display order within a priority
        checks = [
            self._check_compute_units,
            self._check_cpi_depth,
            self._check_lock_contention,
            self._check_account_size,
            self._check_io_skew,
            self._check_transaction_volume,
            self._check_instruction_density,
            self._check_memory_layout,
        ]
        recommendations = []
        for check in checks:
            recommendation = check(metrics)
            if recommendation is not None:
                recommendations.append(recommendation)
        return recommendations

    def _check_compute_units(self, metrics: ProgramMetrics) -> Optional[Recommendation]:
        if metrics.average_cu_per_tx <= HIGH_CU_PER_TX:
            return None

        utilization = metrics.cu_utilization_percent
        savings = metrics.average_cu_per_tx * CU_SAVINGS_FRACTION
        return Recommendation(
            category="Compute Units",
            priority=Priority.HIGH if utilization > HIGH_CU_UTILIZATION_PERCENT else Priority.MEDIUM,
            description=(
                f"Using {metrics.average_cu_per_tx:,.0f} CU/tx ({utilization:.1f}% of the "
                f"{metrics.compute_units_limit:,} CU limit, {metrics.transaction_count} txs sampled). "
                "Reduce redundant calculations, cache frequently used values and minimize "
                "account deserialization."
            ),
            estimated_improvement=(
                f"Up to {savings:,.0f} CU/tx saved ({CU_SAVINGS_FRACTION:.0%} CU reduction)"
            ),
        )

    def _check_cpi_depth(self, metrics: ProgramMetrics) -> Optional[Recommendation]:
        if metrics.cpi_depth <= DEEP_CPI_DEPTH:
            return None

        excess = metrics.cpi_depth - 2
        return Recommendation(
            category="CPI Chain Depth",
            priority=Priority.HIGH,
            description=(
                f"Deep CPI chain detected ({metrics.cpi_depth} levels). Each invocation level "
                "adds overhead; flatten the call graph or combine operations into fewer programs."
            ),
            estimated_improvement=(
                f"{excess * CPI_IMPROVEMENT_PER_LEVEL}% CU reduction per transaction "
                f"({CPI_IMPROVEMENT_PER_LEVEL}% per excess level)"
            ),
        )

    def _check_lock_contention(self, metrics: ProgramMetrics) -> Optional[Recommendation]:
        if metrics.max_lock_count <= HOT_ACCOUNT_WRITES:
            return None

        hot = ", ".join(
            f"{address} ({count} writes)" for address, count in metrics.top_contended_accounts(3)
        )
        return Recommendation(
            category="Account Lock Contention",
            priority=Priority.HIGH,
            description=(
                f"High write contention across {metrics.transaction_count} sampled txs. "
                f"Hot accounts: {hot}. Shard state across accounts and pass read-only "
                "accounts where possible."
            ),
            estimated_improvement="2-5x throughput with proper sharding",
        )

    def _check_account_size(self, metrics: ProgramMetrics) -> Optional[Recommendation]:
        size = metrics.account_data_size_bytes
        if size <= LARGE_ACCOUNT_BYTES:
            return None

        size_kb = size / 1024
        rent_sol = estimate_annual_rent_sol(size, self.rent_lamports_per_byte_year)
        return Recommendation(
            category="Account Size",
            priority=Priority.HIGH if size > VERY_LARGE_ACCOUNT_BYTES else Priority.MEDIUM,
            description=(
                f"Large account: {size:,} bytes ({size_kb:.1f} KB, ~{rent_sol:.4f} SOL/year rent). "
                "Use state compression, archive old data off-chain or shard data across PDAs."
            ),
            estimated_improvement=f"Save ~{size_kb * 0.7:.1f} KB storage, 60-80% rent reduction",
        )

    def _check_io_skew(self, metrics: ProgramMetrics) -> Optional[Recommendation]:
        total = metrics.data_reads_bytes + metrics.data_writes_bytes
        write_share = metrics.data_writes_bytes / max(1, total)
        if write_share <= WRITE_SHARE_THRESHOLD:
            return None

        return Recommendation(
            category="Data I/O Efficiency",
            priority=Priority.MEDIUM,
            description=(
                f"Write-heavy access pattern ({write_share:.1%} of estimated I/O is writes). "
                "Batch writes together, avoid account reallocation and prefer fixed-size accounts."
            ),
            estimated_improvement="15-25% reduction in transaction costs",
        )

    def _check_transaction_volume(self, metrics: ProgramMetrics) -> Optional[Recommendation]:
        if metrics.transaction_count <= HIGH_TX_VOLUME:
            return None

        batches = metrics.transaction_count // BATCH_FACTOR
        return Recommendation(
            category="Transaction Batching",
            priority=Priority.MEDIUM,
            description=(
                f"High transaction volume ({metrics.transaction_count} txs). Group independent "
                "operations and use versioned transactions to fit more accounts per batch."
            ),
            estimated_improvement=f"Reduce to ~{batches} batched transactions, 40-60% fee savings",
        )

    def _check_instruction_density(self, metrics: ProgramMetrics) -> Optional[Recommendation]:
        per_tx = metrics.instruction_count / max(1, metrics.transaction_count)
        if per_tx <= DENSE_INSTRUCTIONS_PER_TX:
            return None

        return Recommendation(
            category="Instruction Count",
            priority=Priority.LOW,
            description=(
                f"Average {per_tx:.1f} instructions/tx. Combine related operations into "
                "composite instructions to cut validation overhead."
            ),
            estimated_improvement="10-20% reduction in per-transaction overhead",
        )

    def _check_memory_layout(self, metrics: ProgramMetrics) -> Optional[Recommendation]:
        if metrics.account_data_size_bytes <= MEMORY_LAYOUT_BYTES:
            return None

        return Recommendation(
            category="Memory Layout",
            priority=Priority.LOW,
            description=(
                f"Account holds {metrics.account_data_size_bytes:,} bytes. Order struct fields by "
                "size, use a C-compatible layout and zero-copy access, align to 8 bytes."
            ),
            estimated_improvement="5-15% faster serialization, lower CU for data access",
        )


_default_engine = RecommendationEngine()


def recommend(metrics: ProgramMetrics) -> List[Recommendation]:
    """Recommendations for a snapshot using the default constants."""
    return _default_engine.recommend(metrics)


def group_by_priority(recommendations: List[Recommendation]) -> Dict[Priority, List[Recommendation]]:
    """Bucket recommendations by priority, HIGH first, keeping check order."""
    groups: Dict[Priority, List[Recommendation]] = {
        Priority.HIGH: [],
        Priority.MEDIUM: [],
        Priority.LOW: [],
    }
    for recommendation in recommendations:
        groups[recommendation.priority].append(recommendation)
    return groups
