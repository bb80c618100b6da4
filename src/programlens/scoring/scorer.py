"""
Optimization Scorer.

Starts from 100 and subtracts independent, individually capped penalties:

    compute units      up to 30
    account size       up to 20
    CPI depth          up to 15
    lock contention    up to 15

The total is clamped to [0, 100]. The function is pure: the same
ProgramMetrics always yields the same score.
"""

import math

from ..analysis.models import ProgramMetrics

MAX_SCORE = 100.0

CU_PENALTY_CAP = 30.0
CU_PENALTY_WEIGHT = 0.3

ACCOUNT_SIZE_THRESHOLD = 10_000
ACCOUNT_SIZE_PENALTY_CAP = 20.0

CPI_DEPTH_THRESHOLD = 2
CPI_DEPTH_PENALTY_PER_LEVEL = 5.0
CPI_DEPTH_PENALTY_CAP = 15.0

LOCK_COUNT_THRESHOLD = 10
LOCK_PENALTY_PER_WRITE = 1.5
LOCK_PENALTY_CAP = 15.0


def compute_unit_penalty(metrics: ProgramMetrics) -> float:
    # No configured limit means no basis for a ratio
    if metrics.compute_units_limit <= 0:
        return 0.0
    utilization = (metrics.average_cu_per_tx / metrics.compute_units_limit) * 100
    return min(CU_PENALTY_CAP, max(0.0, utilization * CU_PENALTY_WEIGHT))


def account_size_penalty(metrics: ProgramMetrics) -> float:
    size = metrics.account_data_size_bytes
    if size <= ACCOUNT_SIZE_THRESHOLD:
        return 0.0
    return min(ACCOUNT_SIZE_PENALTY_CAP, math.log10(size / 1000) * 10)


def cpi_depth_penalty(metrics: ProgramMetrics) -> float:
    if metrics.cpi_depth <= CPI_DEPTH_THRESHOLD:
        return 0.0
    return min(CPI_DEPTH_PENALTY_CAP, (metrics.cpi_depth - CPI_DEPTH_THRESHOLD) * CPI_DEPTH_PENALTY_PER_LEVEL)


def lock_contention_penalty(metrics: ProgramMetrics) -> float:
    max_locks = metrics.max_lock_count
    if max_locks <= LOCK_COUNT_THRESHOLD:
        return 0.0
    return min(LOCK_PENALTY_CAP, (max_locks - LOCK_COUNT_THRESHOLD) * LOCK_PENALTY_PER_WRITE)


def score(metrics: ProgramMetrics) -> float:
    """
    Compute the 0-100 optimization score for a metrics snapshot.

    Args:
        metrics: Aggregated program metrics

    Returns:
        Score in [0, 100], higher is better
    """
    penalties = (
        compute_unit_penalty(metrics)
        + account_size_penalty(metrics)
        + cpi_depth_penalty(metrics)
        + lock_contention_penalty(metrics)
    )
    return min(MAX_SCORE, max(0.0, MAX_SCORE - penalties))


def rating(value: float) -> str:
    """Human-readable rating band for a score."""
    if value >= 80:
        return "Excellent"
    if value >= 60:
        return "Good, room for improvement"
    return "Needs optimization"
