"""Tests for the optimization scorer."""

import random
from dataclasses import replace

import pytest

from programlens.analysis.models import ProgramMetrics
from programlens.scoring.scorer import (
    account_size_penalty,
    compute_unit_penalty,
    cpi_depth_penalty,
    lock_contention_penalty,
    rating,
    score,
)


def test_no_penalty_baseline_scores_100():
    metrics = ProgramMetrics(average_cu_per_tx=0, account_data_size_bytes=0, cpi_depth=0, account_locks={})
    assert score(metrics) == 100.0


def test_compute_unit_penalty():
    metrics = ProgramMetrics(average_cu_per_tx=200_000, compute_units_limit=2_000_000)
    # 10% utilization * 0.3
    assert compute_unit_penalty(metrics) == pytest.approx(3.0)


def test_compute_unit_penalty_is_capped():
    metrics = ProgramMetrics(average_cu_per_tx=10_000_000, compute_units_limit=2_000_000)
    assert compute_unit_penalty(metrics) == 30.0


def test_zero_cu_limit_skips_penalty():
    metrics = ProgramMetrics(average_cu_per_tx=500_000, compute_units_limit=0)
    assert compute_unit_penalty(metrics) == 0.0
    assert score(metrics) == 100.0


def test_account_size_penalty_threshold():
    assert account_size_penalty(ProgramMetrics(account_data_size_bytes=10_000)) == 0.0
    assert account_size_penalty(ProgramMetrics(account_data_size_bytes=100_000)) == pytest.approx(20.0)
    assert account_size_penalty(ProgramMetrics(account_data_size_bytes=50_000)) == pytest.approx(16.9897, abs=1e-3)
    assert account_size_penalty(ProgramMetrics(account_data_size_bytes=10_000_000)) == 20.0


def test_cpi_depth_penalty():
    assert cpi_depth_penalty(ProgramMetrics(cpi_depth=2)) == 0.0
    assert cpi_depth_penalty(ProgramMetrics(cpi_depth=3)) == 5.0
    assert cpi_depth_penalty(ProgramMetrics(cpi_depth=10)) == 15.0


def test_lock_contention_penalty():
    assert lock_contention_penalty(ProgramMetrics(account_locks={"a": 10})) == 0.0
    assert lock_contention_penalty(ProgramMetrics(account_locks={"a": 12, "b": 3})) == 3.0
    assert lock_contention_penalty(ProgramMetrics(account_locks={"a": 40})) == 15.0


def test_all_penalties_maxed_stays_in_bounds():
    metrics = ProgramMetrics(
        average_cu_per_tx=5_000_000,
        account_data_size_bytes=10_000_000,
        cpi_depth=20,
        account_locks={"a": 100},
    )
    assert score(metrics) == 20.0


def test_score_is_bounded_for_random_metrics():
    rng = random.Random(7)
    for _ in range(500):
        metrics = ProgramMetrics(
            average_cu_per_tx=rng.uniform(0, 5_000_000),
            compute_units_limit=rng.choice([0, 200_000, 1_400_000, 2_000_000]),
            account_data_size_bytes=rng.randint(0, 20_000_000),
            cpi_depth=rng.randint(0, 12),
            account_locks={"acct": rng.randint(1, 60)} if rng.random() < 0.7 else {},
        )
        assert 0.0 <= score(metrics) <= 100.0


@pytest.mark.parametrize("field_name, values", [
    ("cpi_depth", [0, 2, 3, 4, 6, 9]),
    ("average_cu_per_tx", [0, 1_000, 150_000, 1_000_000, 2_000_000, 9_000_000]),
    ("account_data_size_bytes", [0, 10_000, 10_001, 50_000, 134_080, 1_000_000]),
])
def test_score_is_monotonic(field_name, values):
    base = ProgramMetrics(average_cu_per_tx=50_000, account_data_size_bytes=5_000, cpi_depth=1)
    scores = [score(replace(base, **{field_name: v})) for v in values]
    assert scores == sorted(scores, reverse=True)


def test_score_is_monotonic_in_lock_count():
    scores = [score(ProgramMetrics(account_locks={"pool": n})) for n in (1, 10, 11, 15, 25, 40)]
    assert scores == sorted(scores, reverse=True)


def test_score_is_deterministic():
    metrics = ProgramMetrics(average_cu_per_tx=123_456, account_data_size_bytes=77_777, cpi_depth=4,
                             account_locks={"a": 13})
    assert score(metrics) == score(metrics)


def test_large_account_scenario_scores_about_80():
    metrics = ProgramMetrics(
        average_cu_per_tx=619,
        compute_units_limit=2_000_000,
        account_data_size_bytes=134_080,
        cpi_depth=0,
        account_locks={},
        transaction_count=1000,
    )
    assert score(metrics) == pytest.approx(80.0, abs=0.05)


def test_small_account_scenario_scores_100():
    metrics = ProgramMetrics(
        average_cu_per_tx=118,
        account_data_size_bytes=21,
        cpi_depth=0,
        account_locks={},
        transaction_count=1000,
    )
    assert score(metrics) == pytest.approx(100.0, abs=0.01)


def test_rating_bands():
    assert rating(95) == "Excellent"
    assert rating(80) == "Excellent"
    assert rating(65) == "Good, room for improvement"
    assert rating(12) == "Needs optimization"
