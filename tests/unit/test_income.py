"""Unit tests for income analytics"""

import pytest
from quantara_gateway.domain.income import (
    add_earning,
    calculate_coverage_ratio,
    calculate_dti,
    calculate_stability_index,
    calculate_volatility,
    compute_analytics,
    create_income_source,
)


def test_stability_index_insufficient_data_is_stable():
    """Fewer than 2 points: assume stable"""
    assert calculate_stability_index([]) == 100
    assert calculate_stability_index([4200]) == 100


def test_stability_index_zero_mean():
    assert calculate_stability_index([0, 0, 0]) == 0


def test_stability_index_coefficient_of_variation():
    """Population std dev: [1000, 3000] -> mean 2000, std 1000, cv 0.5 -> 50"""
    assert calculate_stability_index([1000, 3000]) == 50
    assert calculate_stability_index([5000, 5000, 5000]) == 100


def test_stability_index_floors_at_zero_for_erratic_income():
    """cv above 1 would give a negative index; it is clamped"""
    assert calculate_stability_index([0, 0, 900]) == 0


def test_volatility_uses_sample_std_dev():
    assert calculate_volatility([]) == 0
    assert calculate_volatility([1200]) == 0
    # mean 5, squared deviations sum to 32, / (8 - 1)
    assert calculate_volatility([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx((32 / 7) ** 0.5)


def test_coverage_ratio():
    assert calculate_coverage_ratio(5000, 2000) == 2.5
    assert calculate_coverage_ratio(1, 3) == 0.33
    assert calculate_coverage_ratio(5000, 0) == 0


def test_dti():
    assert calculate_dti(1500, 5000) == 30.0
    assert calculate_dti(1, 3) == 33.33
    assert calculate_dti(1500, 0) == 100


def test_add_earning_recomputes_metrics(now):
    source = create_income_source("user_1", "freelance", "Design work", 3000, "monthly", now=now)
    assert source.stability_index == 100
    assert source.volatility == 0

    source = add_earning(source, "2026-01", 1000, verified=True)
    updated = add_earning(source, "2026-02", 3000)

    assert [e.month for e in updated.historical_earnings] == ["2026-01", "2026-02"]
    assert updated.stability_index == 50
    assert updated.volatility == pytest.approx(2_000_000 ** 0.5)
    # Earlier snapshot is not touched
    assert len(source.historical_earnings) == 1


def test_compute_analytics_across_sources(now):
    salary = create_income_source("user_1", "salary", "Employer", 4000, "bi-weekly", now=now)
    salary = add_earning(salary, "2026-01", 4000, verified=True)
    salary = add_earning(salary, "2026-02", 4000, verified=True)
    rental = create_income_source("user_1", "rental", "Flat", 2000, "monthly", now=now)
    rental = add_earning(rental, "2026-01", 2000)

    analytics = compute_analytics([salary, rental])

    assert analytics.total_verified_income == 8000
    assert analytics.ytd_total == 10000
    assert analytics.average_monthly == 3333.33
    assert analytics.deposit_frequency == "Bi-Weekly"
    # declared amounts 4000/2000, mean 3000, max deviation 1000 -> 33.33%
    assert analytics.source_variation == 33.33


def test_compute_analytics_without_sources():
    analytics = compute_analytics([])

    assert analytics.average_monthly == 0
    assert analytics.stability_index == 100
    assert analytics.deposit_frequency == "Mixed"
    assert analytics.source_variation == 0
