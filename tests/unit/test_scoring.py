"""Unit tests for risk scoring logic"""

import pytest
from datetime import timedelta
from quantara_gateway.domain.models import RiskInputs, RiskTier
from quantara_gateway.domain.scoring import (
    assess,
    calculate_confidence_band,
    calculate_probability_of_default,
    calculate_risk_score,
    is_eligible,
    reassess,
    recommended_limit,
    score_to_tier,
    tier_to_label,
)


def test_calculate_risk_score_worked_example(sample_inputs: RiskInputs):
    """78*.35 + 85*.30 + 60*.15 + 62*.20 = 74.2 -> 74"""
    assert calculate_risk_score(sample_inputs) == 74


def test_calculate_risk_score_extremes():
    """Best and worst possible inputs hit the ends of the scale"""
    best = RiskInputs(income_stability=100, repayment_history=100, sector_coefficient=1.5, liquidity_buffer=100)
    worst = RiskInputs(income_stability=0, repayment_history=0, sector_coefficient=0.5, liquidity_buffer=0)

    assert calculate_risk_score(best) == 100
    assert calculate_risk_score(worst) == 0


def test_calculate_risk_score_clamps_out_of_range_inputs():
    """Out-of-domain inputs are clamped, never rejected, inside the library"""
    inflated = RiskInputs(income_stability=250, repayment_history=100, sector_coefficient=3.0, liquidity_buffer=100)
    negative = RiskInputs(income_stability=-50, repayment_history=0, sector_coefficient=0.0, liquidity_buffer=-10)

    assert calculate_risk_score(inflated) == 100
    assert calculate_risk_score(negative) == 0


def test_calculate_risk_score_rounds_half_up():
    """Weighted sum of 2.5 rounds to 3, not to the even 2"""
    inputs = RiskInputs(income_stability=0, repayment_history=0, sector_coefficient=0.5, liquidity_buffer=12.5)
    assert calculate_risk_score(inputs) == 3


def test_probability_of_default_known_values():
    assert calculate_probability_of_default(50) == 0.15
    assert calculate_probability_of_default(74) == 0.0384
    assert calculate_probability_of_default(0) == 0.2946
    assert calculate_probability_of_default(100) == 0.0054


def test_probability_of_default_is_non_increasing_and_bounded():
    values = [calculate_probability_of_default(score) for score in range(0, 101)]

    assert all(0 <= v <= 0.3 for v in values)
    assert all(later <= earlier for earlier, later in zip(values, values[1:]))


def test_confidence_band_worked_example():
    """half width 74 * 0.05 = 3.7 -> (70.3, 77.7) -> (70, 78)"""
    assert calculate_confidence_band(74) == (70, 78)


def test_confidence_band_stays_within_scale():
    assert calculate_confidence_band(100, volatility=0.2) == (80, 100)
    assert calculate_confidence_band(0) == (0, 0)

    for score in range(0, 101):
        for volatility in (0.0, 0.05, 0.5, 2.0):
            lower, upper = calculate_confidence_band(score, volatility)
            assert 0 <= lower <= score <= upper <= 100


def test_probability_of_default_clamps_out_of_range_scores():
    assert calculate_probability_of_default(-1000) == calculate_probability_of_default(0)
    assert calculate_probability_of_default(1000) == calculate_probability_of_default(100)


def test_confidence_band_clamps_out_of_range_scores():
    """150 is treated as 100: half width 5 -> (95, 100)"""
    assert calculate_confidence_band(150) == (95, 100)
    assert calculate_confidence_band(-20) == (0, 0)


def test_score_to_tier_thresholds():
    """Each threshold is inclusive on its lower bound"""
    assert score_to_tier(100) == RiskTier.AAA
    assert score_to_tier(90) == RiskTier.AAA
    assert score_to_tier(89) == RiskTier.AA
    assert score_to_tier(80) == RiskTier.AA
    assert score_to_tier(74) == RiskTier.A
    assert score_to_tier(70) == RiskTier.A
    assert score_to_tier(60) == RiskTier.BBB
    assert score_to_tier(50) == RiskTier.BB
    assert score_to_tier(40) == RiskTier.B
    assert score_to_tier(25) == RiskTier.CCC
    assert score_to_tier(24) == RiskTier.D
    assert score_to_tier(0) == RiskTier.D


def test_score_to_tier_is_monotonic():
    """A higher score never lands in a worse tier"""
    order = list(RiskTier)  # best first
    ranks = [order.index(score_to_tier(score)) for score in range(0, 101)]
    assert all(later <= earlier for earlier, later in zip(ranks, ranks[1:]))


def test_tier_to_label_covers_every_tier():
    assert tier_to_label(RiskTier.AAA) == "Prime"
    assert tier_to_label(RiskTier.A) == "Upper Medium"
    assert tier_to_label(RiskTier.D) == "Default"
    assert all(tier_to_label(tier) for tier in RiskTier)


def test_eligibility_and_recommended_limit():
    assert is_eligible(40) is True
    assert is_eligible(39) is False
    # multiplier 0.74 * 0.5 + 0.1 = 0.47
    assert recommended_limit(74, 10_000) == 4700
    assert recommended_limit(0, 10_000) == 1000


def test_assess_starts_history(sample_inputs: RiskInputs, now):
    profile = assess("user_1", sample_inputs, now=now)

    assert profile.user_id == "user_1"
    assert profile.risk_score == 74
    assert profile.tier == RiskTier.A
    assert profile.confidence_band == (70, 78)
    assert profile.probability_of_default == 0.0384
    assert profile.last_calculated == now
    assert len(profile.history) == 1
    assert profile.history[0].score == 74


def test_reassess_appends_history_without_mutating(sample_inputs: RiskInputs, now):
    profile = assess("user_1", sample_inputs, now=now)
    weaker = RiskInputs(income_stability=30, repayment_history=40, sector_coefficient=0.8, liquidity_buffer=20)

    updated = reassess(profile, weaker, now=now + timedelta(days=1))

    assert updated.id == profile.id
    assert updated.risk_score < profile.risk_score
    assert [e.score for e in updated.history] == [74, updated.risk_score]
    assert updated.history[0] == profile.history[0]
    # Input profile untouched
    assert len(profile.history) == 1
    assert profile.inputs is sample_inputs
