"""Risk scoring engine - deterministic score, default probability and tier"""

import math
from dataclasses import replace
from datetime import datetime
from typing import Dict, Tuple

from quantara_gateway.domain.models import RiskInputs, RiskProfile, RiskScoreEntry, RiskTier
from quantara_gateway.utils.date_utils import utc_now
from quantara_gateway.utils.ids import generate_id
from quantara_gateway.utils.math_utils import clamp, round_half_up

WEIGHTS: Dict[str, float] = {
    "income_stability": 0.35,
    "repayment_history": 0.30,
    "sector_coefficient": 0.15,
    "liquidity_buffer": 0.20,
}

POD_STEEPNESS = 0.08
POD_MIDPOINT = 50
POD_CEILING = 0.3

# (minimum score, tier), checked top-down
TIER_THRESHOLDS: Tuple[Tuple[int, RiskTier], ...] = (
    (90, RiskTier.AAA),
    (80, RiskTier.AA),
    (70, RiskTier.A),
    (60, RiskTier.BBB),
    (50, RiskTier.BB),
    (40, RiskTier.B),
    (25, RiskTier.CCC),
)

TIER_LABELS: Dict[RiskTier, str] = {
    RiskTier.AAA: "Prime",
    RiskTier.AA: "High Grade",
    RiskTier.A: "Upper Medium",
    RiskTier.BBB: "Lower Medium",
    RiskTier.BB: "Speculative",
    RiskTier.B: "Highly Speculative",
    RiskTier.CCC: "Substantial Risk",
    RiskTier.D: "Default",
}


def calculate_risk_score(inputs: RiskInputs) -> int:
    """
    Calculate risk score from 0 (highest risk) to 100 (lowest risk).

    Scoring weights:
    - 35%: Income stability (0-100)
    - 30%: Repayment history (0-100)
    - 15%: Sector coefficient, rescaled from [0.5, 1.5] to [0, 100]
    - 20%: Liquidity buffer (0-100)

    Inputs outside their domain are clamped rather than rejected; the API
    layer rejects them before they reach this function.
    """
    income_stability = clamp(inputs.income_stability, 0, 100)
    repayment_history = clamp(inputs.repayment_history, 0, 100)
    sector_coefficient = clamp(inputs.sector_coefficient, 0.5, 1.5)
    liquidity_buffer = clamp(inputs.liquidity_buffer, 0, 100)

    normalized_sector = (sector_coefficient - 0.5) / 1.0 * 100

    weighted = (
        WEIGHTS["income_stability"] * income_stability
        + WEIGHTS["repayment_history"] * repayment_history
        + WEIGHTS["sector_coefficient"] * normalized_sector
        + WEIGHTS["liquidity_buffer"] * liquidity_buffer
    )

    return int(round_half_up(clamp(weighted, 0, 100)))


def calculate_probability_of_default(score: float) -> float:
    """
    Logistic transform of the score, scaled into [0, 0.3].

    Score 50 maps to 0.15; higher scores decay towards 0. Scores outside
    [0, 100] are clamped first.
    """
    score = clamp(score, 0, 100)
    exponent = -POD_STEEPNESS * (POD_MIDPOINT - score)
    pod = 1 / (1 + math.exp(exponent)) * POD_CEILING
    return round_half_up(pod, 4)


def calculate_confidence_band(score: float, volatility: float = 0.05) -> Tuple[int, int]:
    """Linear envelope of +/- score * volatility around the clamped score, clipped to [0, 100]"""
    score = clamp(score, 0, 100)
    half_width = score * volatility
    lower = max(0, int(round_half_up(score - half_width)))
    upper = min(100, int(round_half_up(score + half_width)))
    return lower, upper


def score_to_tier(score: float) -> RiskTier:
    for minimum, tier in TIER_THRESHOLDS:
        if score >= minimum:
            return tier
    return RiskTier.D


def tier_to_label(tier: RiskTier) -> str:
    return TIER_LABELS[RiskTier(tier)]


def is_eligible(score: float, min_score: int = 40) -> bool:
    return score >= min_score


def recommended_limit(score: float, income: float) -> int:
    """Credit limit as a share of income: 10% at score 0 up to 60% at score 100"""
    multiplier = (score / 100) * 0.5 + 0.1
    return int(round_half_up(income * multiplier))


def assess(
    user_id: str,
    inputs: RiskInputs,
    volatility: float = 0.05,
    now: datetime | None = None,
) -> RiskProfile:
    """
    First assessment for a subject.

    Returns a new RiskProfile whose history holds exactly one entry.
    """
    now = now or utc_now()
    score = calculate_risk_score(inputs)
    pod = calculate_probability_of_default(score)

    return RiskProfile(
        id=generate_id("RISK"),
        user_id=user_id,
        risk_score=score,
        probability_of_default=pod,
        confidence_band=calculate_confidence_band(score, volatility),
        tier=score_to_tier(score),
        inputs=inputs,
        last_calculated=now,
        history=[RiskScoreEntry(date=now, score=score, probability_of_default=pod)],
    )


def reassess(
    profile: RiskProfile,
    inputs: RiskInputs,
    volatility: float = 0.05,
    now: datetime | None = None,
) -> RiskProfile:
    """
    Re-score an existing profile with fresh inputs.

    The previous history is kept verbatim and one entry is appended; the
    profile passed in is left untouched.
    """
    now = now or utc_now()
    score = calculate_risk_score(inputs)
    pod = calculate_probability_of_default(score)

    return replace(
        profile,
        risk_score=score,
        probability_of_default=pod,
        confidence_band=calculate_confidence_band(score, volatility),
        tier=score_to_tier(score),
        inputs=inputs,
        last_calculated=now,
        history=[*profile.history, RiskScoreEntry(date=now, score=score, probability_of_default=pod)],
    )
