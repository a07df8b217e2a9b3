"""Income analytics - stability, volatility and affordability ratios"""

import math
from dataclasses import replace
from datetime import datetime
from typing import List, Sequence

from quantara_gateway.domain.models import IncomeAnalytics, IncomeSource, MonthlyEarning
from quantara_gateway.utils.date_utils import utc_now
from quantara_gateway.utils.ids import generate_id
from quantara_gateway.utils.math_utils import clamp, round_half_up


def calculate_stability_index(earnings: Sequence[float]) -> int:
    """
    Income stability from 0 (erratic) to 100 (perfectly steady).

    Computed as (1 - coefficient of variation) * 100 over the population
    standard deviation.

    Edge cases:
    - fewer than 2 data points: 100 (not enough history to call it unstable)
    - mean of exactly 0: 0
    """
    if len(earnings) < 2:
        return 100

    mean = sum(earnings) / len(earnings)
    if mean == 0:
        return 0

    variance = sum((e - mean) ** 2 for e in earnings) / len(earnings)
    cv = math.sqrt(variance) / mean

    return int(round_half_up(clamp((1 - cv) * 100, 0, 100)))


def calculate_volatility(values: Sequence[float]) -> float:
    """Sample standard deviation (n - 1 denominator); 0 for fewer than 2 points"""
    if len(values) < 2:
        return 0.0

    mean = sum(values) / len(values)
    variance = sum((v - mean) ** 2 for v in values) / (len(values) - 1)
    return math.sqrt(variance)


def calculate_coverage_ratio(income: float, obligations: float) -> float:
    if obligations == 0:
        return 0.0
    return round_half_up(income / obligations, 2)


def calculate_dti(debt: float, income: float) -> float:
    """Debt-to-income percentage; zero income counts as fully encumbered (100)"""
    if income == 0:
        return 100.0
    return round_half_up(debt / income * 100, 2)


def create_income_source(
    user_id: str,
    type: str,
    name: str,
    amount: float,
    frequency: str,
    now: datetime | None = None,
) -> IncomeSource:
    return IncomeSource(
        id=generate_id("INC"),
        user_id=user_id,
        type=type,
        name=name,
        amount=amount,
        frequency=frequency,
        volatility=0.0,
        stability_index=100,
        created_at=now or utc_now(),
        historical_earnings=[],
    )


def add_earning(source: IncomeSource, month: str, amount: float, verified: bool = False) -> IncomeSource:
    """Append one month of earnings and recompute the derived metrics"""
    earnings = [*source.historical_earnings, MonthlyEarning(month=month, amount=amount, verified=verified)]
    amounts = [e.amount for e in earnings]

    return replace(
        source,
        historical_earnings=earnings,
        volatility=calculate_volatility(amounts),
        stability_index=calculate_stability_index(amounts),
    )


def compute_analytics(sources: List[IncomeSource]) -> IncomeAnalytics:
    """Aggregate earnings across all of a subject's income sources"""
    all_earnings = [e for s in sources for e in s.historical_earnings]
    amounts = [e.amount for e in all_earnings]
    total = sum(amounts)
    average = total / len(amounts) if amounts else 0.0

    return IncomeAnalytics(
        total_verified_income=sum(e.amount for e in all_earnings if e.verified),
        average_monthly=round_half_up(average, 2),
        variance=calculate_volatility(amounts),
        stability_index=calculate_stability_index(amounts),
        deposit_frequency=_infer_frequency(sources),
        source_variation=_source_variation(sources) if len(sources) > 1 else 0.0,
        ytd_total=total,
    )


def _infer_frequency(sources: List[IncomeSource]) -> str:
    frequencies = {s.frequency for s in sources}
    if "bi-weekly" in frequencies:
        return "Bi-Weekly"
    if "monthly" in frequencies:
        return "Monthly"
    if "weekly" in frequencies:
        return "Weekly"
    return "Mixed"


def _source_variation(sources: List[IncomeSource]) -> float:
    """Largest deviation of a declared amount from the mean, as a percentage"""
    amounts = [s.amount for s in sources]
    mean = sum(amounts) / len(amounts)
    if mean == 0:
        return 0.0
    max_deviation = max(abs(a - mean) for a in amounts)
    return round_half_up(max_deviation / mean * 100, 2)
