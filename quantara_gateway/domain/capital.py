"""Capital pools - allocation, yield accrual and utilization"""

from dataclasses import replace
from datetime import datetime
from typing import List, Tuple

from quantara_gateway.domain.exceptions import InsufficientCapitalError
from quantara_gateway.domain.models import CapitalPool, InvestmentPosition, RiskTier
from quantara_gateway.utils.date_utils import days_between, utc_now
from quantara_gateway.utils.ids import generate_id
from quantara_gateway.utils.math_utils import round_half_up


def create_pool(
    name: str,
    total_capital: float,
    target_yield: float,
    risk_tier_filter: List[RiskTier],
    deployed_capital: float = 0.0,
    actual_yield: float = 0.0,
    investor_count: int = 0,
    pool_id: str | None = None,
    now: datetime | None = None,
) -> CapitalPool:
    return CapitalPool(
        id=pool_id or generate_id("POOL"),
        name=name,
        total_capital=total_capital,
        deployed_capital=deployed_capital,
        available_capital=total_capital - deployed_capital,
        target_yield=target_yield,
        actual_yield=actual_yield,
        risk_tier_filter=[RiskTier(t) for t in risk_tier_filter],
        investor_count=investor_count,
        created_at=now or utc_now(),
    )


def allocate_to_pool(
    pool: CapitalPool,
    amount: float,
    investor_id: str,
    now: datetime | None = None,
) -> Tuple[CapitalPool, InvestmentPosition]:
    """
    Commit investor capital to a pool.

    Returns the updated pool and the new position together; nothing is
    produced when the pool cannot absorb the full amount.

    Raises:
        InsufficientCapitalError: amount exceeds available capital
    """
    if amount > pool.available_capital:
        raise InsufficientCapitalError(amount, pool.available_capital)

    now = now or utc_now()
    position = InvestmentPosition(
        id=generate_id("POS"),
        investor_id=investor_id,
        pool_id=pool.id,
        amount=amount,
        entry_date=now,
        current_value=amount,
        accrued_yield=0.0,
        status="active",
    )
    updated_pool = replace(
        pool,
        deployed_capital=pool.deployed_capital + amount,
        available_capital=pool.available_capital - amount,
        investor_count=pool.investor_count + 1,
    )

    return updated_pool, position


def calculate_yield(
    position: InvestmentPosition,
    annual_rate: float,
    now: datetime | None = None,
) -> InvestmentPosition:
    """
    Simple daily accrual: amount * (annual_rate / 100 / 365) * days elapsed.

    Derived only from the position's immutable entry fields and `now`, so
    repeated calls with the same `now` return the same snapshot.
    """
    now = now or utc_now()
    daily_rate = annual_rate / 100 / 365
    earned = position.amount * daily_rate * days_between(position.entry_date, now)

    return replace(
        position,
        current_value=position.amount + earned,
        accrued_yield=round_half_up(earned, 2),
    )


def pool_utilization(pool: CapitalPool) -> float:
    """Deployed share of total capital, in percent"""
    if pool.total_capital == 0:
        return 0.0
    return round_half_up(pool.deployed_capital / pool.total_capital * 100, 2)
