"""Structured contract lifecycle - amortization, repayment schedule, status machine"""

from dataclasses import replace
from datetime import datetime
from typing import Dict, FrozenSet, List

from quantara_gateway.domain.exceptions import InvalidTransitionError
from quantara_gateway.domain.models import (
    ContractStatus,
    RepaymentEntry,
    RiskTier,
    StructuredContract,
)
from quantara_gateway.utils.date_utils import add_months, utc_now
from quantara_gateway.utils.ids import generate_id, generate_nft_id
from quantara_gateway.utils.math_utils import round_half_up

VALID_TRANSITIONS: Dict[ContractStatus, FrozenSet[ContractStatus]] = {
    ContractStatus.CREATED: frozenset({ContractStatus.FUNDED}),
    ContractStatus.FUNDED: frozenset({ContractStatus.ACTIVE}),
    ContractStatus.ACTIVE: frozenset({ContractStatus.COMPLETED, ContractStatus.DEFAULTED}),
    ContractStatus.COMPLETED: frozenset(),
    ContractStatus.DEFAULTED: frozenset(),
}


def calculate_monthly_payment(principal: float, annual_rate: float, term: int) -> float:
    """
    Level monthly payment for a fully amortizing loan.

    Uses the annuity formula P * r * (1+r)^n / ((1+r)^n - 1) with
    r = annual_rate / 100 / 12. A zero rate has no interest to amortize,
    so the payment is simply principal / term.
    """
    monthly_rate = annual_rate / 100 / 12
    if monthly_rate == 0:
        return round_half_up(principal / term, 2)

    growth = (1 + monthly_rate) ** term
    payment = principal * monthly_rate * growth / (growth - 1)
    return round_half_up(payment, 2)


def generate_repayment_schedule(
    monthly_payment: float,
    term: int,
    start: datetime | None = None,
) -> List[RepaymentEntry]:
    """
    Generate one pending repayment per month of the term.

    Entry i (1-based) falls due i calendar months after start. Every entry
    carries the same flat amount.

    Example:
        start 2026-01-31, term 3 -> due 2026-02-28, 2026-03-31, 2026-04-30
    """
    if term <= 0:
        return []

    start = start or utc_now()
    return [
        RepaymentEntry(due_date=add_months(start, month), amount=monthly_payment, status="pending")
        for month in range(1, term + 1)
    ]


def create_contract(
    borrower_id: str,
    principal: float,
    interest_rate: float,
    term: int,
    risk_tier: RiskTier,
    risk_score: int,
    now: datetime | None = None,
) -> StructuredContract:
    """Build a new CREATED contract with its full repayment schedule"""
    now = now or utc_now()
    monthly_payment = calculate_monthly_payment(principal, interest_rate, term)

    return StructuredContract(
        id=generate_id("CTR"),
        borrower_id=borrower_id,
        nft_id=generate_nft_id(),
        principal=principal,
        interest_rate=interest_rate,
        term=term,
        monthly_payment=monthly_payment,
        status=ContractStatus.CREATED,
        risk_tier=RiskTier(risk_tier),
        risk_score=risk_score,
        funded_amount=0.0,
        repayment_schedule=generate_repayment_schedule(monthly_payment, term, start=now),
        created_at=now,
        updated_at=now,
    )


def can_transition(current: ContractStatus, target: ContractStatus) -> bool:
    return ContractStatus(target) in VALID_TRANSITIONS.get(ContractStatus(current), frozenset())


def transition(
    contract: StructuredContract,
    target: ContractStatus,
    now: datetime | None = None,
) -> StructuredContract:
    """
    Move a contract to a new status.

    Raises:
        InvalidTransitionError: target is not reachable from the current status
    """
    if not can_transition(contract.status, target):
        raise InvalidTransitionError(ContractStatus(contract.status).value, ContractStatus(target).value)

    return replace(contract, status=ContractStatus(target), updated_at=now or utc_now())


def fund_contract(
    contract: StructuredContract,
    amount: float,
    now: datetime | None = None,
) -> StructuredContract:
    """
    Add funding to a contract.

    Funding accumulates across calls. The call that brings the funded amount
    to the principal also moves the contract CREATED -> FUNDED.
    """
    now = now or utc_now()
    funded = replace(contract, funded_amount=contract.funded_amount + amount, updated_at=now)

    if funded.funded_amount >= funded.principal:
        return transition(funded, ContractStatus.FUNDED, now=now)

    return funded
