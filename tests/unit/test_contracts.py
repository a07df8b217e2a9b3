"""Unit tests for contract lifecycle and repayment schedule"""

import re

import pytest
from datetime import datetime, timedelta, timezone
from quantara_gateway.domain.contracts import (
    calculate_monthly_payment,
    can_transition,
    create_contract,
    fund_contract,
    generate_repayment_schedule,
    transition,
)
from quantara_gateway.domain.exceptions import InvalidTransitionError
from quantara_gateway.domain.models import ContractStatus, RiskTier


@pytest.fixture
def contract(now):
    return create_contract(
        borrower_id="borrower_1",
        principal=10_000,
        interest_rate=12,
        term=12,
        risk_tier=RiskTier.A,
        risk_score=74,
        now=now,
    )


def test_monthly_payment_annuity_formula():
    """10,000 at 12% over 12 months: r = 1%, payment 888.49"""
    assert calculate_monthly_payment(10_000, 12, 12) == 888.49


def test_monthly_payment_zero_rate_falls_back_to_straight_line():
    assert calculate_monthly_payment(1_200, 0, 12) == 100.0


def test_repayment_schedule_is_monthly_and_flat(now):
    schedule = generate_repayment_schedule(888.49, 12, start=now)

    assert len(schedule) == 12
    assert schedule[0].due_date == datetime(2026, 4, 15, 12, 0, tzinfo=timezone.utc)
    assert schedule[-1].due_date == datetime(2027, 3, 15, 12, 0, tzinfo=timezone.utc)
    assert all(entry.amount == 888.49 for entry in schedule)
    assert all(entry.status == "pending" for entry in schedule)


def test_repayment_schedule_clamps_month_end():
    start = datetime(2026, 1, 31, tzinfo=timezone.utc)
    schedule = generate_repayment_schedule(100.0, 3, start=start)

    assert [e.due_date.date().isoformat() for e in schedule] == ["2026-02-28", "2026-03-31", "2026-04-30"]


def test_repayment_schedule_empty_term():
    assert generate_repayment_schedule(100.0, 0) == []


def test_create_contract(contract, now):
    assert contract.status == ContractStatus.CREATED
    assert contract.funded_amount == 0
    assert contract.monthly_payment == 888.49
    assert len(contract.repayment_schedule) == 12
    assert contract.risk_tier == RiskTier.A
    assert contract.risk_score == 74
    assert contract.created_at == now
    assert re.fullmatch(r"0x[0-9a-f]{40}", contract.nft_id)


def test_transition_table():
    assert can_transition(ContractStatus.CREATED, ContractStatus.FUNDED)
    assert can_transition(ContractStatus.FUNDED, ContractStatus.ACTIVE)
    assert can_transition(ContractStatus.ACTIVE, ContractStatus.COMPLETED)
    assert can_transition(ContractStatus.ACTIVE, ContractStatus.DEFAULTED)
    assert not can_transition(ContractStatus.CREATED, ContractStatus.ACTIVE)
    assert not can_transition(ContractStatus.FUNDED, ContractStatus.CREATED)
    for target in ContractStatus:
        assert not can_transition(ContractStatus.COMPLETED, target)
        assert not can_transition(ContractStatus.DEFAULTED, target)


def test_transition_rejects_skipping_funding(contract):
    with pytest.raises(InvalidTransitionError) as exc_info:
        transition(contract, ContractStatus.ACTIVE)

    assert exc_info.value.source == "CREATED"
    assert exc_info.value.target == "ACTIVE"


def test_transition_happy_path(contract, now):
    later = now + timedelta(days=1)
    funded = transition(contract, ContractStatus.FUNDED, now=later)
    active = transition(funded, ContractStatus.ACTIVE, now=later)
    completed = transition(active, ContractStatus.COMPLETED, now=later)

    assert completed.status == ContractStatus.COMPLETED
    assert completed.updated_at == later
    assert contract.status == ContractStatus.CREATED

    for target in ContractStatus:
        with pytest.raises(InvalidTransitionError):
            transition(completed, target)


def test_fund_contract_accumulates_then_auto_transitions(contract):
    partial = fund_contract(contract, 4_000)
    assert partial.funded_amount == 4_000
    assert partial.status == ContractStatus.CREATED

    funded = fund_contract(partial, 6_000)
    assert funded.funded_amount == 10_000
    assert funded.status == ContractStatus.FUNDED


def test_fund_contract_overfunding_transitions_once(contract):
    funded = fund_contract(contract, 12_500)
    assert funded.status == ContractStatus.FUNDED
    assert funded.funded_amount == 12_500

    # Already FUNDED: crossing the threshold again would be FUNDED -> FUNDED
    with pytest.raises(InvalidTransitionError):
        fund_contract(funded, 100)
