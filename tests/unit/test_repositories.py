"""Repository tests against the SQLite test database"""

import pytest
from datetime import timedelta
from sqlalchemy.orm import Session
from quantara_gateway.domain.capital import allocate_to_pool
from quantara_gateway.domain.contracts import create_contract, fund_contract
from quantara_gateway.domain.exceptions import ConcurrentModificationError, NotFoundError
from quantara_gateway.domain.income import add_earning, create_income_source
from quantara_gateway.domain.models import ContractStatus, RiskInputs, RiskTier
from quantara_gateway.domain.scoring import assess, reassess
from quantara_gateway.infrastructure.database.repositories import (
    CapitalPoolRepository,
    ContractRepository,
    IncomeSourceRepository,
    InvestmentPositionRepository,
    RiskProfileRepository,
)
from quantara_gateway.infrastructure.database.seed import seed_demo_pools


def test_risk_profile_history_is_appended(db: Session, sample_inputs: RiskInputs, now):
    repo = RiskProfileRepository(db)
    created = repo.create(assess("user_1", sample_inputs, now=now))
    db.commit()

    weaker = RiskInputs(income_stability=30, repayment_history=40, sector_coefficient=0.8, liquidity_buffer=20)
    repo.update(reassess(created, weaker, now=now + timedelta(days=1)))
    db.commit()

    stored = repo.get_by_user("user_1")
    assert stored.risk_score == 31
    assert stored.inputs == weaker
    assert [e.score for e in stored.history] == [74, 31]
    assert stored.last_calculated == now + timedelta(days=1)


def test_contract_round_trip_keeps_schedule(db: Session, now):
    repo = ContractRepository(db)
    contract = create_contract("borrower_1", 10_000, 12, 12, RiskTier.A, 74, now=now)
    repo.create(contract)
    db.commit()

    stored = repo.get(contract.id)
    assert stored.repayment_schedule == contract.repayment_schedule
    assert stored.nft_id == contract.nft_id

    repo.update(fund_contract(stored, 10_000, now=now))
    db.commit()

    funded = repo.get(contract.id)
    assert funded.status == ContractStatus.FUNDED
    assert funded.funded_amount == 10_000
    assert len(repo.list(borrower_id="borrower_1")) == 1


def test_update_missing_contract_raises(db: Session, now):
    contract = create_contract("borrower_1", 1_000, 5, 6, RiskTier.B, 45, now=now)
    with pytest.raises(NotFoundError):
        ContractRepository(db).update(contract)


def test_income_earnings_are_appended(db: Session, now):
    repo = IncomeSourceRepository(db)
    source = repo.create(create_income_source("user_1", "salary", "Employer", 4000, "monthly", now=now))
    source = repo.update(add_earning(source, "2026-01", 1000))
    repo.update(add_earning(source, "2026-02", 3000, verified=True))
    db.commit()

    stored = repo.get(source.id)
    assert [(e.month, e.verified) for e in stored.historical_earnings] == [("2026-01", False), ("2026-02", True)]
    assert stored.stability_index == 50


def test_pool_update_bumps_version(db: Session, empty_pool):
    repo = CapitalPoolRepository(db)
    created = repo.create(empty_pool)
    db.commit()
    assert created.version == 1

    updated, _ = allocate_to_pool(created, 100_000, "investor_1")
    stored = repo.update(updated)
    db.commit()

    assert stored.version == 2
    assert stored.deployed_capital + stored.available_capital == stored.total_capital


def test_stale_pool_snapshot_is_rejected(db: Session, empty_pool):
    """Two allocations read from the same snapshot cannot both commit"""
    repo = CapitalPoolRepository(db)
    repo.create(empty_pool)
    db.commit()

    snapshot_a = repo.get(empty_pool.id)
    snapshot_b = repo.get(empty_pool.id)

    first, position = allocate_to_pool(snapshot_a, 700_000, "investor_a")
    repo.update(first)
    InvestmentPositionRepository(db).create(position)
    db.commit()

    # Against its stale snapshot the second allocation still "fits"
    second, _ = allocate_to_pool(snapshot_b, 700_000, "investor_b")
    with pytest.raises(ConcurrentModificationError):
        repo.update(second)
    db.rollback()

    stored = repo.get(empty_pool.id)
    assert stored.deployed_capital == 700_000
    assert stored.available_capital == 300_000
    assert stored.investor_count == 1
    assert len(InvestmentPositionRepository(db).list(pool_id=empty_pool.id)) == 1


def test_seed_demo_pools_only_once(db: Session):
    assert seed_demo_pools(db) == 2
    assert seed_demo_pools(db) == 0

    pools = {p.id: p for p in CapitalPoolRepository(db).list()}
    assert pools["pool-001"].available_capital == 420_000_000
    assert pools["pool-002"].risk_tier_filter == [RiskTier.A, RiskTier.BBB]
