"""Schema creation and demo data for local runs"""

import logging

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from quantara_gateway.domain.capital import create_pool
from quantara_gateway.domain.models import RiskTier
from quantara_gateway.infrastructure.database.models import Base
from quantara_gateway.infrastructure.database.repositories import CapitalPoolRepository

logger = logging.getLogger(__name__)


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(bind=engine)


def seed_demo_pools(db: Session) -> int:
    """Insert the two demo pools when no pool exists yet; returns pools created"""
    repo = CapitalPoolRepository(db)
    if repo.count() > 0:
        return 0

    pools = [
        create_pool(
            pool_id="pool-001",
            name="Yield Gen A - Prime",
            total_capital=2_100_000_000,
            deployed_capital=1_680_000_000,
            target_yield=12.4,
            actual_yield=11.8,
            risk_tier_filter=[RiskTier.AAA, RiskTier.AA],
            investor_count=42,
        ),
        create_pool(
            pool_id="pool-002",
            name="Yield Gen B - Growth",
            total_capital=800_000_000,
            deployed_capital=520_000_000,
            target_yield=4.1,
            actual_yield=3.9,
            risk_tier_filter=[RiskTier.A, RiskTier.BBB],
            investor_count=28,
        ),
    ]
    for pool in pools:
        repo.create(pool)
    db.commit()

    logger.info("Seeded demo capital pools", extra={"pool_count": len(pools)})
    return len(pools)
