"""Insurance vaults - default coverage reserves"""

from dataclasses import replace
from datetime import datetime

from quantara_gateway.domain.models import InsuranceVault
from quantara_gateway.utils.date_utils import utc_now
from quantara_gateway.utils.ids import generate_id


def create_vault(
    pool_id: str,
    initial_reserve: float,
    coverage_ratio: float,
    now: datetime | None = None,
) -> InsuranceVault:
    return InsuranceVault(
        id=generate_id("INS"),
        pool_id=pool_id,
        total_reserve=initial_reserve,
        coverage_ratio=coverage_ratio,
        claims_paid=0.0,
        status="active",
        created_at=now or utc_now(),
    )


def process_claim(vault: InsuranceVault, claim_amount: float) -> InsuranceVault:
    """
    Pay a claim out of the reserve.

    A claim larger than the reserve pays out only what is left: the reserve
    drops to 0, claims_paid grows by the prior reserve and the vault becomes
    "depleted". The uncovered remainder is not recorded anywhere.
    """
    if claim_amount > vault.total_reserve:
        return replace(
            vault,
            total_reserve=0.0,
            claims_paid=vault.claims_paid + vault.total_reserve,
            status="depleted",
        )

    return replace(
        vault,
        total_reserve=vault.total_reserve - claim_amount,
        claims_paid=vault.claims_paid + claim_amount,
    )


def is_healthy(vault: InsuranceVault, required_ratio: float = 0.1) -> bool:
    return vault.coverage_ratio >= required_ratio and vault.status == "active"
