"""Compliance flags and automated transaction checks"""

from dataclasses import replace
from datetime import datetime
from typing import List

from quantara_gateway.domain.models import ComplianceFlag
from quantara_gateway.utils.date_utils import utc_now
from quantara_gateway.utils.ids import generate_id

VELOCITY_THRESHOLD_PER_MINUTE = 100
LARGE_TRANSACTION_THRESHOLD = 1_000_000


def create_flag(
    type: str,
    severity: str,
    title: str,
    description: str,
    contract_id: str | None = None,
    user_id: str | None = None,
    now: datetime | None = None,
) -> ComplianceFlag:
    return ComplianceFlag(
        id=generate_id("FLG"),
        type=type,
        severity=severity,
        title=title,
        description=description,
        status="open",
        created_at=now or utc_now(),
        contract_id=contract_id,
        user_id=user_id,
    )


def resolve_flag(flag: ComplianceFlag, now: datetime | None = None) -> ComplianceFlag:
    return replace(flag, status="resolved", resolved_at=now or utc_now())


def run_automated_checks(
    amount: float,
    frequency: float,
    contract_id: str | None = None,
    user_id: str | None = None,
) -> List[ComplianceFlag]:
    """
    Screen a transaction against the fixed fraud rules.

    Rules (independent, both may fire):
    - velocity: more than 100 transactions/min -> critical fraud alert
    - size: more than 1,000,000 -> high severity fraud alert
    """
    flags: List[ComplianceFlag] = []

    if frequency > VELOCITY_THRESHOLD_PER_MINUTE:
        flags.append(
            create_flag(
                type="fraud_alert",
                severity="critical",
                title="High-velocity transaction pattern detected",
                description=(
                    f"Transaction frequency of {frequency:g}/min exceeds threshold of "
                    f"{VELOCITY_THRESHOLD_PER_MINUTE}/min"
                ),
                contract_id=contract_id,
                user_id=user_id,
            )
        )

    if amount > LARGE_TRANSACTION_THRESHOLD:
        flags.append(
            create_flag(
                type="fraud_alert",
                severity="high",
                title="Large transaction flagged for review",
                description=f"Transaction of ${amount:,.2f} requires manual approval",
                contract_id=contract_id,
                user_id=user_id,
            )
        )

    return flags
