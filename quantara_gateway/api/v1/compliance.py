"""Compliance endpoints - /v1/compliance"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from quantara_gateway.api.dependencies import get_event_bus
from quantara_gateway.api.v1.schemas import ComplianceCheckRequest, FlagListResponse, FlagResponse
from quantara_gateway.domain.compliance import resolve_flag, run_automated_checks
from quantara_gateway.domain.events import EventBus
from quantara_gateway.domain.models import ComplianceFlag, EventType
from quantara_gateway.infrastructure.database.repositories import ComplianceFlagRepository
from quantara_gateway.infrastructure.database.session import get_db
from quantara_gateway.infrastructure.observability.metrics import compliance_flag_counter

router = APIRouter()


def flag_response(flag: ComplianceFlag) -> FlagResponse:
    return FlagResponse(
        id=flag.id,
        type=flag.type,
        severity=flag.severity,
        title=flag.title,
        description=flag.description,
        status=flag.status,
        contract_id=flag.contract_id,
        user_id=flag.user_id,
        created_at=flag.created_at,
        resolved_at=flag.resolved_at,
    )


@router.post("/compliance/checks", response_model=FlagListResponse)
def run_checks(
    request_body: ComplianceCheckRequest,
    db: Session = Depends(get_db),
    event_bus: EventBus = Depends(get_event_bus),
):
    """
    Screen a transaction with the automated velocity and size rules.

    Returns the flags raised (0, 1 or 2); each one is persisted and
    published as ComplianceFlagged.
    """
    repo = ComplianceFlagRepository(db)
    flags = [
        repo.create(flag)
        for flag in run_automated_checks(
            request_body.amount,
            request_body.frequency,
            contract_id=request_body.contract_id,
            user_id=request_body.user_id,
        )
    ]
    db.commit()

    for flag in flags:
        compliance_flag_counter.labels(severity=flag.severity).inc()
        event_bus.publish(
            EventType.COMPLIANCE_FLAGGED,
            {"flagId": flag.id, "severity": flag.severity, "type": flag.type, "title": flag.title},
        )

    return FlagListResponse(flags=[flag_response(f) for f in flags], total=len(flags))


@router.get("/compliance/flags", response_model=FlagListResponse)
def list_flags(
    status: Optional[str] = Query(None, description="open | investigating | resolved | dismissed"),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    flags = ComplianceFlagRepository(db).list(status=status, limit=limit)
    return FlagListResponse(flags=[flag_response(f) for f in flags], total=len(flags))


@router.post("/compliance/flags/{flag_id}/resolve", response_model=FlagResponse)
def resolve(flag_id: str, db: Session = Depends(get_db)):
    repo = ComplianceFlagRepository(db)
    flag = repo.get(flag_id)
    if flag is None:
        raise HTTPException(status_code=404, detail="Compliance flag not found")

    resolved = repo.update(resolve_flag(flag))
    db.commit()
    return flag_response(resolved)
