"""Structured contract endpoints - /v1/contracts"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from quantara_gateway.api.dependencies import get_event_bus, get_request_id
from quantara_gateway.api.v1.schemas import (
    ContractCreateRequest,
    ContractListResponse,
    ContractResponse,
    ErrorResponse,
    FundRequest,
    RepaymentEntrySchema,
    TransitionRequest,
)
from quantara_gateway.domain.contracts import create_contract, fund_contract, transition
from quantara_gateway.domain.events import EventBus
from quantara_gateway.domain.exceptions import InvalidTransitionError
from quantara_gateway.domain.models import ContractStatus, EventType, StructuredContract
from quantara_gateway.infrastructure.database.repositories import ContractRepository
from quantara_gateway.infrastructure.database.session import get_db
from quantara_gateway.infrastructure.observability.logging import log_contract_transition
from quantara_gateway.infrastructure.observability.metrics import (
    contract_transition_counter,
    invalid_transition_counter,
)

router = APIRouter()


def contract_response(contract: StructuredContract) -> ContractResponse:
    return ContractResponse(
        id=contract.id,
        borrower_id=contract.borrower_id,
        nft_id=contract.nft_id,
        principal=contract.principal,
        interest_rate=contract.interest_rate,
        term=contract.term,
        monthly_payment=contract.monthly_payment,
        status=contract.status,
        risk_tier=contract.risk_tier,
        risk_score=contract.risk_score,
        funded_amount=contract.funded_amount,
        repayment_schedule=[
            RepaymentEntrySchema(due_date=e.due_date, amount=e.amount, status=e.status, paid_at=e.paid_at)
            for e in contract.repayment_schedule
        ],
        created_at=contract.created_at,
        updated_at=contract.updated_at,
    )


def _load(repo: ContractRepository, contract_id: str) -> StructuredContract:
    contract = repo.get(contract_id)
    if contract is None:
        raise HTTPException(status_code=404, detail="Contract not found")
    return contract


@router.post(
    "/contracts",
    response_model=ContractResponse,
    status_code=201,
    responses={400: {"model": ErrorResponse}},
)
def create_contract_endpoint(
    request_body: ContractCreateRequest,
    db: Session = Depends(get_db),
    event_bus: EventBus = Depends(get_event_bus),
):
    """
    Originate a contract.

    Returns the full record including the generated monthly repayment
    schedule and NFT-style identifier.
    """
    contract = create_contract(
        borrower_id=request_body.borrower_id,
        principal=request_body.principal,
        interest_rate=request_body.interest_rate,
        term=request_body.term,
        risk_tier=request_body.risk_tier,
        risk_score=request_body.risk_score,
    )
    contract = ContractRepository(db).create(contract)
    db.commit()

    event_bus.publish(
        EventType.CONTRACT_CREATED,
        {
            "contractId": contract.id,
            "borrowerId": contract.borrower_id,
            "principal": contract.principal,
            "riskTier": contract.risk_tier.value,
        },
    )

    return contract_response(contract)


@router.get("/contracts", response_model=ContractListResponse)
def list_contracts(
    borrower_id: str | None = Query(None, alias="borrowerId"),
    db: Session = Depends(get_db),
):
    contracts = ContractRepository(db).list(borrower_id=borrower_id)
    return ContractListResponse(contracts=[contract_response(c) for c in contracts], total=len(contracts))


@router.get("/contracts/{contract_id}", response_model=ContractResponse)
def get_contract(contract_id: str, db: Session = Depends(get_db)):
    return contract_response(_load(ContractRepository(db), contract_id))


@router.post("/contracts/{contract_id}/fund", response_model=ContractResponse)
def fund_contract_endpoint(
    contract_id: str,
    request_body: FundRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Add funding. The call that reaches the principal also moves the
    contract to FUNDED.
    """
    request_id = get_request_id(request)
    repo = ContractRepository(db)
    contract = _load(repo, contract_id)

    try:
        funded = fund_contract(contract, request_body.amount)
    except InvalidTransitionError as e:
        invalid_transition_counter.inc()
        logging.warning(f"Funding rejected: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))

    funded = repo.update(funded)
    db.commit()

    if funded.status != contract.status:
        contract_transition_counter.labels(target=funded.status.value).inc()
        log_contract_transition(request_id, funded.id, contract.status.value, funded.status.value)

    return contract_response(funded)


@router.post(
    "/contracts/{contract_id}/transition",
    response_model=ContractResponse,
    responses={409: {"description": "Transition not allowed from current status"}},
)
def transition_contract(
    contract_id: str,
    request_body: TransitionRequest,
    request: Request,
    db: Session = Depends(get_db),
    event_bus: EventBus = Depends(get_event_bus),
):
    request_id = get_request_id(request)
    repo = ContractRepository(db)
    contract = _load(repo, contract_id)

    try:
        updated = transition(contract, request_body.status)
    except InvalidTransitionError as e:
        invalid_transition_counter.inc()
        logging.warning(f"Transition rejected: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))

    updated = repo.update(updated)
    db.commit()

    contract_transition_counter.labels(target=updated.status.value).inc()
    log_contract_transition(request_id, updated.id, contract.status.value, updated.status.value)

    if updated.status == ContractStatus.DEFAULTED:
        event_bus.publish(
            EventType.DEFAULT_TRIGGERED,
            {"contractId": updated.id, "borrowerId": updated.borrower_id, "principal": updated.principal},
        )

    return contract_response(updated)
