"""Capital pool endpoints - /v1/capital"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from quantara_gateway.api.dependencies import get_event_bus, get_request_id
from quantara_gateway.api.v1.schemas import (
    AllocationRequest,
    AllocationResponse,
    PoolCreateRequest,
    PoolListResponse,
    PoolResponse,
    PositionResponse,
)
from quantara_gateway.domain.capital import allocate_to_pool, calculate_yield, create_pool, pool_utilization
from quantara_gateway.domain.events import EventBus
from quantara_gateway.domain.exceptions import ConcurrentModificationError, InsufficientCapitalError
from quantara_gateway.domain.models import CapitalPool, EventType, InvestmentPosition
from quantara_gateway.infrastructure.database.repositories import (
    CapitalPoolRepository,
    InvestmentPositionRepository,
)
from quantara_gateway.infrastructure.database.session import get_db
from quantara_gateway.infrastructure.observability.logging import log_allocation
from quantara_gateway.infrastructure.observability.metrics import (
    allocation_rejection_counter,
    capital_allocated_counter,
)

router = APIRouter()


def pool_response(pool: CapitalPool) -> PoolResponse:
    return PoolResponse(
        id=pool.id,
        name=pool.name,
        total_capital=pool.total_capital,
        deployed_capital=pool.deployed_capital,
        available_capital=pool.available_capital,
        target_yield=pool.target_yield,
        actual_yield=pool.actual_yield,
        risk_tier_filter=pool.risk_tier_filter,
        investor_count=pool.investor_count,
        utilization=pool_utilization(pool),
        created_at=pool.created_at,
    )


def position_response(position: InvestmentPosition) -> PositionResponse:
    return PositionResponse(
        id=position.id,
        investor_id=position.investor_id,
        pool_id=position.pool_id,
        amount=position.amount,
        entry_date=position.entry_date,
        current_value=position.current_value,
        accrued_yield=position.accrued_yield,
        status=position.status,
    )


@router.get("/capital/pools", response_model=PoolListResponse)
def list_pools(db: Session = Depends(get_db)):
    pools = CapitalPoolRepository(db).list()
    return PoolListResponse(
        pools=[pool_response(p) for p in pools],
        total_capital=sum(p.total_capital for p in pools),
        total_deployed=sum(p.deployed_capital for p in pools),
    )


@router.post("/capital/pools", response_model=PoolResponse, status_code=201)
def create_pool_endpoint(request_body: PoolCreateRequest, db: Session = Depends(get_db)):
    pool = create_pool(
        name=request_body.name,
        total_capital=request_body.total_capital,
        target_yield=request_body.target_yield,
        risk_tier_filter=request_body.risk_tier_filter,
    )
    pool = CapitalPoolRepository(db).create(pool)
    db.commit()
    return pool_response(pool)


@router.get("/capital/pools/{pool_id}", response_model=PoolResponse)
def get_pool(pool_id: str, db: Session = Depends(get_db)):
    pool = CapitalPoolRepository(db).get(pool_id)
    if pool is None:
        raise HTTPException(status_code=404, detail="Capital pool not found")
    return pool_response(pool)


@router.post(
    "/capital/pools/{pool_id}/allocations",
    response_model=AllocationResponse,
    status_code=201,
    responses={409: {"description": "Insufficient capital or concurrent modification"}},
)
def allocate(
    pool_id: str,
    request_body: AllocationRequest,
    request: Request,
    db: Session = Depends(get_db),
    event_bus: EventBus = Depends(get_event_bus),
):
    """
    Commit investor capital to a pool.

    The pool update and the new position are written in one transaction;
    the pool write is versioned so a concurrent allocation against the same
    snapshot is rejected rather than overdrawing the pool.
    """
    request_id = get_request_id(request)
    pool_repo = CapitalPoolRepository(db)
    pool = pool_repo.get(pool_id)
    if pool is None:
        raise HTTPException(status_code=404, detail="Capital pool not found")

    try:
        updated_pool, position = allocate_to_pool(pool, request_body.amount, request_body.investor_id)
        updated_pool = pool_repo.update(updated_pool)
        position = InvestmentPositionRepository(db).create(position)
        db.commit()

    except InsufficientCapitalError as e:
        db.rollback()
        allocation_rejection_counter.labels(reason="insufficient_capital").inc()
        logging.warning(f"Allocation rejected: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))

    except ConcurrentModificationError as e:
        db.rollback()
        allocation_rejection_counter.labels(reason="concurrent_modification").inc()
        logging.warning(f"Allocation conflict: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail="Pool was modified concurrently, retry the allocation")

    capital_allocated_counter.inc(request_body.amount)
    log_allocation(request_id, pool_id, position.investor_id, position.amount, updated_pool.available_capital)
    event_bus.publish(
        EventType.CAPITAL_ALLOCATED,
        {
            "poolId": pool_id,
            "positionId": position.id,
            "investorId": position.investor_id,
            "amount": position.amount,
        },
    )

    return AllocationResponse(pool=pool_response(updated_pool), position=position_response(position))


@router.get("/capital/positions/{position_id}/yield", response_model=PositionResponse)
def get_position_yield(
    position_id: str,
    annual_rate: float = Query(..., alias="annualRate", ge=0, description="Annual rate in percent"),
    db: Session = Depends(get_db),
):
    """Accrued value of a position as of now (derived, never stored)"""
    position = InvestmentPositionRepository(db).get(position_id)
    if position is None:
        raise HTTPException(status_code=404, detail="Position not found")
    return position_response(calculate_yield(position, annual_rate))
