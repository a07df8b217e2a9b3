"""Income source endpoints - /v1/income"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from quantara_gateway.api.v1.schemas import (
    EarningRequest,
    IncomeAnalyticsResponse,
    IncomeSourceCreateRequest,
    IncomeSourceResponse,
    MonthlyEarningSchema,
)
from quantara_gateway.domain.income import add_earning, compute_analytics, create_income_source
from quantara_gateway.domain.models import IncomeSource
from quantara_gateway.infrastructure.database.repositories import IncomeSourceRepository
from quantara_gateway.infrastructure.database.session import get_db

router = APIRouter()


def income_source_response(source: IncomeSource) -> IncomeSourceResponse:
    return IncomeSourceResponse(
        id=source.id,
        user_id=source.user_id,
        type=source.type,
        name=source.name,
        amount=source.amount,
        frequency=source.frequency,
        volatility=source.volatility,
        stability_index=source.stability_index,
        historical_earnings=[
            MonthlyEarningSchema(month=e.month, amount=e.amount, verified=e.verified)
            for e in source.historical_earnings
        ],
        created_at=source.created_at,
    )


@router.post("/income/sources", response_model=IncomeSourceResponse, status_code=201)
def add_income_source(request_body: IncomeSourceCreateRequest, db: Session = Depends(get_db)):
    source = create_income_source(
        user_id=request_body.user_id,
        type=request_body.type,
        name=request_body.name,
        amount=request_body.amount,
        frequency=request_body.frequency,
    )
    source = IncomeSourceRepository(db).create(source)
    db.commit()
    return income_source_response(source)


@router.post("/income/sources/{source_id}/earnings", response_model=IncomeSourceResponse)
def record_earning(source_id: str, request_body: EarningRequest, db: Session = Depends(get_db)):
    """Append a month of earnings; volatility and stability are recomputed"""
    repo = IncomeSourceRepository(db)
    source = repo.get(source_id)
    if source is None:
        raise HTTPException(status_code=404, detail="Income source not found")

    updated = repo.update(add_earning(source, request_body.month, request_body.amount, request_body.verified))
    db.commit()
    return income_source_response(updated)


@router.get("/income/analytics", response_model=IncomeAnalyticsResponse)
def get_income_analytics(
    user_id: str = Query(..., alias="userId", min_length=1),
    db: Session = Depends(get_db),
):
    sources = IncomeSourceRepository(db).list(user_id=user_id)
    analytics = compute_analytics(sources)

    return IncomeAnalyticsResponse(
        user_id=user_id,
        source_count=len(sources),
        total_verified_income=analytics.total_verified_income,
        average_monthly=analytics.average_monthly,
        variance=analytics.variance,
        stability_index=analytics.stability_index,
        deposit_frequency=analytics.deposit_frequency,
        source_variation=analytics.source_variation,
        ytd_total=analytics.ytd_total,
    )
