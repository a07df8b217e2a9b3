"""Risk engine endpoints - /v1/risk"""

import time

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from quantara_gateway.api.dependencies import get_event_bus, get_request_id
from quantara_gateway.api.v1.schemas import (
    ErrorResponse,
    RiskAssessmentRequest,
    RiskAssessmentResponse,
    RiskEngineInfoResponse,
    RiskInputsSchema,
    RiskProfileResponse,
    RiskScoreEntrySchema,
)
from quantara_gateway.config import settings
from quantara_gateway.domain.events import EventBus
from quantara_gateway.domain.models import EventType, RiskInputs, RiskProfile, RiskTier
from quantara_gateway.domain.scoring import WEIGHTS, assess, is_eligible, reassess, tier_to_label
from quantara_gateway.infrastructure.database.repositories import RiskProfileRepository
from quantara_gateway.infrastructure.database.session import get_db
from quantara_gateway.infrastructure.observability.logging import log_assessment
from quantara_gateway.infrastructure.observability.metrics import assessment_counter

router = APIRouter()


def _inputs_schema(inputs: RiskInputs) -> RiskInputsSchema:
    return RiskInputsSchema(
        income_stability=inputs.income_stability,
        repayment_history=inputs.repayment_history,
        sector_coefficient=inputs.sector_coefficient,
        liquidity_buffer=inputs.liquidity_buffer,
    )


@router.get("/risk", response_model=RiskEngineInfoResponse)
def get_engine_info():
    """Risk engine metadata: model version, weights and tier scale"""
    return RiskEngineInfoResponse(
        engine=settings.risk_engine_name,
        version=settings.risk_engine_version,
        weights={to_camel(name): weight for name, weight in WEIGHTS.items()},
        tiers=list(RiskTier),
    )


@router.post(
    "/risk/assess",
    response_model=RiskAssessmentResponse,
    responses={400: {"model": ErrorResponse}},
)
def assess_risk(
    request_body: RiskAssessmentRequest,
    request: Request,
    db: Session = Depends(get_db),
    event_bus: EventBus = Depends(get_event_bus),
):
    """
    Score a subject and record the result on their risk profile.

    Flow:
    1. Validate inputs (out-of-range values are rejected with 400)
    2. Create the profile on first assessment, otherwise re-assess it
       (history grows by one entry either way)
    3. Publish RiskUpdated
    """
    start_time = time.time()
    request_id = get_request_id(request)

    inputs = RiskInputs(
        income_stability=request_body.income_stability,
        repayment_history=request_body.repayment_history,
        sector_coefficient=request_body.sector_coefficient,
        liquidity_buffer=request_body.liquidity_buffer,
    )

    repo = RiskProfileRepository(db)
    existing = repo.get_by_user(request_body.user_id)
    if existing is None:
        profile = repo.create(assess(request_body.user_id, inputs, volatility=settings.default_band_volatility))
    else:
        profile = repo.update(reassess(existing, inputs, volatility=settings.default_band_volatility))
    db.commit()

    event_bus.publish(
        EventType.RISK_UPDATED,
        {
            "userId": profile.user_id,
            "riskScore": profile.risk_score,
            "tier": profile.tier.value,
            "probabilityOfDefault": profile.probability_of_default,
        },
    )

    duration_ms = (time.time() - start_time) * 1000
    assessment_counter.labels(tier=profile.tier.value).inc()
    log_assessment(
        request_id, profile.user_id, profile.risk_score, profile.tier.value, len(profile.history), duration_ms
    )

    return RiskAssessmentResponse(
        user_id=profile.user_id,
        risk_score=profile.risk_score,
        probability_of_default=profile.probability_of_default,
        confidence_band=profile.confidence_band,
        tier=profile.tier,
        inputs=_inputs_schema(inputs),
        calculated_at=profile.last_calculated,
    )


@router.get("/risk/profiles/{user_id}", response_model=RiskProfileResponse)
def get_risk_profile(user_id: str, db: Session = Depends(get_db)):
    """Current risk profile with full score history"""
    profile = RiskProfileRepository(db).get_by_user(user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Risk profile not found")

    return _profile_response(profile)


def _profile_response(profile: RiskProfile) -> RiskProfileResponse:
    return RiskProfileResponse(
        id=profile.id,
        user_id=profile.user_id,
        risk_score=profile.risk_score,
        probability_of_default=profile.probability_of_default,
        confidence_band=profile.confidence_band,
        tier=profile.tier,
        tier_label=tier_to_label(profile.tier),
        eligible=is_eligible(profile.risk_score),
        inputs=_inputs_schema(profile.inputs),
        last_calculated=profile.last_calculated,
        history=[
            RiskScoreEntrySchema(date=e.date, score=e.score, probability_of_default=e.probability_of_default)
            for e in profile.history
        ],
    )
