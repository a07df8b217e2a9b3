"""Pydantic schemas for API request/response validation"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from quantara_gateway.domain.models import ContractStatus, EventType, RiskTier


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorDetail(CamelModel):
    field: str
    message: str


class ErrorResponse(CamelModel):
    error: str
    details: List[ErrorDetail] = []


# Risk

class RiskInputsSchema(CamelModel):
    # Strict: booleans and numeric strings are rejected, not converted
    income_stability: float = Field(..., strict=True, ge=0, le=100)
    repayment_history: float = Field(..., strict=True, ge=0, le=100)
    sector_coefficient: float = Field(..., strict=True, ge=0.5, le=1.5)
    liquidity_buffer: float = Field(..., strict=True, ge=0, le=100)


class RiskAssessmentRequest(RiskInputsSchema):
    """Request body for POST /v1/risk/assess"""

    user_id: str = Field(..., min_length=1, description="Subject identifier")


class RiskAssessmentResponse(CamelModel):
    user_id: str
    risk_score: int
    probability_of_default: float
    confidence_band: Tuple[int, int]
    tier: RiskTier
    inputs: RiskInputsSchema
    calculated_at: datetime


class RiskScoreEntrySchema(CamelModel):
    date: datetime
    score: int
    probability_of_default: float


class RiskProfileResponse(CamelModel):
    id: str
    user_id: str
    risk_score: int
    probability_of_default: float
    confidence_band: Tuple[int, int]
    tier: RiskTier
    tier_label: str
    eligible: bool
    inputs: RiskInputsSchema
    last_calculated: datetime
    history: List[RiskScoreEntrySchema]


class RiskEngineInfoResponse(CamelModel):
    engine: str
    version: str
    weights: Dict[str, float]
    tiers: List[RiskTier]
    status: str = "online"


# Contracts

class ContractCreateRequest(CamelModel):
    """Request body for POST /v1/contracts"""

    borrower_id: str = Field(..., min_length=1)
    principal: float = Field(..., strict=True, gt=0)
    interest_rate: float = Field(..., strict=True, gt=0, description="Annual rate in percent")
    term: int = Field(..., strict=True, gt=0, le=600, description="Term in months")
    risk_tier: RiskTier
    risk_score: int = Field(..., strict=True, ge=0, le=100)


class RepaymentEntrySchema(CamelModel):
    due_date: datetime
    amount: float
    status: str = "pending"
    paid_at: Optional[datetime] = None


class ContractResponse(CamelModel):
    id: str
    borrower_id: str
    nft_id: str
    principal: float
    interest_rate: float
    term: int
    monthly_payment: float
    status: ContractStatus
    risk_tier: RiskTier
    risk_score: int
    funded_amount: float
    repayment_schedule: List[RepaymentEntrySchema]
    created_at: datetime
    updated_at: datetime


class ContractListResponse(CamelModel):
    contracts: List[ContractResponse]
    total: int


class FundRequest(CamelModel):
    amount: float = Field(..., strict=True, gt=0)


class TransitionRequest(CamelModel):
    status: ContractStatus


# Capital

class PoolCreateRequest(CamelModel):
    name: str = Field(..., min_length=1)
    total_capital: float = Field(..., strict=True, gt=0)
    target_yield: float = Field(..., strict=True, ge=0)
    risk_tier_filter: List[RiskTier] = []


class PoolResponse(CamelModel):
    id: str
    name: str
    total_capital: float
    deployed_capital: float
    available_capital: float
    target_yield: float
    actual_yield: float
    risk_tier_filter: List[RiskTier]
    investor_count: int
    utilization: float
    created_at: datetime


class PoolListResponse(CamelModel):
    pools: List[PoolResponse]
    total_capital: float
    total_deployed: float


class AllocationRequest(CamelModel):
    investor_id: str = Field(..., min_length=1)
    amount: float = Field(..., strict=True, gt=0)


class PositionResponse(CamelModel):
    id: str
    investor_id: str
    pool_id: str
    amount: float
    entry_date: datetime
    current_value: float
    accrued_yield: float = Field(..., alias="yield")
    status: str


class AllocationResponse(CamelModel):
    pool: PoolResponse
    position: PositionResponse


# Insurance

class VaultCreateRequest(CamelModel):
    pool_id: str = Field(..., min_length=1)
    initial_reserve: float = Field(..., strict=True, ge=0)
    coverage_ratio: float = Field(..., strict=True, ge=0)


class ClaimRequest(CamelModel):
    amount: float = Field(..., strict=True, gt=0)


class VaultResponse(CamelModel):
    id: str
    pool_id: str
    total_reserve: float
    coverage_ratio: float
    claims_paid: float
    status: str
    healthy: bool
    created_at: datetime


# Compliance

class ComplianceCheckRequest(CamelModel):
    amount: float = Field(..., strict=True, ge=0, description="Transaction amount")
    frequency: float = Field(..., strict=True, ge=0, description="Transactions per minute")
    user_id: Optional[str] = None
    contract_id: Optional[str] = None


class FlagResponse(CamelModel):
    id: str
    type: str
    severity: str
    title: str
    description: str
    status: str
    contract_id: Optional[str] = None
    user_id: Optional[str] = None
    created_at: datetime
    resolved_at: Optional[datetime] = None


class FlagListResponse(CamelModel):
    flags: List[FlagResponse]
    total: int


# Income

IncomeType = Literal["salary", "freelance", "business", "investment", "rental", "other"]
IncomeFrequency = Literal["weekly", "bi-weekly", "monthly", "quarterly", "annually"]


class IncomeSourceCreateRequest(CamelModel):
    user_id: str = Field(..., min_length=1)
    type: IncomeType
    name: str = Field(..., min_length=1)
    amount: float = Field(..., strict=True, ge=0)
    frequency: IncomeFrequency


class EarningRequest(CamelModel):
    month: str = Field(..., pattern=r"^\d{4}-(0[1-9]|1[0-2])$", description="YYYY-MM")
    amount: float = Field(..., strict=True, ge=0)
    verified: bool = Field(False, strict=True)


class MonthlyEarningSchema(CamelModel):
    month: str
    amount: float
    verified: bool


class IncomeSourceResponse(CamelModel):
    id: str
    user_id: str
    type: str
    name: str
    amount: float
    frequency: str
    volatility: float
    stability_index: int
    historical_earnings: List[MonthlyEarningSchema]
    created_at: datetime


class IncomeAnalyticsResponse(CamelModel):
    user_id: str
    source_count: int
    total_verified_income: float
    average_monthly: float
    variance: float
    stability_index: int
    deposit_frequency: str
    source_variation: float
    ytd_total: float


# Events

class EventResponse(CamelModel):
    id: str
    type: EventType
    payload: Dict[str, Any]
    timestamp: datetime


class EventLogResponse(CamelModel):
    events: List[EventResponse]
    total: int
