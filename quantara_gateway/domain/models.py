"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class RiskTier(str, Enum):
    """Risk grade bucket, best to worst"""

    AAA = "AAA"
    AA = "AA"
    A = "A"
    BBB = "BBB"
    BB = "BB"
    B = "B"
    CCC = "CCC"
    D = "D"


class ContractStatus(str, Enum):
    CREATED = "CREATED"
    FUNDED = "FUNDED"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    DEFAULTED = "DEFAULTED"


class EventType(str, Enum):
    CONTRACT_CREATED = "ContractCreated"
    CAPITAL_ALLOCATED = "CapitalAllocated"
    REPAYMENT_RECEIVED = "RepaymentReceived"
    DEFAULT_TRIGGERED = "DefaultTriggered"
    RISK_UPDATED = "RiskUpdated"
    COMPLIANCE_FLAGGED = "ComplianceFlagged"
    INSURANCE_TRIGGERED = "InsuranceTriggered"
    POOL_REBALANCED = "PoolRebalanced"


@dataclass
class RiskInputs:
    """Scoring inputs, supplied fresh on every (re)assessment"""

    income_stability: float  # 0-100
    repayment_history: float  # 0-100
    sector_coefficient: float  # 0.5-1.5
    liquidity_buffer: float  # 0-100


@dataclass
class RiskScoreEntry:
    date: datetime
    score: int
    probability_of_default: float


@dataclass
class RiskProfile:
    """Latest assessment for a subject plus its append-only score history"""

    id: str
    user_id: str
    risk_score: int
    probability_of_default: float
    confidence_band: Tuple[int, int]
    tier: RiskTier
    inputs: RiskInputs
    last_calculated: datetime
    history: List[RiskScoreEntry] = field(default_factory=list)


@dataclass
class MonthlyEarning:
    month: str  # "YYYY-MM"
    amount: float
    verified: bool = False


@dataclass
class IncomeSource:
    """Declared revenue stream with metrics derived from its earnings"""

    id: str
    user_id: str
    type: str  # salary | freelance | business | investment | rental | other
    name: str
    amount: float
    frequency: str  # weekly | bi-weekly | monthly | quarterly | annually
    volatility: float
    stability_index: int
    created_at: datetime
    historical_earnings: List[MonthlyEarning] = field(default_factory=list)


@dataclass
class IncomeAnalytics:
    total_verified_income: float
    average_monthly: float
    variance: float
    stability_index: int
    deposit_frequency: str
    source_variation: float
    ytd_total: float


@dataclass
class RepaymentEntry:
    """Single payment in a contract's repayment schedule"""

    due_date: datetime
    amount: float
    status: str = "pending"  # pending | paid | late | missed
    paid_at: Optional[datetime] = None


@dataclass
class StructuredContract:
    id: str
    borrower_id: str
    nft_id: str
    principal: float
    interest_rate: float  # annual, percent
    term: int  # months
    monthly_payment: float
    status: ContractStatus
    risk_tier: RiskTier
    risk_score: int
    funded_amount: float
    repayment_schedule: List[RepaymentEntry]
    created_at: datetime
    updated_at: datetime


@dataclass
class CapitalPool:
    """Capital pool; available_capital == total_capital - deployed_capital"""

    id: str
    name: str
    total_capital: float
    deployed_capital: float
    available_capital: float
    target_yield: float
    actual_yield: float
    risk_tier_filter: List[RiskTier]
    investor_count: int
    created_at: datetime
    version: int = 1


@dataclass
class InvestmentPosition:
    """Investor stake; current_value and accrued_yield are derived snapshots"""

    id: str
    investor_id: str
    pool_id: str
    amount: float
    entry_date: datetime
    current_value: float
    accrued_yield: float
    status: str = "active"  # active | matured | withdrawn


@dataclass
class InsuranceVault:
    id: str
    pool_id: str
    total_reserve: float
    coverage_ratio: float
    claims_paid: float
    status: str  # active | depleted | suspended
    created_at: datetime


@dataclass
class ComplianceFlag:
    id: str
    type: str  # fraud_alert | kyc_issue | volatility_flag | rate_limit | blacklist
    severity: str  # low | medium | high | critical
    title: str
    description: str
    status: str  # open | investigating | resolved | dismissed
    created_at: datetime
    contract_id: Optional[str] = None
    user_id: Optional[str] = None
    resolved_at: Optional[datetime] = None


@dataclass
class ProtocolEvent:
    id: str
    type: EventType
    payload: Dict[str, Any]
    timestamp: datetime
