"""Data access layer - repositories exchanging domain models with the database"""

from typing import List, Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from quantara_gateway.domain.exceptions import ConcurrentModificationError, NotFoundError
from quantara_gateway.domain.models import (
    CapitalPool,
    ComplianceFlag,
    ContractStatus,
    IncomeSource,
    InsuranceVault,
    InvestmentPosition,
    MonthlyEarning,
    RepaymentEntry,
    RiskInputs,
    RiskProfile,
    RiskScoreEntry,
    RiskTier,
    StructuredContract,
)
from quantara_gateway.infrastructure.database.models import (
    CapitalPoolRecord,
    ComplianceFlagRecord,
    ContractRecord,
    IncomeSourceRecord,
    InsuranceVaultRecord,
    InvestmentPositionRecord,
    MonthlyEarningRecord,
    RepaymentInstallmentRecord,
    RiskProfileRecord,
    RiskScoreEntryRecord,
)
from quantara_gateway.utils.date_utils import ensure_utc


class RiskProfileRepository:
    """Repository for risk profiles and their score history"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, profile: RiskProfile) -> RiskProfile:
        record = RiskProfileRecord(id=profile.id, user_id=profile.user_id)
        self._apply(record, profile)
        self.db.add(record)
        self.db.flush()
        return _profile_to_domain(record)

    def get(self, profile_id: str) -> Optional[RiskProfile]:
        record = self.db.get(RiskProfileRecord, profile_id)
        return _profile_to_domain(record) if record else None

    def get_by_user(self, user_id: str) -> Optional[RiskProfile]:
        record = self.db.query(RiskProfileRecord).filter(RiskProfileRecord.user_id == user_id).first()
        return _profile_to_domain(record) if record else None

    def list(self, limit: int = 100) -> List[RiskProfile]:
        records = self.db.query(RiskProfileRecord).order_by(RiskProfileRecord.user_id).limit(limit).all()
        return [_profile_to_domain(r) for r in records]

    def update(self, profile: RiskProfile) -> RiskProfile:
        """Persist a re-assessment; history rows are only ever appended"""
        record = self.db.get(RiskProfileRecord, profile.id)
        if record is None:
            raise NotFoundError(f"Risk profile {profile.id} not found")
        self._apply(record, profile)
        self.db.flush()
        return _profile_to_domain(record)

    @staticmethod
    def _apply(record: RiskProfileRecord, profile: RiskProfile) -> None:
        record.risk_score = profile.risk_score
        record.probability_of_default = profile.probability_of_default
        record.band_lower, record.band_upper = profile.confidence_band
        record.tier = RiskTier(profile.tier).value
        record.inputs = {
            "income_stability": profile.inputs.income_stability,
            "repayment_history": profile.inputs.repayment_history,
            "sector_coefficient": profile.inputs.sector_coefficient,
            "liquidity_buffer": profile.inputs.liquidity_buffer,
        }
        record.last_calculated = profile.last_calculated

        for entry in profile.history[len(record.entries):]:
            record.entries.append(
                RiskScoreEntryRecord(
                    recorded_at=entry.date,
                    score=entry.score,
                    probability_of_default=entry.probability_of_default,
                )
            )


class IncomeSourceRepository:
    """Repository for income sources and their monthly earnings"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, source: IncomeSource) -> IncomeSource:
        record = IncomeSourceRecord(
            id=source.id,
            user_id=source.user_id,
            type=source.type,
            name=source.name,
            amount=source.amount,
            frequency=source.frequency,
            created_at=source.created_at,
        )
        self._apply(record, source)
        self.db.add(record)
        self.db.flush()
        return _income_source_to_domain(record)

    def get(self, source_id: str) -> Optional[IncomeSource]:
        record = self.db.get(IncomeSourceRecord, source_id)
        return _income_source_to_domain(record) if record else None

    def list(self, user_id: str | None = None) -> List[IncomeSource]:
        query = self.db.query(IncomeSourceRecord)
        if user_id is not None:
            query = query.filter(IncomeSourceRecord.user_id == user_id)
        return [_income_source_to_domain(r) for r in query.order_by(IncomeSourceRecord.created_at).all()]

    def update(self, source: IncomeSource) -> IncomeSource:
        record = self.db.get(IncomeSourceRecord, source.id)
        if record is None:
            raise NotFoundError(f"Income source {source.id} not found")
        self._apply(record, source)
        self.db.flush()
        return _income_source_to_domain(record)

    @staticmethod
    def _apply(record: IncomeSourceRecord, source: IncomeSource) -> None:
        record.volatility = source.volatility
        record.stability_index = source.stability_index
        for earning in source.historical_earnings[len(record.earnings):]:
            record.earnings.append(
                MonthlyEarningRecord(month=earning.month, amount=earning.amount, verified=earning.verified)
            )


class ContractRepository:
    """Repository for structured contracts"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, contract: StructuredContract) -> StructuredContract:
        """Persist contract with its repayment schedule"""
        record = ContractRecord(
            id=contract.id,
            borrower_id=contract.borrower_id,
            nft_id=contract.nft_id,
            principal=contract.principal,
            interest_rate=contract.interest_rate,
            term=contract.term,
            monthly_payment=contract.monthly_payment,
            risk_tier=RiskTier(contract.risk_tier).value,
            risk_score=contract.risk_score,
            created_at=contract.created_at,
        )
        self._apply(record, contract)
        for entry in contract.repayment_schedule:
            record.installments.append(
                RepaymentInstallmentRecord(
                    due_date=entry.due_date,
                    amount=entry.amount,
                    status=entry.status,
                    paid_at=entry.paid_at,
                )
            )
        self.db.add(record)
        self.db.flush()
        return _contract_to_domain(record)

    def get(self, contract_id: str) -> Optional[StructuredContract]:
        record = self.db.get(ContractRecord, contract_id)
        return _contract_to_domain(record) if record else None

    def list(self, borrower_id: str | None = None, limit: int = 100) -> List[StructuredContract]:
        query = self.db.query(ContractRecord)
        if borrower_id is not None:
            query = query.filter(ContractRecord.borrower_id == borrower_id)
        records = query.order_by(ContractRecord.created_at.desc()).limit(limit).all()
        return [_contract_to_domain(r) for r in records]

    def update(self, contract: StructuredContract) -> StructuredContract:
        record = self.db.get(ContractRecord, contract.id)
        if record is None:
            raise NotFoundError(f"Contract {contract.id} not found")
        self._apply(record, contract)
        for installment, entry in zip(record.installments, contract.repayment_schedule):
            installment.status = entry.status
            installment.paid_at = entry.paid_at
        self.db.flush()
        return _contract_to_domain(record)

    @staticmethod
    def _apply(record: ContractRecord, contract: StructuredContract) -> None:
        record.status = ContractStatus(contract.status).value
        record.funded_amount = contract.funded_amount
        record.updated_at = contract.updated_at


class CapitalPoolRepository:
    """
    Repository for capital pools.

    Updates are compare-and-swap on the pool version: a pool snapshot read
    before another writer committed is rejected instead of overwriting it.
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, pool: CapitalPool) -> CapitalPool:
        record = CapitalPoolRecord(
            id=pool.id,
            name=pool.name,
            total_capital=pool.total_capital,
            target_yield=pool.target_yield,
            created_at=pool.created_at,
        )
        self._apply(record, pool)
        self.db.add(record)
        self.db.flush()
        return _pool_to_domain(record)

    def get(self, pool_id: str) -> Optional[CapitalPool]:
        record = self.db.get(CapitalPoolRecord, pool_id)
        return _pool_to_domain(record) if record else None

    def list(self) -> List[CapitalPool]:
        records = self.db.query(CapitalPoolRecord).order_by(CapitalPoolRecord.created_at).all()
        return [_pool_to_domain(r) for r in records]

    def count(self) -> int:
        return self.db.query(CapitalPoolRecord).count()

    def update(self, pool: CapitalPool) -> CapitalPool:
        """
        Raises:
            NotFoundError: pool does not exist
            ConcurrentModificationError: pool.version is stale
        """
        record = self.db.get(CapitalPoolRecord, pool.id)
        if record is None:
            raise NotFoundError(f"Capital pool {pool.id} not found")
        if record.version != pool.version:
            raise ConcurrentModificationError(
                f"Capital pool {pool.id} changed (version {pool.version} is stale, current {record.version})"
            )

        self._apply(record, pool)
        try:
            self.db.flush()
        except StaleDataError as e:
            raise ConcurrentModificationError(f"Capital pool {pool.id} changed during update") from e
        return _pool_to_domain(record)

    @staticmethod
    def _apply(record: CapitalPoolRecord, pool: CapitalPool) -> None:
        record.deployed_capital = pool.deployed_capital
        record.available_capital = pool.available_capital
        record.actual_yield = pool.actual_yield
        record.risk_tier_filter = [RiskTier(t).value for t in pool.risk_tier_filter]
        record.investor_count = pool.investor_count


class InvestmentPositionRepository:
    """Repository for investor positions (entry fields only; value is derived)"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, position: InvestmentPosition) -> InvestmentPosition:
        record = InvestmentPositionRecord(
            id=position.id,
            investor_id=position.investor_id,
            pool_id=position.pool_id,
            amount=position.amount,
            entry_date=position.entry_date,
            status=position.status,
        )
        self.db.add(record)
        self.db.flush()
        return _position_to_domain(record)

    def get(self, position_id: str) -> Optional[InvestmentPosition]:
        record = self.db.get(InvestmentPositionRecord, position_id)
        return _position_to_domain(record) if record else None

    def list(self, pool_id: str | None = None, investor_id: str | None = None) -> List[InvestmentPosition]:
        query = self.db.query(InvestmentPositionRecord)
        if pool_id is not None:
            query = query.filter(InvestmentPositionRecord.pool_id == pool_id)
        if investor_id is not None:
            query = query.filter(InvestmentPositionRecord.investor_id == investor_id)
        return [_position_to_domain(r) for r in query.order_by(InvestmentPositionRecord.entry_date).all()]

    def update(self, position: InvestmentPosition) -> InvestmentPosition:
        record = self.db.get(InvestmentPositionRecord, position.id)
        if record is None:
            raise NotFoundError(f"Position {position.id} not found")
        record.status = position.status
        self.db.flush()
        return _position_to_domain(record)


class InsuranceVaultRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(self, vault: InsuranceVault) -> InsuranceVault:
        record = InsuranceVaultRecord(
            id=vault.id,
            pool_id=vault.pool_id,
            coverage_ratio=vault.coverage_ratio,
            created_at=vault.created_at,
        )
        self._apply(record, vault)
        self.db.add(record)
        self.db.flush()
        return _vault_to_domain(record)

    def get(self, vault_id: str) -> Optional[InsuranceVault]:
        record = self.db.get(InsuranceVaultRecord, vault_id)
        return _vault_to_domain(record) if record else None

    def list(self, pool_id: str | None = None) -> List[InsuranceVault]:
        query = self.db.query(InsuranceVaultRecord)
        if pool_id is not None:
            query = query.filter(InsuranceVaultRecord.pool_id == pool_id)
        return [_vault_to_domain(r) for r in query.order_by(InsuranceVaultRecord.created_at).all()]

    def update(self, vault: InsuranceVault) -> InsuranceVault:
        record = self.db.get(InsuranceVaultRecord, vault.id)
        if record is None:
            raise NotFoundError(f"Insurance vault {vault.id} not found")
        self._apply(record, vault)
        self.db.flush()
        return _vault_to_domain(record)

    @staticmethod
    def _apply(record: InsuranceVaultRecord, vault: InsuranceVault) -> None:
        record.total_reserve = vault.total_reserve
        record.claims_paid = vault.claims_paid
        record.status = vault.status


class ComplianceFlagRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(self, flag: ComplianceFlag) -> ComplianceFlag:
        record = ComplianceFlagRecord(
            id=flag.id,
            type=flag.type,
            severity=flag.severity,
            title=flag.title,
            description=flag.description,
            contract_id=flag.contract_id,
            user_id=flag.user_id,
            created_at=flag.created_at,
        )
        self._apply(record, flag)
        self.db.add(record)
        self.db.flush()
        return _flag_to_domain(record)

    def get(self, flag_id: str) -> Optional[ComplianceFlag]:
        record = self.db.get(ComplianceFlagRecord, flag_id)
        return _flag_to_domain(record) if record else None

    def list(self, status: str | None = None, limit: int = 100) -> List[ComplianceFlag]:
        query = self.db.query(ComplianceFlagRecord)
        if status is not None:
            query = query.filter(ComplianceFlagRecord.status == status)
        records = query.order_by(ComplianceFlagRecord.created_at.desc()).limit(limit).all()
        return [_flag_to_domain(r) for r in records]

    def update(self, flag: ComplianceFlag) -> ComplianceFlag:
        """Only status and resolution time are mutable once a flag exists"""
        record = self.db.get(ComplianceFlagRecord, flag.id)
        if record is None:
            raise NotFoundError(f"Compliance flag {flag.id} not found")
        self._apply(record, flag)
        self.db.flush()
        return _flag_to_domain(record)

    @staticmethod
    def _apply(record: ComplianceFlagRecord, flag: ComplianceFlag) -> None:
        record.status = flag.status
        record.resolved_at = flag.resolved_at


def _profile_to_domain(record: RiskProfileRecord) -> RiskProfile:
    return RiskProfile(
        id=record.id,
        user_id=record.user_id,
        risk_score=record.risk_score,
        probability_of_default=record.probability_of_default,
        confidence_band=(record.band_lower, record.band_upper),
        tier=RiskTier(record.tier),
        inputs=RiskInputs(**record.inputs),
        last_calculated=ensure_utc(record.last_calculated),
        history=[
            RiskScoreEntry(
                date=ensure_utc(e.recorded_at),
                score=e.score,
                probability_of_default=e.probability_of_default,
            )
            for e in record.entries
        ],
    )


def _income_source_to_domain(record: IncomeSourceRecord) -> IncomeSource:
    return IncomeSource(
        id=record.id,
        user_id=record.user_id,
        type=record.type,
        name=record.name,
        amount=record.amount,
        frequency=record.frequency,
        volatility=record.volatility,
        stability_index=record.stability_index,
        created_at=ensure_utc(record.created_at),
        historical_earnings=[
            MonthlyEarning(month=e.month, amount=e.amount, verified=e.verified) for e in record.earnings
        ],
    )


def _contract_to_domain(record: ContractRecord) -> StructuredContract:
    return StructuredContract(
        id=record.id,
        borrower_id=record.borrower_id,
        nft_id=record.nft_id,
        principal=record.principal,
        interest_rate=record.interest_rate,
        term=record.term,
        monthly_payment=record.monthly_payment,
        status=ContractStatus(record.status),
        risk_tier=RiskTier(record.risk_tier),
        risk_score=record.risk_score,
        funded_amount=record.funded_amount,
        repayment_schedule=[
            RepaymentEntry(
                due_date=ensure_utc(i.due_date),
                amount=i.amount,
                status=i.status,
                paid_at=ensure_utc(i.paid_at) if i.paid_at else None,
            )
            for i in record.installments
        ],
        created_at=ensure_utc(record.created_at),
        updated_at=ensure_utc(record.updated_at),
    )


def _pool_to_domain(record: CapitalPoolRecord) -> CapitalPool:
    return CapitalPool(
        id=record.id,
        name=record.name,
        total_capital=record.total_capital,
        deployed_capital=record.deployed_capital,
        available_capital=record.available_capital,
        target_yield=record.target_yield,
        actual_yield=record.actual_yield,
        risk_tier_filter=[RiskTier(t) for t in record.risk_tier_filter],
        investor_count=record.investor_count,
        created_at=ensure_utc(record.created_at),
        version=record.version,
    )


def _position_to_domain(record: InvestmentPositionRecord) -> InvestmentPosition:
    return InvestmentPosition(
        id=record.id,
        investor_id=record.investor_id,
        pool_id=record.pool_id,
        amount=record.amount,
        entry_date=ensure_utc(record.entry_date),
        current_value=record.amount,
        accrued_yield=0.0,
        status=record.status,
    )


def _vault_to_domain(record: InsuranceVaultRecord) -> InsuranceVault:
    return InsuranceVault(
        id=record.id,
        pool_id=record.pool_id,
        total_reserve=record.total_reserve,
        coverage_ratio=record.coverage_ratio,
        claims_paid=record.claims_paid,
        status=record.status,
        created_at=ensure_utc(record.created_at),
    )


def _flag_to_domain(record: ComplianceFlagRecord) -> ComplianceFlag:
    return ComplianceFlag(
        id=record.id,
        type=record.type,
        severity=record.severity,
        title=record.title,
        description=record.description,
        status=record.status,
        created_at=ensure_utc(record.created_at),
        contract_id=record.contract_id,
        user_id=record.user_id,
        resolved_at=ensure_utc(record.resolved_at) if record.resolved_at else None,
    )
