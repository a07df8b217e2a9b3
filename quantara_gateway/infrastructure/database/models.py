"""SQLAlchemy ORM models backing the repositories"""

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, JSON, Text
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class RiskProfileRecord(Base):
    """Latest risk assessment per user"""

    __tablename__ = "risk_profile"

    id = Column(Text, primary_key=True)
    user_id = Column(Text, nullable=False, unique=True, index=True)
    risk_score = Column(Integer, nullable=False)
    probability_of_default = Column(Float, nullable=False)
    band_lower = Column(Integer, nullable=False)
    band_upper = Column(Integer, nullable=False)
    tier = Column(Text, nullable=False)
    inputs = Column(JSON, nullable=False)
    last_calculated = Column(DateTime(timezone=True), nullable=False)

    entries = relationship(
        "RiskScoreEntryRecord",
        back_populates="profile",
        cascade="all, delete-orphan",
        order_by="RiskScoreEntryRecord.id",
    )


class RiskScoreEntryRecord(Base):
    """Append-only score history row"""

    __tablename__ = "risk_score_entry"

    id = Column(Integer, primary_key=True, autoincrement=True)
    profile_id = Column(Text, ForeignKey("risk_profile.id", ondelete="CASCADE"), nullable=False)
    recorded_at = Column(DateTime(timezone=True), nullable=False)
    score = Column(Integer, nullable=False)
    probability_of_default = Column(Float, nullable=False)

    profile = relationship("RiskProfileRecord", back_populates="entries")


class IncomeSourceRecord(Base):
    __tablename__ = "income_source"

    id = Column(Text, primary_key=True)
    user_id = Column(Text, nullable=False, index=True)
    type = Column(Text, nullable=False)
    name = Column(Text, nullable=False)
    amount = Column(Float, nullable=False)
    frequency = Column(Text, nullable=False)
    volatility = Column(Float, nullable=False, default=0.0)
    stability_index = Column(Integer, nullable=False, default=100)
    created_at = Column(DateTime(timezone=True), nullable=False)

    earnings = relationship(
        "MonthlyEarningRecord",
        back_populates="source",
        cascade="all, delete-orphan",
        order_by="MonthlyEarningRecord.id",
    )


class MonthlyEarningRecord(Base):
    __tablename__ = "monthly_earning"

    id = Column(Integer, primary_key=True, autoincrement=True)
    source_id = Column(Text, ForeignKey("income_source.id", ondelete="CASCADE"), nullable=False)
    month = Column(Text, nullable=False)
    amount = Column(Float, nullable=False)
    verified = Column(Boolean, nullable=False, default=False)

    source = relationship("IncomeSourceRecord", back_populates="earnings")


class ContractRecord(Base):
    """Structured credit contract"""

    __tablename__ = "structured_contract"

    id = Column(Text, primary_key=True)
    borrower_id = Column(Text, nullable=False, index=True)
    nft_id = Column(Text, nullable=False, unique=True)
    principal = Column(Float, nullable=False)
    interest_rate = Column(Float, nullable=False)
    term = Column(Integer, nullable=False)
    monthly_payment = Column(Float, nullable=False)
    status = Column(Text, nullable=False, default="CREATED")
    risk_tier = Column(Text, nullable=False)
    risk_score = Column(Integer, nullable=False)
    funded_amount = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    installments = relationship(
        "RepaymentInstallmentRecord",
        back_populates="contract",
        cascade="all, delete-orphan",
        order_by="RepaymentInstallmentRecord.id",
    )


class RepaymentInstallmentRecord(Base):
    """Individual installment within a contract's repayment schedule"""

    __tablename__ = "repayment_installment"

    id = Column(Integer, primary_key=True, autoincrement=True)
    contract_id = Column(Text, ForeignKey("structured_contract.id", ondelete="CASCADE"), nullable=False)
    due_date = Column(DateTime(timezone=True), nullable=False)
    amount = Column(Float, nullable=False)
    status = Column(Text, nullable=False, default="pending")
    paid_at = Column(DateTime(timezone=True), nullable=True)

    contract = relationship("ContractRecord", back_populates="installments")


class CapitalPoolRecord(Base):
    """Capital pool; `version` guards against lost updates between concurrent allocations"""

    __tablename__ = "capital_pool"

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)
    total_capital = Column(Float, nullable=False)
    deployed_capital = Column(Float, nullable=False)
    available_capital = Column(Float, nullable=False)
    target_yield = Column(Float, nullable=False)
    actual_yield = Column(Float, nullable=False)
    risk_tier_filter = Column(JSON, nullable=False)
    investor_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}


class InvestmentPositionRecord(Base):
    __tablename__ = "investment_position"

    id = Column(Text, primary_key=True)
    investor_id = Column(Text, nullable=False, index=True)
    pool_id = Column(Text, ForeignKey("capital_pool.id"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    entry_date = Column(DateTime(timezone=True), nullable=False)
    status = Column(Text, nullable=False, default="active")


class InsuranceVaultRecord(Base):
    __tablename__ = "insurance_vault"

    id = Column(Text, primary_key=True)
    pool_id = Column(Text, nullable=False, index=True)
    total_reserve = Column(Float, nullable=False)
    coverage_ratio = Column(Float, nullable=False)
    claims_paid = Column(Float, nullable=False, default=0.0)
    status = Column(Text, nullable=False, default="active")
    created_at = Column(DateTime(timezone=True), nullable=False)


class ComplianceFlagRecord(Base):
    __tablename__ = "compliance_flag"

    id = Column(Text, primary_key=True)
    type = Column(Text, nullable=False)
    severity = Column(Text, nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="open")
    contract_id = Column(Text, nullable=True, index=True)
    user_id = Column(Text, nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    resolved_at = Column(DateTime(timezone=True), nullable=True)
