from sqlalchemy import Column, Integer, ForeignKey, DateTime, Numeric, Enum as SQLEnum, Uuid, text
from sqlalchemy.orm import relationship
from datetime import datetime
from decimal import Decimal
import uuid
from bank_portal.db.base import Base
import enum


class LoanStatus(str, enum.Enum):
    """Loan status."""
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"


class TransactionLog(Base):
    """One member deposit, split into basic pay, development fee and penalty."""
    __tablename__ = "transaction_log"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    member_id = Column(Uuid(as_uuid=True), ForeignKey("member.id"), nullable=False, index=True)
    account_id = Column(Uuid(as_uuid=True), ForeignKey("account.id"), nullable=False, index=True)
    basic_pay = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    development_fee = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    penalty = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, server_default=text("CURRENT_TIMESTAMP"), index=True)

    # Relationships
    member = relationship("Member", back_populates="transactions")
    account = relationship("Account")


class Loan(Base):
    """Member loan. EMI is a fixed principal slice; interest accrues on the remaining balance."""
    __tablename__ = "loan"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    member_id = Column(Uuid(as_uuid=True), ForeignKey("member.id"), nullable=False, index=True)
    principal_amount = Column(Numeric(15, 2), nullable=False)
    interest_rate = Column(Numeric(10, 6), nullable=False)  # Monthly fraction, 0.01 = 1%
    time_period = Column(Integer, nullable=False)  # Months
    emi_amount = Column(Numeric(15, 2), nullable=False)
    remaining_balance = Column(Numeric(15, 2), nullable=False)
    total_interest_paid = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    status = Column(SQLEnum(LoanStatus, native_enum=False, values_callable=lambda obj: [e.value for e in obj]), default=LoanStatus.ACTIVE, nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, server_default=text("CURRENT_TIMESTAMP"))
    completed_at = Column(DateTime, nullable=True)

    # Relationships
    member = relationship("Member", back_populates="loans")
    payments = relationship("LoanPayment", back_populates="loan", order_by="desc(LoanPayment.created_at)")


class LoanPayment(Base):
    """Loan payment (splits principal, interest and penalty)."""
    __tablename__ = "loan_payment"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    loan_id = Column(Uuid(as_uuid=True), ForeignKey("loan.id"), nullable=False, index=True)
    principal_paid = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    extra_principal = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))  # Portion above the standard EMI slice
    interest_paid = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    penalty = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    total_paid = Column(Numeric(15, 2), nullable=False)
    remaining_after = Column(Numeric(15, 2), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, server_default=text("CURRENT_TIMESTAMP"), index=True)

    # Relationships
    loan = relationship("Loan", back_populates="payments")
