from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Numeric, Enum as SQLEnum, Uuid, text
from sqlalchemy.orm import relationship
from datetime import datetime
from decimal import Decimal
import uuid
from bank_portal.db.base import Base
import enum

ORGANISATION_ID = 1


class WithdrawalSource(str, enum.Enum):
    """Organisation pool an expense is drawn from."""
    AMOUNT = "AMOUNT"
    PENALTY = "PENALTY"


class ReleasedMoneyType(str, enum.Enum):
    """Cash advance movement."""
    RELEASE = "RELEASE"
    SETTLEMENT = "SETTLEMENT"


class Organisation(Base):
    """The cooperative itself. Single row, read-or-create on first access."""
    __tablename__ = "organisation"

    id = Column(Integer, primary_key=True, default=ORGANISATION_ID)
    name = Column(String(100), nullable=False)
    amount = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))  # Development fees
    penalty = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))  # Penalty fund
    profit = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))  # Undistributed interest and gains


class OrgWithdrawal(Base):
    """Organisation expense drawn from the fee or penalty pool."""
    __tablename__ = "org_withdrawal"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    purpose = Column(String(255), nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)
    source = Column(SQLEnum(WithdrawalSource, native_enum=False, values_callable=lambda obj: [e.value for e in obj]), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, server_default=text("CURRENT_TIMESTAMP"), index=True)


class ReleasedMoneyLog(Base):
    """Cash advance release or settlement against an account."""
    __tablename__ = "released_money_log"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    account_id = Column(Uuid(as_uuid=True), ForeignKey("account.id"), nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    profit = Column(Numeric(15, 2), nullable=True)  # Settlement only
    type = Column(SQLEnum(ReleasedMoneyType, native_enum=False, values_callable=lambda obj: [e.value for e in obj]), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, server_default=text("CURRENT_TIMESTAMP"))

    # Relationships
    account = relationship("Account", back_populates="released_money_logs")


class AuditLog(Base):
    """One profit distribution event."""
    __tablename__ = "audit_log"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    total_profit = Column(Numeric(15, 2), nullable=False)
    member_count = Column(Integer, nullable=False)
    per_member_share = Column(Numeric(15, 2), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, server_default=text("CURRENT_TIMESTAMP"))
