from sqlalchemy import Column, String, ForeignKey, DateTime, Numeric, Text, Uuid, text
from sqlalchemy.orm import relationship
from datetime import datetime
from decimal import Decimal
import uuid
from bank_portal.db.base import Base


class Member(Base):
    """Cooperative member. Owns exactly one account; never deleted."""
    __tablename__ = "member"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=True, index=True)
    fathers_name = Column(String(100), nullable=True)
    mobile = Column(String(15), nullable=False, index=True)
    address = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, server_default=text("CURRENT_TIMESTAMP"))

    # Relationships
    account = relationship("Account", back_populates="member", uselist=False)
    loans = relationship("Loan", back_populates="member", order_by="desc(Loan.created_at)")
    transactions = relationship("TransactionLog", back_populates="member")


class Account(Base):
    """Member savings account (1:1 with member)."""
    __tablename__ = "account"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    member_id = Column(Uuid(as_uuid=True), ForeignKey("member.id"), nullable=False, unique=True, index=True)
    account_number = Column(String(50), nullable=False, unique=True, index=True)
    total_amount = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    released_money = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))  # Outstanding cash advance

    # Relationships
    member = relationship("Member", back_populates="account")
    released_money_logs = relationship("ReleasedMoneyLog", back_populates="account")
