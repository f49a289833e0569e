from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from uuid import UUID
from bank_portal.schemas.common import Money, Pagination
from bank_portal.schemas.member import MemberSummary
from bank_portal.schemas.loan import LoanPaymentResponse


class TransactionCreate(BaseModel):
    """Schema for recording a deposit."""
    member_id: Optional[UUID] = None
    account_id: Optional[UUID] = None
    basic_pay: Optional[Decimal] = Field(None, description="Savings portion, credited to the member account")
    development_fee: Optional[Decimal] = Field(None, description="Credited to the organisation fee pool")
    penalty: Optional[Decimal] = Field(None, description="Credited to the organisation penalty fund")


class SmartDistributeRequest(BaseModel):
    """Schema for a lump-sum payment to be split by priority."""
    member_id: Optional[UUID] = None
    total_amount: Optional[Decimal] = None
    penalty_provided: Optional[Decimal] = Field(None, description="Penalty owed, taken first")


class AccountNumberSummary(BaseModel):
    id: UUID
    account_number: str

    class Config:
        from_attributes = True


class TransactionResponse(BaseModel):
    id: UUID
    member_id: UUID
    account_id: UUID
    basic_pay: Money
    development_fee: Money
    penalty: Money
    created_at: datetime
    member: Optional[MemberSummary] = None
    account: Optional[AccountNumberSummary] = None

    class Config:
        from_attributes = True


class TransactionPage(BaseModel):
    data: List[TransactionResponse]
    pagination: Pagination


class DistributionBreakdown(BaseModel):
    """Result of the lump-sum waterfall. The six parts add up to ``total``."""
    penalty: Money
    development_fee: Money
    base_deposit: Money
    loan_interest: Money
    loan_principal: Money
    extra_deposit: Money
    total: Money

    @property
    def basic_pay(self) -> Decimal:
        """Amount credited to the member's savings."""
        return self.base_deposit + self.extra_deposit


class SmartDistributeResponse(BaseModel):
    transaction: TransactionResponse
    loan_payment: Optional[LoanPaymentResponse] = None
    breakdown: DistributionBreakdown
