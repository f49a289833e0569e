from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from uuid import UUID
from bank_portal.models.transaction import LoanStatus
from bank_portal.schemas.common import Money, Pagination, Rate
from bank_portal.schemas.member import MemberSummary


class LoanCreate(BaseModel):
    """Schema for originating a loan."""
    member_id: Optional[UUID] = None
    principal_amount: Optional[Decimal] = None
    interest_rate: Optional[Decimal] = Field(None, description="Monthly interest rate percentage (e.g. 1 for 1%)")
    time_period: Optional[int] = Field(None, description="Term in months")


class LoanPaymentRequest(BaseModel):
    """Schema for a flexible loan payment."""
    principal_paid: Optional[Decimal] = Field(None, description="Principal the member wants to repay; capped at the balance")
    penalty: Optional[Decimal] = Field(None, description="Late penalty, credited to the penalty fund")


class LoanPaymentResponse(BaseModel):
    id: UUID
    loan_id: UUID
    principal_paid: Money
    extra_principal: Money
    interest_paid: Money
    penalty: Money
    total_paid: Money
    remaining_after: Money
    created_at: datetime

    class Config:
        from_attributes = True


class LoanResponse(BaseModel):
    id: UUID
    member_id: UUID
    principal_amount: Money
    interest_rate: Rate
    time_period: int
    emi_amount: Money
    remaining_balance: Money
    total_interest_paid: Money
    status: LoanStatus
    created_at: datetime
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LoanListItem(LoanResponse):
    member: Optional[MemberSummary] = None


class LoanDetailResponse(LoanResponse):
    member: Optional[MemberSummary] = None
    payments: List[LoanPaymentResponse] = []


class LoanPage(BaseModel):
    data: List[LoanListItem]
    pagination: Pagination


class LoanPayResponse(BaseModel):
    payment: LoanPaymentResponse
    loan: LoanResponse


class LoanableAmountResponse(BaseModel):
    total_member_funds: Money
    total_loaned: Money
    available_funds: Money
