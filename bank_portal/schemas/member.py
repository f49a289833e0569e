from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal
from uuid import UUID
from bank_portal.schemas.common import Money


class MemberCreate(BaseModel):
    """Schema for onboarding a member with their account."""
    mobile: Optional[str] = Field(None, description="Mobile number, 10-15 digits")
    account_number: Optional[str] = Field(None, description="Operator-assigned unique account number")
    name: Optional[str] = Field(None, max_length=100)
    fathers_name: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = Field(None, max_length=500)
    initial_amount: Optional[Decimal] = Field(None, description="Opening savings balance")
    development_fee: Optional[Decimal] = Field(None, description="Joining fee credited to the organisation")


class MemberUpdate(BaseModel):
    """Schema for updating member details."""
    mobile: Optional[str] = None
    name: Optional[str] = Field(None, max_length=100)
    fathers_name: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = Field(None, max_length=500)


class AccountResponse(BaseModel):
    id: UUID
    member_id: UUID
    account_number: str
    total_amount: Money
    released_money: Money

    class Config:
        from_attributes = True


class MemberResponse(BaseModel):
    id: UUID
    name: Optional[str] = None
    fathers_name: Optional[str] = None
    mobile: str
    address: Optional[str] = None
    created_at: datetime
    account: Optional[AccountResponse] = None

    class Config:
        from_attributes = True


class MemberSummary(BaseModel):
    id: UUID
    name: Optional[str] = None
    mobile: str

    class Config:
        from_attributes = True
