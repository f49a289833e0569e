from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from uuid import UUID
from bank_portal.models.ledger import ReleasedMoneyType, WithdrawalSource
from bank_portal.schemas.common import Money, Pagination
from bank_portal.schemas.member import AccountResponse


class OrganisationResponse(BaseModel):
    id: int
    name: str
    amount: Money
    penalty: Money
    profit: Money

    class Config:
        from_attributes = True


class WithdrawalCreate(BaseModel):
    """Schema for an organisation expense."""
    purpose: Optional[str] = Field(None, max_length=255)
    amount: Optional[Decimal] = None
    source: Optional[str] = Field(None, description="AMOUNT (development fees) or PENALTY (penalty fund)")


class WithdrawalResponse(BaseModel):
    id: UUID
    purpose: str
    amount: Money
    source: WithdrawalSource
    created_at: datetime

    class Config:
        from_attributes = True


class WithdrawalResult(BaseModel):
    withdrawal: WithdrawalResponse
    organisation: OrganisationResponse


class WithdrawalPage(BaseModel):
    data: List[WithdrawalResponse]
    pagination: Pagination


class ReleaseCashRequest(BaseModel):
    member_id: Optional[UUID] = None
    amount: Optional[Decimal] = None


class SettleCashRequest(BaseModel):
    member_id: Optional[UUID] = None
    amount_paid: Optional[Decimal] = None
    profit: Optional[Decimal] = Field(None, description="Gain on top of the repaid amount")


class ReleasedMoneyLogResponse(BaseModel):
    id: UUID
    account_id: UUID
    amount: Money
    profit: Optional[Money] = None
    type: ReleasedMoneyType
    created_at: datetime

    class Config:
        from_attributes = True


class ReleasedMoneyResult(BaseModel):
    log: ReleasedMoneyLogResponse
    account: AccountResponse


class AuditLogResponse(BaseModel):
    id: UUID
    total_profit: Money
    member_count: int
    per_member_share: Money
    created_at: datetime

    class Config:
        from_attributes = True


class AuditRunResponse(BaseModel):
    message: str
    audit: AuditLogResponse
