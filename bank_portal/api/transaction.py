from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from bank_portal.db.base import get_db
from bank_portal.schemas.common import MessageResponse
from bank_portal.schemas.transaction import (
    SmartDistributeRequest,
    SmartDistributeResponse,
    TransactionCreate,
    TransactionPage,
    TransactionResponse,
)
from bank_portal.services.transaction import (
    create_transaction,
    delete_transaction,
    get_all_transactions,
    get_member_transactions,
    smart_distribute,
)
from datetime import date
from typing import List, Optional
from uuid import UUID

router = APIRouter(prefix="/api/transaction", tags=["transaction"])


@router.post("/create", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
def create_transaction_endpoint(payload: TransactionCreate, db: Session = Depends(get_db)):
    """Record a deposit and update the member account and organisation pools."""
    return create_transaction(
        db,
        member_id=payload.member_id,
        account_id=payload.account_id,
        basic_pay=payload.basic_pay,
        development_fee=payload.development_fee,
        penalty=payload.penalty,
    )


@router.post("/smart-distribute", response_model=SmartDistributeResponse, status_code=status.HTTP_201_CREATED)
def smart_distribute_endpoint(payload: SmartDistributeRequest, db: Session = Depends(get_db)):
    """Split one lump sum across penalty, fee, deposit, loan and extra savings."""
    return smart_distribute(
        db,
        member_id=payload.member_id,
        total_amount=payload.total_amount,
        penalty_provided=payload.penalty_provided,
    )


@router.get("/list", response_model=TransactionPage)
def list_transactions_endpoint(
    name: Optional[str] = None,
    account_number: Optional[str] = None,
    mobile: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=500),
    db: Session = Depends(get_db)
):
    return get_all_transactions(
        db,
        name=name,
        account_number=account_number,
        mobile=mobile,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
    )


@router.get("/member/{member_id}", response_model=List[TransactionResponse])
def member_transactions_endpoint(
    member_id: UUID,
    limit: Optional[int] = Query(None, ge=1),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db)
):
    return get_member_transactions(db, member_id, limit=limit, start_date=start_date, end_date=end_date)


@router.delete("/{transaction_id}", response_model=MessageResponse)
def delete_transaction_endpoint(transaction_id: UUID, db: Session = Depends(get_db)):
    """Reverse a deposit and remove it."""
    delete_transaction(db, transaction_id)
    return {"message": "Transaction deleted successfully"}
