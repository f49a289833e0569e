from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from bank_portal.db.base import get_db
from bank_portal.schemas.common import MessageResponse
from bank_portal.schemas.loan import (
    LoanCreate,
    LoanDetailResponse,
    LoanPage,
    LoanPayResponse,
    LoanPaymentRequest,
    LoanPaymentResponse,
    LoanResponse,
    LoanableAmountResponse,
)
from bank_portal.services.liquidity import get_loanable_amount
from bank_portal.services.loan import (
    create_loan,
    delete_loan_payment,
    get_all_loans,
    get_loan,
    get_member_loan_payments,
    get_member_loans,
    pay_loan_emi,
)
from datetime import date
from typing import List, Optional
from uuid import UUID

router = APIRouter(prefix="/api/loan", tags=["loan"])


@router.post("/create", response_model=LoanResponse, status_code=status.HTTP_201_CREATED)
def create_loan_endpoint(payload: LoanCreate, db: Session = Depends(get_db)):
    """Originate a loan. ``interest_rate`` is a monthly percentage."""
    return create_loan(
        db,
        member_id=payload.member_id,
        principal_amount=payload.principal_amount,
        interest_rate=payload.interest_rate,
        time_period=payload.time_period,
    )


@router.get("/get/{loan_id}", response_model=LoanDetailResponse)
def get_loan_endpoint(loan_id: UUID, db: Session = Depends(get_db)):
    return get_loan(db, loan_id)


@router.get("/member/{member_id}", response_model=List[LoanDetailResponse])
def member_loans_endpoint(member_id: UUID, limit: Optional[int] = Query(None, ge=1), db: Session = Depends(get_db)):
    return get_member_loans(db, member_id, limit=limit)


@router.get("/payments/member/{member_id}", response_model=List[LoanPaymentResponse])
def member_loan_payments_endpoint(
    member_id: UUID,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db)
):
    return get_member_loan_payments(db, member_id, start_date=start_date, end_date=end_date)


@router.get("/all", response_model=LoanPage)
def list_loans_endpoint(
    status: Optional[str] = None,
    member_id: Optional[UUID] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=500),
    db: Session = Depends(get_db)
):
    return get_all_loans(db, status=status, member_id=member_id, page=page, limit=limit)


@router.post("/pay/{loan_id}", response_model=LoanPayResponse)
def pay_loan_endpoint(loan_id: UUID, payload: LoanPaymentRequest, db: Session = Depends(get_db)):
    """Flexible payment: interest on the current balance plus the chosen principal."""
    return pay_loan_emi(db, loan_id, principal_paid=payload.principal_paid, penalty=payload.penalty)


@router.delete("/payment/{payment_id}", response_model=MessageResponse)
def delete_loan_payment_endpoint(payment_id: UUID, db: Session = Depends(get_db)):
    """Reverse a loan payment; the loan becomes ACTIVE again."""
    delete_loan_payment(db, payment_id)
    return {"message": "Loan payment deleted successfully"}


@router.get("/available", response_model=LoanableAmountResponse)
def loanable_amount_endpoint(db: Session = Depends(get_db)):
    return get_loanable_amount(db)
