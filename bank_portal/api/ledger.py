"""Organisation-level money: cash advances, profit distribution, expenses."""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from bank_portal.db.base import get_db
from bank_portal.schemas.ledger import (
    AuditLogResponse,
    AuditRunResponse,
    ReleaseCashRequest,
    ReleasedMoneyLogResponse,
    ReleasedMoneyResult,
    SettleCashRequest,
    WithdrawalCreate,
    WithdrawalPage,
    WithdrawalResult,
)
from bank_portal.services.audit import get_audit_history, run_audit
from bank_portal.services.released_money import get_member_released_logs, release_cash, settle_cash
from bank_portal.services.withdrawal import create_withdrawal, get_all_withdrawals
from typing import List
from uuid import UUID

released_money_router = APIRouter(prefix="/api/released-money", tags=["released-money"])
audit_router = APIRouter(prefix="/api/audit", tags=["audit"])
withdrawal_router = APIRouter(prefix="/api/withdrawal", tags=["withdrawal"])


@released_money_router.post("/release", response_model=ReleasedMoneyResult, status_code=status.HTTP_201_CREATED)
def release_cash_endpoint(payload: ReleaseCashRequest, db: Session = Depends(get_db)):
    """Pay a cash advance to a member, limited by cash in hand."""
    return release_cash(db, payload.member_id, payload.amount)


@released_money_router.post("/settle", response_model=ReleasedMoneyResult)
def settle_cash_endpoint(payload: SettleCashRequest, db: Session = Depends(get_db)):
    return settle_cash(db, payload.member_id, payload.amount_paid, payload.profit)


@released_money_router.get("/logs/{member_id}", response_model=List[ReleasedMoneyLogResponse])
def released_money_logs_endpoint(member_id: UUID, db: Session = Depends(get_db)):
    return get_member_released_logs(db, member_id)


@audit_router.post("/run", response_model=AuditRunResponse)
def run_audit_endpoint(db: Session = Depends(get_db)):
    """Distribute accumulated profit equally to all members."""
    audit_log = run_audit(db)
    return {"message": "Audit completed successfully", "audit": audit_log}


@audit_router.get("/history", response_model=List[AuditLogResponse])
def audit_history_endpoint(db: Session = Depends(get_db)):
    return get_audit_history(db)


@withdrawal_router.post("/create", response_model=WithdrawalResult, status_code=status.HTTP_201_CREATED)
def create_withdrawal_endpoint(payload: WithdrawalCreate, db: Session = Depends(get_db)):
    return create_withdrawal(db, payload.purpose, payload.amount, payload.source)


@withdrawal_router.get("/list", response_model=WithdrawalPage)
def list_withdrawals_endpoint(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=500),
    db: Session = Depends(get_db)
):
    return get_all_withdrawals(db, page=page, limit=limit)
