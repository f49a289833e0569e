from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from bank_portal.db.base import get_db
from bank_portal.services.report import (
    get_expected_collections,
    get_member_status,
    get_monthly_activity,
    get_overview_stats,
)
from typing import Optional

router = APIRouter(prefix="/api", tags=["report"])


@router.get("/overview/stats")
def overview_stats(db: Session = Depends(get_db)):
    """Dashboard: organisation pools, totals, loanable amount, cash in hand, pending deposits."""
    return get_overview_stats(db)


@router.get("/report/activity")
def monthly_activity(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000),
    db: Session = Depends(get_db)
):
    return get_monthly_activity(db, month=month, year=year)


@router.get("/report/expected")
def expected_collections(db: Session = Depends(get_db)):
    return get_expected_collections(db)


@router.get("/report/member-status")
def member_status(db: Session = Depends(get_db)):
    return get_member_status(db)
