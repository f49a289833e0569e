"""Read-side dashboards and reports. Nothing here writes to the ledger."""
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload
from bank_portal.core.config import settings
from bank_portal.core.errors import ValidationError
from bank_portal.models.member import Member
from bank_portal.models.transaction import TransactionLog, Loan, LoanPayment, LoanStatus
from bank_portal.models.ledger import OrgWithdrawal
from bank_portal.services.liquidity import (
    calculate_cash_in_hand,
    get_total_loaned,
    get_total_member_funds,
    get_total_released,
)
from bank_portal.services.money import ZERO, round_money
from bank_portal.services.organisation import get_organisation
from bank_portal.services.pagination import end_of_day
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional
import calendar
import logging

logger = logging.getLogger(__name__)


def _months_between(earlier: datetime, later: datetime) -> int:
    return (later.year - earlier.year) * 12 + (later.month - earlier.month)


def _expected_loan_due(loan: Optional[Loan]) -> Dict[str, Decimal]:
    """Interest on the current balance plus the standard principal slice."""
    if loan is None:
        return {"interest": ZERO, "principal": ZERO}
    balance = round_money(loan.remaining_balance)
    return {
        "interest": round_money(balance * loan.interest_rate),
        "principal": min(round_money(loan.emi_amount), balance),
    }


def _active_loan(member: Member) -> Optional[Loan]:
    return next((loan for loan in member.loans if loan.status == LoanStatus.ACTIVE), None)


def get_members_with_pending_deposits(db: Session, now: Optional[datetime] = None) -> List[dict]:
    """Members who joined before this month and have not deposited this month.

    Missed months are counted from the last deposit (or from joining when
    there is none), at least one. The suggested payment covers every missed
    month plus the current one, and a late penalty per missed month.
    """
    now = now or datetime.utcnow()
    first_day_of_month = datetime(now.year, now.month, 1)

    deposited_ids = {
        row[0] for row in db.query(TransactionLog.member_id).filter(
            TransactionLog.created_at >= first_day_of_month
        ).distinct().all()
    }

    last_deposits = dict(
        db.query(TransactionLog.member_id, func.max(TransactionLog.created_at)).group_by(
            TransactionLog.member_id
        ).all()
    )

    members = db.query(Member).options(joinedload(Member.account)).filter(
        Member.created_at < first_day_of_month
    ).order_by(Member.name.asc()).all()

    result = []
    for member in members:
        if member.id in deposited_ids:
            continue
        since = last_deposits.get(member.id) or member.created_at
        missed_months = max(1, _months_between(since, now))

        deposits_due = settings.MONTHLY_DUE * (missed_months + 1)
        penalty_due = settings.LATE_DEPOSIT_PENALTY * missed_months
        result.append({
            "id": member.id,
            "name": member.name,
            "mobile": member.mobile,
            "account_number": member.account.account_number if member.account else None,
            "missed_months": missed_months,
            "suggested_payment": round_money(deposits_due + penalty_due),
            "breakdown": {
                "deposits": round_money(deposits_due),
                "penalty": round_money(penalty_due),
            },
        })
    return result


def get_overview_stats(db: Session) -> dict:
    """Dashboard figures, all computed live from the ledger."""
    organisation = get_organisation(db)
    db.commit()  # persist the organisation row if this was the first access

    total_members_amount = get_total_member_funds(db)
    total_loaned_amount = get_total_loaned(db)
    total_released_amount = get_total_released(db)
    active_loans_count = db.query(func.count(Loan.id)).filter(Loan.status == LoanStatus.ACTIVE).scalar() or 0

    return {
        "organisation": {
            "name": organisation.name,
            "amount": round_money(organisation.amount),
            "penalty": round_money(organisation.penalty),
            "profit": round_money(organisation.profit),
        },
        "member_count": db.query(func.count(Member.id)).scalar() or 0,
        "total_members_amount": total_members_amount,
        "active_loans_count": active_loans_count,
        "total_loaned_amount": total_loaned_amount,
        "total_released_amount": total_released_amount,
        "loanable_amount": total_members_amount - total_loaned_amount,
        "cash_in_hand": calculate_cash_in_hand(db, organisation),
        "members_with_pending_deposits": get_members_with_pending_deposits(db),
    }


def get_monthly_activity(db: Session, month: Optional[int] = None, year: Optional[int] = None) -> dict:
    """Per-member money in for one calendar month, plus organisation spending."""
    if not month or not year:
        today = date.today()
        month, year = today.month, today.year
    if not 1 <= month <= 12:
        raise ValidationError("month must be between 1 and 12")

    start = datetime(year, month, 1)
    end = end_of_day(date(year, month, calendar.monthrange(year, month)[1]))

    deposit_rows = db.query(
        TransactionLog.member_id,
        func.sum(TransactionLog.basic_pay),
        func.sum(TransactionLog.development_fee),
        func.sum(TransactionLog.penalty),
    ).filter(
        TransactionLog.created_at >= start,
        TransactionLog.created_at <= end,
    ).group_by(TransactionLog.member_id).all()
    deposits = {
        member_id: round_money(basic) + round_money(fee) + round_money(penalty)
        for member_id, basic, fee, penalty in deposit_rows
    }

    loan_rows = db.query(Loan.member_id, func.sum(LoanPayment.total_paid)).join(
        Loan, LoanPayment.loan_id == Loan.id
    ).filter(
        LoanPayment.created_at >= start,
        LoanPayment.created_at <= end,
    ).group_by(Loan.member_id).all()
    loan_payments = {member_id: round_money(total) for member_id, total in loan_rows}

    total_out = round_money(
        db.query(func.sum(OrgWithdrawal.amount)).filter(
            OrgWithdrawal.created_at >= start,
            OrgWithdrawal.created_at <= end,
        ).scalar()
    )

    members = db.query(Member).options(
        joinedload(Member.account),
        joinedload(Member.loans),
    ).order_by(Member.name.asc()).all()

    rows = []
    for member in members:
        deposit_amount = deposits.get(member.id, ZERO)
        loan_amount = loan_payments.get(member.id, ZERO)
        has_loan_activity = _active_loan(member) is not None or member.id in loan_payments
        rows.append({
            "member_id": member.id,
            "name": member.name,
            "mobile": member.mobile,
            "account_number": member.account.account_number if member.account else "N/A",
            "deposit_amount": deposit_amount,
            "loan_amount": loan_amount,
            "loan_status": "ACTIVE" if has_loan_activity else "NONE",
            "total_paid": deposit_amount + loan_amount,
        })

    total_in = sum(deposits.values(), ZERO) + sum(loan_payments.values(), ZERO)
    return {
        "month": month,
        "year": year,
        "summary": {
            "total_in": total_in,
            "total_out": total_out,
            "net": total_in - total_out,
        },
        "rows": rows,
    }


def get_expected_collections(db: Session) -> dict:
    """What each member is expected to pay next month."""
    members = db.query(Member).options(
        joinedload(Member.account),
        joinedload(Member.loans),
    ).order_by(Member.name.asc()).all()

    collections = []
    for member in members:
        loan = _active_loan(member)
        due = _expected_loan_due(loan)
        loan_expectation = due["interest"] + due["principal"]
        collections.append({
            "member_id": member.id,
            "name": member.name,
            "mobile": member.mobile,
            "account_number": member.account.account_number if member.account else "N/A",
            "base_amount": round_money(settings.MONTHLY_DUE),
            "loan_amount": loan_expectation,
            "has_active_loan": loan is not None,
            "loan_details": {
                "expected_interest": due["interest"],
                "expected_principal": due["principal"],
            } if loan is not None else None,
            "total_expected": round_money(settings.MONTHLY_DUE) + loan_expectation,
        })

    return {
        "total_expected": sum((item["total_expected"] for item in collections), ZERO),
        "member_count": len(members),
        "collections": collections,
    }


def get_member_status(db: Session) -> dict:
    """Remaining loan principal and expected monthly amount per member."""
    members = db.query(Member).options(
        joinedload(Member.account),
        joinedload(Member.loans),
    ).order_by(Member.name.asc()).all()

    rows = []
    for member in members:
        loan = _active_loan(member)
        due = _expected_loan_due(loan)
        rows.append({
            "member_id": member.id,
            "name": member.name,
            "fathers_name": member.fathers_name or "N/A",
            "account_number": member.account.account_number if member.account else "N/A",
            "remaining_loan_principal": round_money(loan.remaining_balance) if loan else ZERO,
            "expected_amount": round_money(settings.MONTHLY_DUE) + due["interest"] + due["principal"],
        })

    return {"count": len(members), "rows": rows}
