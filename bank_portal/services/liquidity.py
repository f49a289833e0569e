"""Live liquidity figures over the ledger: loanable amount and cash in hand.

Both are recomputed from the tables on every call and are never cached.
"""
from sqlalchemy import func
from sqlalchemy.orm import Session
from bank_portal.models.member import Account
from bank_portal.models.transaction import Loan, LoanStatus
from bank_portal.models.ledger import Organisation
from bank_portal.services.money import round_money
from decimal import Decimal
from typing import Dict


def get_total_member_funds(db: Session) -> Decimal:
    """Sum of all member savings."""
    return round_money(db.query(func.sum(Account.total_amount)).scalar())


def get_total_released(db: Session) -> Decimal:
    """Sum of outstanding cash advances."""
    return round_money(db.query(func.sum(Account.released_money)).scalar())


def get_total_loaned(db: Session) -> Decimal:
    """Principal still tied up in ACTIVE loans."""
    return round_money(
        db.query(func.sum(Loan.remaining_balance)).filter(Loan.status == LoanStatus.ACTIVE).scalar()
    )


def get_loanable_amount(db: Session) -> Dict[str, Decimal]:
    """Total member savings minus principal on active loans."""
    total_member_funds = get_total_member_funds(db)
    total_loaned = get_total_loaned(db)
    return {
        "total_member_funds": total_member_funds,
        "total_loaned": total_loaned,
        "available_funds": total_member_funds - total_loaned,
    }


def calculate_cash_in_hand(db: Session, organisation: Organisation) -> Decimal:
    """Organisation pools (fees, penalties, profit) plus loanable funds minus released money.

    This is the single cash-in-hand figure: the dashboard shows it and the
    cash advance guard checks against it.
    """
    loanable = get_loanable_amount(db)["available_funds"]
    return (
        round_money(organisation.amount)
        + round_money(organisation.penalty)
        + round_money(organisation.profit)
        + loanable
        - get_total_released(db)
    )
