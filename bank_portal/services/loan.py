from sqlalchemy.orm import Session, joinedload
from bank_portal.core.errors import ValidationError, NotFoundError, ConflictError, InsufficientFundsError
from bank_portal.db.base import atomic
from bank_portal.models.member import Member
from bank_portal.models.transaction import Loan, LoanPayment, LoanStatus
from bank_portal.models.ledger import Organisation
from bank_portal.services.liquidity import get_loanable_amount
from bank_portal.services.money import (
    EPSILON,
    ZERO,
    format_money,
    parse_amount,
    percent_to_rate,
    require_amount,
    round_money,
)
from bank_portal.services.organisation import get_organisation
from bank_portal.services.pagination import apply_date_range, paginate
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def get_active_loan(db: Session, member_id: UUID, for_update: bool = False) -> Optional[Loan]:
    query = db.query(Loan).filter(Loan.member_id == member_id, Loan.status == LoanStatus.ACTIVE)
    if for_update:
        query = query.with_for_update()
    return query.first()


def create_loan(
    db: Session,
    member_id: UUID,
    principal_amount,
    interest_rate,
    time_period
) -> Loan:
    """
    Originate a loan.

    Checks run in order and the first failure wins: required fields, member
    exists, no other ACTIVE loan, enough loanable funds. ``interest_rate`` is a
    monthly percentage and is stored as a fraction. The EMI is the fixed
    principal slice ``principal / months``; interest is charged separately on
    each payment.
    """
    if any(_is_blank(v) for v in (member_id, principal_amount, interest_rate, time_period)):
        raise ValidationError("member_id, principal_amount, interest_rate and time_period are required")

    principal = require_amount(principal_amount, "principal_amount")
    if principal <= 0:
        raise ValidationError("principal_amount must be greater than 0")
    rate = percent_to_rate(interest_rate)
    try:
        months = int(time_period)
    except (TypeError, ValueError):
        raise ValidationError("time_period must be a whole number of months")
    if months < 1:
        raise ValidationError("time_period must be at least 1 month")

    with atomic(db):
        get_organisation(db, for_update=True)

        member = db.query(Member).filter(Member.id == member_id).first()
        if not member:
            raise NotFoundError("Member not found")

        if get_active_loan(db, member_id, for_update=True):
            raise ConflictError("Member already has an active loan. Only one active loan per member is allowed.")

        available = get_loanable_amount(db)["available_funds"]
        if principal > available:
            logger.warning(f"Loan for member {member_id} refused: available {available}, requested {principal}")
            raise InsufficientFundsError(
                f"Insufficient funds. Available: {format_money(available)}, Requested: {format_money(principal)}"
            )

        loan = Loan(
            member_id=member_id,
            principal_amount=principal,
            interest_rate=rate,
            time_period=months,
            emi_amount=round_money(principal / months),
            remaining_balance=principal,
            total_interest_paid=ZERO,
            status=LoanStatus.ACTIVE,
        )
        db.add(loan)

    db.refresh(loan)
    logger.info(f"Loan {loan.id} created for member {member_id}: principal {principal}, rate {rate}, {months} months")
    return loan


def apply_loan_payment(
    db: Session,
    organisation: Organisation,
    loan: Loan,
    principal: Decimal,
    interest: Decimal,
    penalty: Decimal,
    extra_principal: Decimal
) -> LoanPayment:
    """Record a payment against a locked ACTIVE loan and move the money.

    Interest goes to organisation profit, penalty to the penalty fund. The loan
    completes once the remaining balance is within ``EPSILON`` of zero.
    Must be called inside an open unit of work.
    """
    before = round_money(loan.remaining_balance)
    new_balance = before - principal
    is_completed = new_balance <= EPSILON
    remaining_after = max(ZERO, new_balance)

    payment = LoanPayment(
        loan_id=loan.id,
        principal_paid=principal,
        extra_principal=extra_principal,
        interest_paid=interest,
        penalty=penalty,
        total_paid=principal + interest + penalty,
        remaining_after=remaining_after,
    )
    db.add(payment)

    loan.remaining_balance = remaining_after
    loan.total_interest_paid = round_money(loan.total_interest_paid) + interest
    loan.status = LoanStatus.COMPLETED if is_completed else LoanStatus.ACTIVE
    loan.completed_at = datetime.utcnow() if is_completed else None

    organisation.profit = round_money(organisation.profit) + interest
    organisation.penalty = round_money(organisation.penalty) + penalty

    db.flush()
    if is_completed:
        logger.info(f"Loan {loan.id} completed")
    return payment


def pay_loan_emi(
    db: Session,
    loan_id: UUID,
    principal_paid,
    penalty=None
) -> dict:
    """
    Flexible loan payment.

    Interest is charged on the balance *before* this payment's principal is
    applied. A principal above the remaining balance is capped to it (full
    settlement). ``extra_principal`` records how much exceeded the standard
    EMI slice and is informational only.
    """
    penalty_amount = parse_amount(penalty, "penalty")
    if _is_blank(principal_paid):
        raise ValidationError("Invalid principal amount")
    requested = require_amount(principal_paid, "principal amount")

    with atomic(db):
        organisation = get_organisation(db, for_update=True)

        loan = db.query(Loan).filter(Loan.id == loan_id).with_for_update().first()
        if not loan:
            raise NotFoundError("Loan not found")
        if loan.status != LoanStatus.ACTIVE:
            raise ValidationError("Loan is not active")

        remaining = round_money(loan.remaining_balance)
        interest = round_money(remaining * loan.interest_rate)
        principal = min(requested, remaining)
        standard_emi_principal = min(round_money(loan.emi_amount), remaining)
        extra_principal = max(ZERO, principal - standard_emi_principal)

        payment = apply_loan_payment(
            db,
            organisation,
            loan,
            principal=principal,
            interest=interest,
            penalty=penalty_amount,
            extra_principal=extra_principal,
        )

    db.refresh(payment)
    db.refresh(loan)
    logger.info(
        f"Loan {loan.id} payment {payment.id}: principal {payment.principal_paid}, "
        f"interest {payment.interest_paid}, penalty {payment.penalty}, remaining {payment.remaining_after}"
    )
    return {"payment": payment, "loan": loan}


def delete_loan_payment(db: Session, payment_id: UUID) -> None:
    """
    Reverse a loan payment exactly.

    The loan always goes back to ACTIVE: a payment that helped complete it
    has been undone. Refused when the member has since opened another loan,
    since a member holds at most one ACTIVE loan.
    """
    with atomic(db):
        organisation = get_organisation(db, for_update=True)

        payment = db.query(LoanPayment).filter(LoanPayment.id == payment_id).first()
        if not payment:
            raise NotFoundError("Loan payment not found")

        loan = db.query(Loan).filter(Loan.id == payment.loan_id).with_for_update().first()

        active_loan = get_active_loan(db, loan.member_id, for_update=True)
        if active_loan is not None and active_loan.id != loan.id:
            raise ConflictError(
                "Cannot reverse this payment: the member already has another active loan"
            )

        organisation.profit = round_money(organisation.profit) - round_money(payment.interest_paid)
        organisation.penalty = round_money(organisation.penalty) - round_money(payment.penalty)

        loan.remaining_balance = round_money(loan.remaining_balance) + round_money(payment.principal_paid)
        loan.total_interest_paid = round_money(loan.total_interest_paid) - round_money(payment.interest_paid)
        loan.status = LoanStatus.ACTIVE
        loan.completed_at = None

        db.delete(payment)

    logger.info(f"Loan payment {payment_id} reversed on loan {loan.id}")


def get_loan(db: Session, loan_id: UUID) -> Loan:
    """Loan with member and payment history (newest first)."""
    loan = db.query(Loan).options(
        joinedload(Loan.member),
        joinedload(Loan.payments),
    ).filter(Loan.id == loan_id).first()
    if not loan:
        raise NotFoundError("Loan not found")
    return loan


def get_member_loans(db: Session, member_id: UUID, limit: Optional[int] = None) -> List[Loan]:
    query = db.query(Loan).options(joinedload(Loan.payments)).filter(
        Loan.member_id == member_id
    ).order_by(Loan.created_at.desc())
    if limit:
        query = query.limit(limit)
    return query.all()


def get_all_loans(
    db: Session,
    status: Optional[str] = None,
    member_id: Optional[UUID] = None,
    page: Optional[int] = None,
    limit: Optional[int] = None
) -> dict:
    query = db.query(Loan).options(joinedload(Loan.member).joinedload(Member.account))
    if status:
        try:
            loan_status = LoanStatus(status.upper())
        except ValueError:
            raise ValidationError(f"Unknown loan status: {status}")
        query = query.filter(Loan.status == loan_status)
    if member_id:
        query = query.filter(Loan.member_id == member_id)
    return paginate(query.order_by(Loan.created_at.desc()), page, limit)


def get_member_loan_payments(
    db: Session,
    member_id: UUID,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> List[LoanPayment]:
    query = db.query(LoanPayment).join(Loan, LoanPayment.loan_id == Loan.id).filter(
        Loan.member_id == member_id
    )
    query = apply_date_range(query, LoanPayment.created_at, start_date, end_date)
    return query.order_by(LoanPayment.created_at.desc()).all()
