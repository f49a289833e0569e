from sqlalchemy.orm import Session, joinedload
from bank_portal.core.errors import ValidationError, NotFoundError
from bank_portal.db.base import atomic
from bank_portal.models.member import Member, Account
from bank_portal.models.transaction import TransactionLog
from bank_portal.models.ledger import Organisation
from bank_portal.services.distribution import allocate_payment
from bank_portal.services.loan import apply_loan_payment, get_active_loan
from bank_portal.services.money import ZERO, parse_amount, require_amount, round_money
from bank_portal.services.organisation import get_organisation
from bank_portal.services.pagination import apply_date_range, paginate
from datetime import date
from decimal import Decimal
from uuid import UUID
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)


def post_deposit(
    db: Session,
    organisation: Organisation,
    account: Account,
    basic_pay: Decimal,
    development_fee: Decimal,
    penalty: Decimal
) -> TransactionLog:
    """Write a deposit log and move the money in lockstep with it.

    basic pay -> member savings, development fee -> organisation amount,
    penalty -> organisation penalty fund. Must be called inside an open unit
    of work.
    """
    transaction = TransactionLog(
        member_id=account.member_id,
        account_id=account.id,
        basic_pay=basic_pay,
        development_fee=development_fee,
        penalty=penalty,
    )
    db.add(transaction)

    account.total_amount = round_money(account.total_amount) + basic_pay
    organisation.amount = round_money(organisation.amount) + development_fee
    organisation.penalty = round_money(organisation.penalty) + penalty

    db.flush()
    return transaction


def create_transaction(
    db: Session,
    member_id: UUID,
    account_id: UUID,
    basic_pay=None,
    development_fee=None,
    penalty=None
) -> TransactionLog:
    """
    Record a member deposit.

    Each amount defaults to zero when absent or non-numeric; negative amounts
    are rejected.
    """
    if not member_id or not account_id:
        raise ValidationError("member_id and account_id are required")

    basic_pay_amount = parse_amount(basic_pay, "basic_pay")
    fee_amount = parse_amount(development_fee, "development_fee")
    penalty_amount = parse_amount(penalty, "penalty")

    with atomic(db):
        organisation = get_organisation(db, for_update=True)

        account = db.query(Account).filter(Account.id == account_id).with_for_update().first()
        if not account or account.member_id != member_id:
            raise NotFoundError("Account not found for this member")

        transaction = post_deposit(db, organisation, account, basic_pay_amount, fee_amount, penalty_amount)

    db.refresh(transaction)
    logger.info(
        f"Deposit {transaction.id} for member {member_id}: basic pay {basic_pay_amount}, "
        f"development fee {fee_amount}, penalty {penalty_amount}"
    )
    return transaction


def delete_transaction(db: Session, transaction_id: UUID) -> None:
    """Reverse a deposit exactly and remove its log."""
    with atomic(db):
        organisation = get_organisation(db, for_update=True)

        transaction = db.query(TransactionLog).filter(TransactionLog.id == transaction_id).first()
        if not transaction:
            raise NotFoundError("Transaction not found")

        account = db.query(Account).filter(Account.id == transaction.account_id).with_for_update().first()
        account.total_amount = round_money(account.total_amount) - round_money(transaction.basic_pay)
        organisation.amount = round_money(organisation.amount) - round_money(transaction.development_fee)
        organisation.penalty = round_money(organisation.penalty) - round_money(transaction.penalty)

        db.delete(transaction)

    logger.info(f"Deposit {transaction_id} reversed")


def get_all_transactions(
    db: Session,
    name: Optional[str] = None,
    account_number: Optional[str] = None,
    mobile: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    page: Optional[int] = None,
    limit: Optional[int] = None
) -> dict:
    """Deposits across all members, newest first, filtered and paginated."""
    query = db.query(TransactionLog).join(
        Member, TransactionLog.member_id == Member.id
    ).join(
        Account, TransactionLog.account_id == Account.id
    ).options(
        joinedload(TransactionLog.member),
        joinedload(TransactionLog.account),
    )

    if name:
        query = query.filter(Member.name.ilike(f"%{name}%"))
    if mobile:
        query = query.filter(Member.mobile.contains(mobile, autoescape=True))
    if account_number:
        query = query.filter(Account.account_number.contains(account_number, autoescape=True))
    query = apply_date_range(query, TransactionLog.created_at, start_date, end_date)

    return paginate(query.order_by(TransactionLog.created_at.desc()), page, limit)


def get_member_transactions(
    db: Session,
    member_id: UUID,
    limit: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> List[TransactionLog]:
    query = db.query(TransactionLog).options(joinedload(TransactionLog.account)).filter(
        TransactionLog.member_id == member_id
    )
    query = apply_date_range(query, TransactionLog.created_at, start_date, end_date)
    query = query.order_by(TransactionLog.created_at.desc())
    if limit:
        query = query.limit(limit)
    return query.all()


def smart_distribute(
    db: Session,
    member_id: UUID,
    total_amount,
    penalty_provided=None
) -> dict:
    """
    Take one lump sum from a member and spread it by priority.

    Penalty, development fee and base deposit come first; an ACTIVE loan then
    gets its interest and principal; the rest is extra savings. The loan
    payment (if any) carries no penalty since the penalty was already taken
    into the deposit. Everything is written in one transaction.
    """
    if not member_id:
        raise ValidationError("A valid member_id and total_amount are required")
    total = require_amount(total_amount, "total_amount")
    penalty = parse_amount(penalty_provided, "penalty_provided")

    with atomic(db):
        organisation = get_organisation(db, for_update=True)

        member = db.query(Member).filter(Member.id == member_id).first()
        if not member:
            raise NotFoundError("Member not found")
        account = db.query(Account).filter(Account.member_id == member_id).with_for_update().first()
        if not account:
            raise NotFoundError("Account not found for this member")

        active_loan = get_active_loan(db, member_id, for_update=True)
        breakdown = allocate_payment(total, penalty, active_loan)

        loan_payment = None
        if active_loan and (breakdown.loan_interest > 0 or breakdown.loan_principal > 0):
            loan_payment = apply_loan_payment(
                db,
                organisation,
                active_loan,
                principal=breakdown.loan_principal,
                interest=breakdown.loan_interest,
                penalty=ZERO,
                extra_principal=max(ZERO, breakdown.loan_principal - round_money(active_loan.emi_amount)),
            )

        transaction = post_deposit(
            db,
            organisation,
            account,
            breakdown.basic_pay,
            breakdown.development_fee,
            breakdown.penalty,
        )

    db.refresh(transaction)
    if loan_payment is not None:
        db.refresh(loan_payment)
    logger.info(f"Smart distribution for member {member_id}: {breakdown.model_dump()}")
    return {"transaction": transaction, "loan_payment": loan_payment, "breakdown": breakdown}
