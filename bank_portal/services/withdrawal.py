from sqlalchemy.orm import Session
from bank_portal.core.errors import ValidationError, InsufficientFundsError
from bank_portal.db.base import atomic
from bank_portal.models.ledger import OrgWithdrawal, WithdrawalSource
from bank_portal.services.money import format_money, require_amount, round_money
from bank_portal.services.organisation import get_organisation
from bank_portal.services.pagination import paginate
from typing import Optional
import logging

logger = logging.getLogger(__name__)


def create_withdrawal(db: Session, purpose: str, amount, source) -> dict:
    """Spend organisation money from the development-fee pool or the penalty fund."""
    if not purpose or not str(purpose).strip() or amount is None or not source:
        raise ValidationError("purpose, amount, and source are required")
    withdrawal_amount = require_amount(amount, "amount")
    if withdrawal_amount <= 0:
        raise ValidationError("Amount must be greater than 0")
    try:
        pool = WithdrawalSource(source)
    except ValueError:
        raise ValidationError("Source must be either 'AMOUNT' or 'PENALTY'")

    with atomic(db):
        organisation = get_organisation(db, for_update=True)

        available = round_money(organisation.amount if pool == WithdrawalSource.AMOUNT else organisation.penalty)
        if withdrawal_amount > available:
            raise InsufficientFundsError(
                f"Insufficient funds. Available: {format_money(available)}, Requested: {format_money(withdrawal_amount)}"
            )

        withdrawal = OrgWithdrawal(
            purpose=purpose.strip(),
            amount=withdrawal_amount,
            source=pool,
        )
        db.add(withdrawal)

        if pool == WithdrawalSource.AMOUNT:
            organisation.amount = available - withdrawal_amount
        else:
            organisation.penalty = available - withdrawal_amount

    db.refresh(withdrawal)
    db.refresh(organisation)
    logger.info(f"Withdrawal {withdrawal.id}: {withdrawal_amount} from {pool.value} for '{withdrawal.purpose}'")
    return {"withdrawal": withdrawal, "organisation": organisation}


def get_all_withdrawals(db: Session, page: Optional[int] = None, limit: Optional[int] = None) -> dict:
    return paginate(db.query(OrgWithdrawal).order_by(OrgWithdrawal.created_at.desc()), page, limit)
