from sqlalchemy.orm import Session
from bank_portal.core.errors import ValidationError, NotFoundError, InsufficientLiquidityError
from bank_portal.db.base import atomic
from bank_portal.models.member import Member, Account
from bank_portal.models.ledger import ReleasedMoneyLog, ReleasedMoneyType
from bank_portal.services.liquidity import calculate_cash_in_hand
from bank_portal.services.money import EPSILON, ZERO, format_money, parse_amount, require_amount, round_money
from bank_portal.services.organisation import get_organisation
from uuid import UUID
from typing import List
import logging

logger = logging.getLogger(__name__)


def _get_member_account(db: Session, member_id: UUID, for_update: bool = False) -> Account:
    member = db.query(Member).filter(Member.id == member_id).first()
    query = db.query(Account).filter(Account.member_id == member_id)
    if for_update:
        query = query.with_for_update()
    account = query.first() if member else None
    if not member or not account:
        raise NotFoundError("Member or Account not found")
    return account


def release_cash(db: Session, member_id: UUID, amount) -> dict:
    """
    Pay a cash advance out to a member.

    Cash in hand is recomputed after the organisation row is locked, so the
    liquidity check and the release are one unit of work.
    """
    if not member_id:
        raise ValidationError("A valid member_id and amount are required")
    release_amount = require_amount(amount, "amount")
    if release_amount <= 0:
        raise ValidationError("amount must be greater than 0")

    with atomic(db):
        organisation = get_organisation(db, for_update=True)
        account = _get_member_account(db, member_id, for_update=True)

        cash_in_hand = calculate_cash_in_hand(db, organisation)
        if cash_in_hand < release_amount:
            logger.warning(f"Cash release for member {member_id} refused: cash in hand {cash_in_hand}, requested {release_amount}")
            raise InsufficientLiquidityError(
                f"Insufficient cash in hand. Available: {format_money(cash_in_hand)}, Requested: {format_money(release_amount)}"
            )

        account.released_money = round_money(account.released_money) + release_amount

        log = ReleasedMoneyLog(
            account_id=account.id,
            amount=release_amount,
            type=ReleasedMoneyType.RELEASE,
        )
        db.add(log)

    db.refresh(log)
    db.refresh(account)
    logger.info(f"Released {release_amount} to member {member_id}; outstanding {account.released_money}")
    return {"log": log, "account": account}


def settle_cash(db: Session, member_id: UUID, amount_paid, profit=None) -> dict:
    """
    Settle (part of) a member's cash advance.

    ``profit`` is the gain on top of the repaid amount and goes to
    organisation profit.
    """
    if not member_id:
        raise ValidationError("A valid member_id and amount_paid are required")
    principal_paid = require_amount(amount_paid, "amount_paid")
    profit_gained = parse_amount(profit, "profit")

    with atomic(db):
        organisation = get_organisation(db, for_update=True)
        account = _get_member_account(db, member_id, for_update=True)

        outstanding = round_money(account.released_money)
        if principal_paid > outstanding + EPSILON:
            raise ValidationError(
                f"Amount paid ({format_money(principal_paid)}) exceeds current released amount ({format_money(outstanding)})"
            )

        if profit_gained > 0:
            organisation.profit = round_money(organisation.profit) + profit_gained

        account.released_money = max(ZERO, outstanding - principal_paid)

        log = ReleasedMoneyLog(
            account_id=account.id,
            amount=principal_paid,
            profit=profit_gained,
            type=ReleasedMoneyType.SETTLEMENT,
        )
        db.add(log)

    db.refresh(log)
    db.refresh(account)
    logger.info(f"Settled {principal_paid} (profit {profit_gained}) for member {member_id}; outstanding {account.released_money}")
    return {"log": log, "account": account}


def get_member_released_logs(db: Session, member_id: UUID) -> List[ReleasedMoneyLog]:
    account = _get_member_account(db, member_id)
    return db.query(ReleasedMoneyLog).filter(
        ReleasedMoneyLog.account_id == account.id
    ).order_by(ReleasedMoneyLog.created_at.desc()).all()
