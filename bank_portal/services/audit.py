from sqlalchemy import func
from sqlalchemy.orm import Session
from bank_portal.core.errors import ValidationError
from bank_portal.db.base import atomic
from bank_portal.models.member import Member, Account
from bank_portal.models.ledger import AuditLog
from bank_portal.services.money import ZERO, round_money
from bank_portal.services.organisation import get_organisation
from typing import List
import logging

logger = logging.getLogger(__name__)


def run_audit(db: Session) -> AuditLog:
    """
    Distribute accumulated profit equally to every member.

    Each account gets the same share regardless of balance or loan status;
    profit is reset to zero. All accounts are updated in one statement inside
    the same transaction as the reset and the log.
    """
    with atomic(db):
        organisation = get_organisation(db, for_update=True)

        total_profit = round_money(organisation.profit)
        if total_profit <= 0:
            raise ValidationError("No profit available to distribute")

        member_count = db.query(func.count(Member.id)).scalar() or 0
        if member_count == 0:
            raise ValidationError("No members found to distribute profit to")

        per_member_share = round_money(total_profit / member_count)

        db.query(Account).update(
            {Account.total_amount: Account.total_amount + per_member_share},
            synchronize_session=False,
        )
        organisation.profit = ZERO

        audit_log = AuditLog(
            total_profit=total_profit,
            member_count=member_count,
            per_member_share=per_member_share,
        )
        db.add(audit_log)

    db.refresh(audit_log)
    logger.info(f"Audit {audit_log.id}: distributed {total_profit} to {member_count} members ({per_member_share} each)")
    return audit_log


def get_audit_history(db: Session) -> List[AuditLog]:
    return db.query(AuditLog).order_by(AuditLog.created_at.desc()).all()
