from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload
from bank_portal.core.errors import ValidationError, NotFoundError, ConflictError
from bank_portal.db.base import atomic
from bank_portal.models.member import Member, Account
from bank_portal.services.money import parse_amount
from bank_portal.services.organisation import get_organisation
from uuid import UUID
from typing import List, Optional
import logging
import re

logger = logging.getLogger(__name__)

MOBILE_PATTERN = re.compile(r"^[0-9]{10,15}$")


def capitalize_words(value: Optional[str]) -> Optional[str]:
    """Upper-case the first letter of every word ("ram kumar" -> "Ram Kumar")."""
    if value is None:
        return None
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), value)


def _validate_mobile(mobile: Optional[str]) -> str:
    mobile = (mobile or "").strip()
    if not MOBILE_PATTERN.match(mobile):
        raise ValidationError("Mobile number must contain 10 to 15 digits")
    return mobile


def create_member(
    db: Session,
    mobile: str,
    account_number: str,
    name: str = None,
    fathers_name: str = None,
    address: str = None,
    initial_amount=None,
    development_fee=None
) -> Member:
    """
    Onboard a member together with their account.

    The initial amount opens the savings balance; the development fee goes to
    the organisation fee pool. Both writes happen in one transaction.
    """
    mobile = _validate_mobile(mobile)
    account_number = (account_number or "").strip()
    if not account_number:
        raise ValidationError("account_number is required")
    opening_balance = parse_amount(initial_amount, "initial_amount")
    fee = parse_amount(development_fee, "development_fee")

    with atomic(db):
        organisation = get_organisation(db, for_update=True)

        existing = db.query(Account).filter(Account.account_number == account_number).first()
        if existing:
            raise ConflictError("Account number already exists")

        member = Member(
            name=capitalize_words(name),
            fathers_name=capitalize_words(fathers_name),
            mobile=mobile,
            address=address,
        )
        db.add(member)
        try:
            db.flush()
            account = Account(
                member_id=member.id,
                account_number=account_number,
                total_amount=opening_balance,
            )
            db.add(account)
            db.flush()
        except IntegrityError as e:
            raise ConflictError("Account number already exists") from e

        if fee > 0:
            organisation.amount = organisation.amount + fee

    db.refresh(member)
    logger.info(f"Created member {member.id} with account {account_number} (opening balance {opening_balance}, development fee {fee})")
    return member


def get_member(db: Session, member_id: UUID) -> Member:
    member = db.query(Member).options(joinedload(Member.account)).filter(Member.id == member_id).first()
    if not member:
        raise NotFoundError("Member not found")
    return member


def list_members(db: Session) -> List[Member]:
    """All members, newest first."""
    return db.query(Member).options(joinedload(Member.account)).order_by(Member.created_at.desc()).all()


def update_member(
    db: Session,
    member_id: UUID,
    name: str = None,
    fathers_name: str = None,
    mobile: str = None,
    address: str = None
) -> Member:
    """Update member details. Only provided fields change; balances are never touched here."""
    with atomic(db):
        member = db.query(Member).filter(Member.id == member_id).first()
        if not member:
            raise NotFoundError("Member not found")

        if name is not None:
            member.name = capitalize_words(name)
        if fathers_name is not None:
            member.fathers_name = capitalize_words(fathers_name)
        if mobile is not None:
            member.mobile = _validate_mobile(mobile)
        if address is not None:
            member.address = address

    db.refresh(member)
    return member
