from sqlalchemy.orm import Session
from bank_portal.core.config import settings
from bank_portal.models.ledger import Organisation, ORGANISATION_ID
from decimal import Decimal
import logging

logger = logging.getLogger(__name__)


def get_organisation(db: Session, for_update: bool = False) -> Organisation:
    """Return the organisation aggregate, creating it on first access.

    With ``for_update`` the row is locked for the rest of the surrounding
    transaction. Every ledger mutation takes this lock first, so money
    movements are serialised on the organisation row.
    """
    query = db.query(Organisation).filter(Organisation.id == ORGANISATION_ID)
    if for_update:
        query = query.with_for_update()
    organisation = query.first()

    if not organisation:
        organisation = Organisation(
            id=ORGANISATION_ID,
            name=settings.ORGANISATION_NAME,
            amount=Decimal("0.00"),
            penalty=Decimal("0.00"),
            profit=Decimal("0.00"),
        )
        db.add(organisation)
        db.flush()
        logger.info(f"Created organisation '{organisation.name}'")

    return organisation
