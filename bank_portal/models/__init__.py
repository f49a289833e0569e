from bank_portal.db.base import Base

# Import all models so Alembic can detect them
from bank_portal.models.member import Member, Account
from bank_portal.models.transaction import (
    LoanStatus,
    TransactionLog,
    Loan,
    LoanPayment,
)
from bank_portal.models.ledger import (
    ORGANISATION_ID,
    WithdrawalSource,
    ReleasedMoneyType,
    Organisation,
    OrgWithdrawal,
    ReleasedMoneyLog,
    AuditLog,
)

__all__ = [
    "Base",
    "Member",
    "Account",
    "LoanStatus",
    "TransactionLog",
    "Loan",
    "LoanPayment",
    "ORGANISATION_ID",
    "WithdrawalSource",
    "ReleasedMoneyType",
    "Organisation",
    "OrgWithdrawal",
    "ReleasedMoneyLog",
    "AuditLog",
]
