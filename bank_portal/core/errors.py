"""Ledger error taxonomy.

Services raise these instead of ``ValueError`` so callers can branch on the
kind of failure; the API layer turns them into HTTP responses.
"""


class LedgerError(Exception):
    """Base class for every failure reported by the ledger services."""
    kind = "unexpected"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    """Missing or malformed input. Nothing was written."""
    kind = "validation"
    status_code = 400


class NotFoundError(LedgerError):
    """A referenced member, account, loan, payment or transaction is absent."""
    kind = "not_found"
    status_code = 404


class ConflictError(LedgerError):
    """Duplicate active loan or duplicate account number."""
    kind = "conflict"
    status_code = 409


class InsufficientFundsError(LedgerError):
    """Loanable funds or an organisation pool cannot cover the request."""
    kind = "insufficient_funds"
    status_code = 422


class InsufficientLiquidityError(LedgerError):
    """Cash in hand cannot cover a cash advance."""
    kind = "insufficient_liquidity"
    status_code = 422


class UnexpectedError(LedgerError):
    """Storage failure mapped from the persistence layer."""
    kind = "unexpected"
    status_code = 500
