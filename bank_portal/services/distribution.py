"""Waterfall allocation of a single lump-sum payment.

Pure computation: no session, no writes. ``smart_distribute`` persists the
result.
"""
from bank_portal.core.config import settings
from bank_portal.schemas.transaction import DistributionBreakdown
from bank_portal.services.money import ZERO, round_money
from decimal import Decimal
from typing import Optional


def allocate_payment(
    total,
    penalty_provided=None,
    loan=None,
    development_fee: Optional[Decimal] = None,
    base_deposit: Optional[Decimal] = None
) -> DistributionBreakdown:
    """
    Split ``total`` in strict priority order:

    1. penalty, up to ``penalty_provided``
    2. development fee, up to the fixed fee
    3. base deposit, up to the fixed monthly deposit
    4. if ``loan`` (an ACTIVE loan) is given: interest on its remaining
       balance, then principal up to the remaining balance
    5. whatever is left becomes extra deposit

    The six parts always add up to ``total``.
    """
    amount = round_money(total)
    remaining = amount
    fee_cap = round_money(settings.DEVELOPMENT_FEE if development_fee is None else development_fee)
    deposit_cap = round_money(settings.BASE_DEPOSIT if base_deposit is None else base_deposit)

    penalty = min(remaining, round_money(penalty_provided))
    remaining -= penalty

    fee = min(remaining, fee_cap)
    remaining -= fee

    deposit = min(remaining, deposit_cap)
    remaining -= deposit

    loan_interest = ZERO
    loan_principal = ZERO
    if loan is not None and remaining > 0:
        balance = round_money(loan.remaining_balance)
        interest_due = round_money(balance * Decimal(str(loan.interest_rate)))

        loan_interest = min(remaining, interest_due)
        remaining -= loan_interest

        if remaining > 0:
            loan_principal = min(remaining, balance)
            remaining -= loan_principal

    return DistributionBreakdown(
        penalty=penalty,
        development_fee=fee,
        base_deposit=deposit,
        loan_interest=loan_interest,
        loan_principal=loan_principal,
        extra_deposit=remaining,
        total=amount,
    )
