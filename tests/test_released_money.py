import pytest
from decimal import Decimal

from bank_portal.core.errors import InsufficientLiquidityError, NotFoundError, ValidationError
from bank_portal.models.ledger import ReleasedMoneyLog, ReleasedMoneyType
from bank_portal.services.liquidity import calculate_cash_in_hand
from bank_portal.services.loan import pay_loan_emi
from bank_portal.services.organisation import get_organisation
from bank_portal.services.released_money import get_member_released_logs, release_cash, settle_cash
import uuid


class TestCashInHand:
    def test_pools_plus_loanable_minus_released(self, db, make_member, make_loan):
        member = make_member(initial_amount="10000", development_fee="100")
        loan = make_loan(member, principal="4000")
        pay_loan_emi(db, loan.id, principal_paid="1000", penalty="10")
        release_cash(db, member.id, Decimal("500"))

        # fees 100 + penalty 10 + profit 40 + loanable (10000 - 3000) - released 500
        assert calculate_cash_in_hand(db, get_organisation(db)) == Decimal("6650.00")


class TestReleaseCash:
    def test_release_increases_outstanding(self, db, make_member):
        member = make_member(initial_amount="1000")

        result = release_cash(db, member.id, Decimal("400"))

        assert result["account"].released_money == Decimal("400.00")
        assert result["log"].type == ReleasedMoneyType.RELEASE
        assert result["log"].amount == Decimal("400.00")
        assert result["log"].profit is None

    def test_release_beyond_cash_in_hand(self, db, make_member):
        member = make_member(initial_amount="1000")
        release_cash(db, member.id, Decimal("700"))

        with pytest.raises(InsufficientLiquidityError) as exc:
            release_cash(db, member.id, Decimal("301"))

        assert "300.00" in exc.value.message
        assert member.account.released_money == Decimal("700.00")
        assert db.query(ReleasedMoneyLog).count() == 1

    @pytest.mark.parametrize("amount", [None, Decimal("0"), Decimal("-5")])
    def test_invalid_amount(self, db, make_member, amount):
        member = make_member(initial_amount="1000")
        with pytest.raises(ValidationError):
            release_cash(db, member.id, amount)

    def test_unknown_member(self, db):
        with pytest.raises(NotFoundError):
            release_cash(db, uuid.uuid4(), Decimal("10"))


class TestSettleCash:
    def test_partial_settlement_with_profit(self, db, make_member):
        member = make_member(initial_amount="1000")
        release_cash(db, member.id, Decimal("500"))

        result = settle_cash(db, member.id, Decimal("200"), Decimal("15"))

        assert result["account"].released_money == Decimal("300.00")
        assert result["log"].type == ReleasedMoneyType.SETTLEMENT
        assert result["log"].profit == Decimal("15.00")
        assert get_organisation(db).profit == Decimal("15.00")

    def test_full_settlement_within_a_cent(self, db, make_member):
        member = make_member(initial_amount="1000")
        release_cash(db, member.id, Decimal("500"))

        result = settle_cash(db, member.id, Decimal("500.01"))

        assert result["account"].released_money == Decimal("0.00")

    def test_over_settlement_rejected(self, db, make_member):
        member = make_member(initial_amount="1000")
        release_cash(db, member.id, Decimal("500"))

        with pytest.raises(ValidationError):
            settle_cash(db, member.id, Decimal("600"))

        assert member.account.released_money == Decimal("500.00")

    def test_logs_newest_first(self, db, make_member):
        member = make_member(initial_amount="1000")
        release_cash(db, member.id, Decimal("500"))
        settle_cash(db, member.id, Decimal("500"))

        logs = get_member_released_logs(db, member.id)
        assert {log.type for log in logs} == {ReleasedMoneyType.RELEASE, ReleasedMoneyType.SETTLEMENT}
        assert logs[0].created_at >= logs[1].created_at
