import pytest
from decimal import Decimal

from bank_portal.core.errors import ValidationError
from bank_portal.models.member import Account
from bank_portal.services.audit import get_audit_history, run_audit
from bank_portal.services.organisation import get_organisation
from bank_portal.services.released_money import settle_cash, release_cash


def add_profit(db, amount):
    organisation = get_organisation(db)
    organisation.profit = Decimal(amount)
    db.commit()


class TestRunAudit:
    def test_equal_share_for_every_member(self, db, make_member, make_loan):
        first = make_member(initial_amount="1000")
        second = make_member(initial_amount="50")
        third = make_member(initial_amount="0")
        make_loan(first, principal="500")
        add_profit(db, "90")

        audit_log = run_audit(db)

        assert audit_log.total_profit == Decimal("90.00")
        assert audit_log.member_count == 3
        assert audit_log.per_member_share == Decimal("30.00")
        balances = sorted(a.total_amount for a in db.query(Account).all())
        assert balances == [Decimal("30.00"), Decimal("80.00"), Decimal("1030.00")]
        assert get_organisation(db).profit == Decimal("0.00")

    def test_share_is_rounded_to_cents(self, db, make_member):
        for _ in range(3):
            make_member()
        add_profit(db, "100")

        audit_log = run_audit(db)

        assert audit_log.per_member_share == Decimal("33.33")
        assert get_organisation(db).profit == Decimal("0.00")

    def test_profit_from_settlement_is_distributed(self, db, make_member):
        member = make_member(initial_amount="1000")
        release_cash(db, member.id, Decimal("200"))
        settle_cash(db, member.id, Decimal("200"), Decimal("40"))

        run_audit(db)

        assert member.account.total_amount == Decimal("1040.00")

    def test_no_profit(self, db, make_member):
        make_member()
        with pytest.raises(ValidationError):
            run_audit(db)
        assert get_audit_history(db) == []

    def test_no_members(self, db):
        add_profit(db, "10")
        with pytest.raises(ValidationError):
            run_audit(db)
        assert get_organisation(db).profit == Decimal("10.00")

    def test_history(self, db, make_member):
        make_member()
        add_profit(db, "10")
        run_audit(db)
        add_profit(db, "20")
        run_audit(db)

        history = get_audit_history(db)
        assert sorted(a.total_profit for a in history) == [Decimal("10.00"), Decimal("20.00")]
