import pytest
from decimal import Decimal

from bank_portal.core.errors import ConflictError, NotFoundError, ValidationError
from bank_portal.models.member import Account, Member
from bank_portal.models.transaction import TransactionLog
from bank_portal.services.member import (
    capitalize_words,
    create_member,
    get_member,
    list_members,
    update_member,
)
from bank_portal.services.organisation import get_organisation
import uuid


class TestCapitalizeWords:
    def test_each_word_is_capitalized(self):
        assert capitalize_words("ram kumar singh") == "Ram Kumar Singh"

    def test_none_passes_through(self):
        assert capitalize_words(None) is None

    def test_existing_capitals_are_kept(self):
        assert capitalize_words("mcDonald") == "McDonald"


class TestCreateMember:
    def test_opening_balance_and_fee(self, db):
        member = create_member(
            db,
            mobile="9876543210",
            account_number="ACC-100",
            name="ravi kumar",
            initial_amount=Decimal("1000"),
            development_fee=Decimal("50"),
        )

        assert member.name == "Ravi Kumar"
        assert member.account.account_number == "ACC-100"
        assert member.account.total_amount == Decimal("1000.00")
        assert member.account.released_money == Decimal("0.00")
        assert get_organisation(db).amount == Decimal("50.00")

    def test_opening_balance_writes_no_deposit_log(self, db):
        create_member(db, mobile="9876543210", account_number="ACC-100", initial_amount=Decimal("1000"))
        assert db.query(TransactionLog).count() == 0

    def test_amounts_default_to_zero(self, db):
        member = create_member(db, mobile="9876543210", account_number="ACC-100")
        assert member.account.total_amount == Decimal("0.00")
        assert get_organisation(db).amount == Decimal("0.00")

    def test_duplicate_account_number_conflicts(self, db, make_member):
        make_member(account_number="ACC-DUP", development_fee="20")

        with pytest.raises(ConflictError):
            create_member(db, mobile="9876543299", account_number="ACC-DUP", development_fee=Decimal("20"))

        assert db.query(Member).count() == 1
        assert db.query(Account).count() == 1
        assert get_organisation(db).amount == Decimal("20.00")

    def test_account_number_required(self, db):
        with pytest.raises(ValidationError):
            create_member(db, mobile="9876543210", account_number="  ")

    @pytest.mark.parametrize("mobile", ["12345", "98765abc10", "", None])
    def test_invalid_mobile(self, db, mobile):
        with pytest.raises(ValidationError):
            create_member(db, mobile=mobile, account_number="ACC-100")

    def test_negative_initial_amount_rejected(self, db):
        with pytest.raises(ValidationError):
            create_member(db, mobile="9876543210", account_number="ACC-100", initial_amount=Decimal("-1"))
        assert db.query(Member).count() == 0


class TestReadAndUpdate:
    def test_get_member_not_found(self, db):
        with pytest.raises(NotFoundError):
            get_member(db, uuid.uuid4())

    def test_list_members(self, db, make_member):
        make_member(name="first")
        make_member(name="second")
        assert {m.name for m in list_members(db)} == {"First", "Second"}

    def test_update_only_given_fields(self, db, make_member):
        member = make_member(name="old name", initial_amount="300")

        updated = update_member(db, member.id, fathers_name="new father", mobile="9123456789")

        assert updated.name == "Old Name"
        assert updated.fathers_name == "New Father"
        assert updated.mobile == "9123456789"
        assert updated.account.total_amount == Decimal("300.00")

    def test_update_missing_member(self, db):
        with pytest.raises(NotFoundError):
            update_member(db, uuid.uuid4(), name="x")
