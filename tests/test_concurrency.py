"""Two sessions on a file-backed SQLite database built like the application's."""
import pytest
from decimal import Decimal
from sqlalchemy.orm import sessionmaker

from bank_portal.core.errors import InsufficientFundsError, InsufficientLiquidityError, UnexpectedError
from bank_portal.db.base import Base, build_engine
from bank_portal.models.member import Account
from bank_portal.models.transaction import Loan
from bank_portal.services.liquidity import calculate_cash_in_hand, get_loanable_amount
from bank_portal.services.loan import create_loan
from bank_portal.services.member import create_member
from bank_portal.services.organisation import get_organisation
from bank_portal.services.released_money import release_cash


@pytest.fixture
def session_factory(tmp_path):
    # short busy timeout so a blocked writer fails fast instead of waiting
    engine = build_engine(f"sqlite:///{tmp_path / 'ledger.db'}", connect_args={"timeout": 0.2})
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def two_members(session_factory):
    """One saver with 1000 and one member with nothing."""
    db = session_factory()
    try:
        saver = create_member(db, mobile="9000000001", account_number="ACC-001", initial_amount=Decimal("1000"))
        other = create_member(db, mobile="9000000002", account_number="ACC-002")
        return saver.id, other.id
    finally:
        db.close()


class TestSerialisedLoans:
    def test_open_unit_of_work_blocks_second_loan(self, session_factory, two_members):
        saver_id, other_id = two_members
        first, second = session_factory(), session_factory()
        try:
            # first session has read the organisation and the loanable funds
            get_organisation(first, for_update=True)
            assert get_loanable_amount(first)["available_funds"] == Decimal("1000.00")

            with pytest.raises(UnexpectedError):
                create_loan(second, other_id, Decimal("1000"), Decimal("1"), 1)
            first.rollback()
            assert second.query(Loan).count() == 0
            second.commit()

            create_loan(first, saver_id, Decimal("1000"), Decimal("1"), 1)
            first.commit()  # ends the read transaction opened by the refresh
            with pytest.raises(InsufficientFundsError):
                create_loan(second, other_id, Decimal("1000"), Decimal("1"), 1)

            funds = get_loanable_amount(second)
            assert funds["total_loaned"] == Decimal("1000.00")
            assert funds["available_funds"] == Decimal("0.00")
        finally:
            first.close()
            second.close()


class TestSerialisedReleases:
    def test_open_unit_of_work_blocks_second_release(self, session_factory, two_members):
        saver_id, other_id = two_members
        first, second = session_factory(), session_factory()
        try:
            organisation = get_organisation(first, for_update=True)
            assert calculate_cash_in_hand(first, organisation) == Decimal("1000.00")

            with pytest.raises(UnexpectedError):
                release_cash(second, other_id, Decimal("700"))
            first.rollback()

            release_cash(first, saver_id, Decimal("700"))
            first.commit()
            with pytest.raises(InsufficientLiquidityError):
                release_cash(second, other_id, Decimal("700"))

            released = sorted(a.released_money for a in second.query(Account).all())
            assert released == [Decimal("0.00"), Decimal("700.00")]
        finally:
            first.close()
            second.close()
