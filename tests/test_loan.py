import pytest
from decimal import Decimal

from bank_portal.core.errors import (
    ConflictError,
    InsufficientFundsError,
    NotFoundError,
    ValidationError,
)
from bank_portal.models.transaction import Loan, LoanPayment, LoanStatus
from bank_portal.services.liquidity import get_loanable_amount
from bank_portal.services.loan import (
    create_loan,
    delete_loan_payment,
    get_all_loans,
    get_loan,
    get_member_loan_payments,
    pay_loan_emi,
)
from bank_portal.services.organisation import get_organisation
import uuid


class TestCreateLoan:
    def test_emi_is_principal_slice(self, db, make_member, make_loan):
        member = make_member(initial_amount="10000")

        loan = make_loan(member, principal="6000", rate="1", months=6)

        assert loan.interest_rate == Decimal("0.01")
        assert loan.emi_amount == Decimal("1000.00")
        assert loan.remaining_balance == Decimal("6000.00")
        assert loan.total_interest_paid == Decimal("0.00")
        assert loan.status == LoanStatus.ACTIVE
        assert loan.completed_at is None

    def test_emi_rounds_half_up(self, db, make_member, make_loan):
        member = make_member(initial_amount="10000")
        loan = make_loan(member, principal="1000", rate="1.5", months=3)
        assert loan.emi_amount == Decimal("333.33")
        assert loan.interest_rate == Decimal("0.015")

    def test_more_than_available_funds(self, db, make_member, make_loan):
        member = make_member(initial_amount="5000")

        with pytest.raises(InsufficientFundsError) as exc:
            make_loan(member, principal="6000")

        assert "5,000.00" in exc.value.message
        assert "6,000.00" in exc.value.message
        assert db.query(Loan).count() == 0

    def test_second_active_loan_conflicts(self, db, make_member, make_loan):
        member = make_member(initial_amount="10000")
        make_loan(member, principal="1000")

        with pytest.raises(ConflictError):
            make_loan(member, principal="1000")

    def test_conflict_checked_before_funds(self, db, make_member, make_loan):
        member = make_member(initial_amount="1000")
        make_loan(member, principal="1000")

        with pytest.raises(ConflictError):
            make_loan(member, principal="999999")

    def test_unknown_member(self, db):
        with pytest.raises(NotFoundError):
            create_loan(db, uuid.uuid4(), Decimal("100"), Decimal("1"), 1)

    @pytest.mark.parametrize("principal,rate,months", [
        (None, "1", 6),
        ("0", "1", 6),
        ("-5", "1", 6),
        ("100", "-1", 6),
        ("100", "1", 0),
        ("100", None, 6),
    ])
    def test_invalid_terms(self, db, make_member, principal, rate, months):
        member = make_member(initial_amount="10000")
        with pytest.raises(ValidationError):
            create_loan(db, member.id, principal, rate, months)

    def test_zero_rate_allowed(self, db, make_member, make_loan):
        member = make_member(initial_amount="10000")
        loan = make_loan(member, principal="1200", rate="0", months=12)
        assert loan.interest_rate == Decimal("0")


class TestPayLoan:
    def test_interest_on_balance_before_principal(self, db, make_member, make_loan):
        member = make_member(initial_amount="10000")
        loan = make_loan(member, principal="6000", rate="1", months=6)

        result = pay_loan_emi(db, loan.id, principal_paid=Decimal("1000"), penalty=Decimal("0"))

        payment = result["payment"]
        assert payment.interest_paid == Decimal("60.00")
        assert payment.principal_paid == Decimal("1000.00")
        assert payment.extra_principal == Decimal("0.00")
        assert payment.total_paid == Decimal("1060.00")
        assert payment.remaining_after == Decimal("5000.00")
        assert result["loan"].remaining_balance == Decimal("5000.00")
        assert result["loan"].total_interest_paid == Decimal("60.00")
        assert get_organisation(db).profit == Decimal("60.00")

    def test_penalty_goes_to_penalty_fund(self, db, make_member, make_loan):
        member = make_member(initial_amount="10000")
        loan = make_loan(member)

        pay_loan_emi(db, loan.id, principal_paid="1000", penalty="25")

        assert get_organisation(db).penalty == Decimal("25.00")

    def test_extra_principal_recorded(self, db, make_member, make_loan):
        member = make_member(initial_amount="10000")
        loan = make_loan(member, principal="6000", months=6)

        payment = pay_loan_emi(db, loan.id, principal_paid="2500")["payment"]

        assert payment.extra_principal == Decimal("1500.00")

    def test_overpayment_is_capped_and_completes(self, db, make_member, make_loan):
        member = make_member(initial_amount="10000")
        loan = make_loan(member, principal="6000")

        result = pay_loan_emi(db, loan.id, principal_paid="9000")

        assert result["payment"].principal_paid == Decimal("6000.00")
        assert result["payment"].remaining_after == Decimal("0.00")
        assert result["loan"].status == LoanStatus.COMPLETED
        assert result["loan"].completed_at is not None

    def test_completed_loan_rejects_payment(self, db, make_member, make_loan):
        member = make_member(initial_amount="10000")
        loan = make_loan(member, principal="1000", months=1)
        pay_loan_emi(db, loan.id, principal_paid="1000")

        with pytest.raises(ValidationError):
            pay_loan_emi(db, loan.id, principal_paid="10")

    def test_unknown_loan(self, db):
        with pytest.raises(NotFoundError):
            pay_loan_emi(db, uuid.uuid4(), principal_paid="10")

    def test_missing_principal(self, db, make_member, make_loan):
        member = make_member(initial_amount="10000")
        loan = make_loan(member)
        with pytest.raises(ValidationError):
            pay_loan_emi(db, loan.id, principal_paid=None)

    def test_new_loan_allowed_after_completion(self, db, make_member, make_loan):
        member = make_member(initial_amount="10000")
        loan = make_loan(member, principal="1000", months=1)
        pay_loan_emi(db, loan.id, principal_paid="1000")

        second = make_loan(member, principal="500", months=1)
        assert second.status == LoanStatus.ACTIVE


class TestDeleteLoanPayment:
    def test_reversal_restores_loan_and_pools(self, db, make_member, make_loan):
        member = make_member(initial_amount="10000")
        loan = make_loan(member, principal="6000")
        payment = pay_loan_emi(db, loan.id, principal_paid="1000", penalty="25")["payment"]

        delete_loan_payment(db, payment.id)

        loan = get_loan(db, loan.id)
        organisation = get_organisation(db)
        assert loan.remaining_balance == Decimal("6000.00")
        assert loan.total_interest_paid == Decimal("0.00")
        assert organisation.profit == Decimal("0.00")
        assert organisation.penalty == Decimal("0.00")
        assert db.query(LoanPayment).count() == 0

    def test_reversing_final_payment_reactivates_loan(self, db, make_member, make_loan):
        member = make_member(initial_amount="10000")
        loan = make_loan(member, principal="1000", months=1)
        payment = pay_loan_emi(db, loan.id, principal_paid="1000")["payment"]

        delete_loan_payment(db, payment.id)

        loan = get_loan(db, loan.id)
        assert loan.status == LoanStatus.ACTIVE
        assert loan.completed_at is None
        assert loan.remaining_balance == Decimal("1000.00")

    def test_unknown_payment(self, db):
        with pytest.raises(NotFoundError):
            delete_loan_payment(db, uuid.uuid4())

    def test_reversal_refused_when_member_has_newer_active_loan(self, db, make_member, make_loan):
        member = make_member(initial_amount="20000")
        first = make_loan(member, principal="1000", months=1)
        payment = pay_loan_emi(db, first.id, principal_paid="1000")["payment"]
        second = make_loan(member, principal="2000")

        with pytest.raises(ConflictError):
            delete_loan_payment(db, payment.id)

        active = db.query(Loan).filter(Loan.member_id == member.id, Loan.status == LoanStatus.ACTIVE).all()
        assert [loan.id for loan in active] == [second.id]
        assert get_loan(db, first.id).status == LoanStatus.COMPLETED
        assert db.query(LoanPayment).filter(LoanPayment.id == payment.id).count() == 1
        assert get_organisation(db).profit == Decimal("10.00")


class TestLoanQueries:
    def test_loanable_amount_counts_active_loans_only(self, db, make_member, make_loan):
        first = make_member(initial_amount="10000")
        second = make_member(initial_amount="5000")
        active = make_loan(first, principal="3000")
        done = make_loan(second, principal="1000", months=1)
        pay_loan_emi(db, active.id, principal_paid="1000")
        pay_loan_emi(db, done.id, principal_paid="1000")

        assert get_loanable_amount(db) == {
            "total_member_funds": Decimal("15000.00"),
            "total_loaned": Decimal("2000.00"),
            "available_funds": Decimal("13000.00"),
        }

    def test_filter_by_status(self, db, make_member, make_loan):
        first = make_member(initial_amount="10000")
        second = make_member(initial_amount="10000")
        make_loan(first)
        done = make_loan(second, principal="1000", months=1)
        pay_loan_emi(db, done.id, principal_paid="1000")

        assert get_all_loans(db)["pagination"]["total"] == 2
        completed = get_all_loans(db, status="completed")
        assert [loan.id for loan in completed["data"]] == [done.id]

        with pytest.raises(ValidationError):
            get_all_loans(db, status="DEFAULTED")

    def test_member_payment_history(self, db, make_member, make_loan):
        member = make_member(initial_amount="10000")
        loan = make_loan(member)
        pay_loan_emi(db, loan.id, principal_paid="1000")
        pay_loan_emi(db, loan.id, principal_paid="1000")

        payments = get_member_loan_payments(db, member.id)
        assert len(payments) == 2
        assert {p.loan_id for p in payments} == {loan.id}
