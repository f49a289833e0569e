import pytest
from decimal import Decimal
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from bank_portal.db.base import Base, get_db
from bank_portal.main import app
from bank_portal.services.loan import create_loan
from bank_portal.services.member import create_member


@pytest.fixture
def db():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_member(db):
    """Create members with sequential account numbers."""
    counter = {"n": 0}

    def _make(initial_amount="0", development_fee="0", name="test member", **kwargs):
        counter["n"] += 1
        params = {
            "mobile": f"98765432{counter['n']:02d}",
            "account_number": f"ACC-{counter['n']:03d}",
        }
        params.update(kwargs)
        return create_member(
            db,
            name=name,
            initial_amount=Decimal(str(initial_amount)),
            development_fee=Decimal(str(development_fee)),
            **params,
        )

    return _make


@pytest.fixture
def make_loan(db):
    def _make(member, principal="6000", rate="1", months=6):
        return create_loan(
            db,
            member_id=member.id,
            principal_amount=Decimal(str(principal)),
            interest_rate=Decimal(str(rate)),
            time_period=months,
        )

    return _make
