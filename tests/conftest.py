"""
Shared fixtures: a fresh in-memory SQLite database per test, a session on
it, and a TestClient whose requests use the same database.
"""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from meatmaster.core.database import Base
from meatmaster.core.dependencies import get_db
from meatmaster.main import app
from meatmaster.models import LedgerEntryType, UnitType, UserRole
from meatmaster.services.auth_service import issue_token
from meatmaster.services.customer_service import create_customer
from meatmaster.services.ledger_service import LedgerService
from meatmaster.services.product_service import create_product
from meatmaster.services.user_service import create_user
import meatmaster.models  # noqa: F401


# -------------------------------------------------------------------------
# Database
# -------------------------------------------------------------------------

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def other_session(session_factory):
    """A second session on the same database, as a concurrent request would use."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def locked_reads(db):
    """Entity names read through `db` with SELECT ... FOR UPDATE, in order."""
    locked = []

    def _record(state):
        if not state.is_select or state.bind_mapper is None:
            return
        sql = str(state.statement.compile(dialect=postgresql.dialect()))
        if "FOR UPDATE" in sql:
            locked.append(state.bind_mapper.class_.__name__)

    event.listen(db, "do_orm_execute", _record)
    yield locked
    event.remove(db, "do_orm_execute", _record)


# -------------------------------------------------------------------------
# Domain data
# -------------------------------------------------------------------------

@pytest.fixture
def customer(db):
    return create_customer(db, name="Al Noor Restaurant", phone="0501234567", address="Deira, Dubai")


@pytest.fixture
def product(db):
    return create_product(db, name="Beef Ribeye", unit_type=UnitType.Kg, current_stock=Decimal("10"))


@pytest.fixture
def ledger(db):
    return LedgerService(db)


@pytest.fixture
def post(ledger):
    """Shortcut: post(customer_id, "credit", 100)."""
    def _post(customer_id, entry_type, amount, description="entry"):
        return ledger.create_entry(customer_id, LedgerEntryType(entry_type), amount, description)
    return _post


# -------------------------------------------------------------------------
# HTTP
# -------------------------------------------------------------------------

@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _auth_headers(session_factory, email, role):
    session = session_factory()
    try:
        user = create_user(session, email=email, password="secret123", name=role.value.title(), role=role)
        return {"Authorization": f"Bearer {issue_token(user)}"}
    finally:
        session.close()


@pytest.fixture
def admin_headers(session_factory):
    return _auth_headers(session_factory, "admin@meatmaster.ae", UserRole.admin)


@pytest.fixture
def staff_headers(session_factory):
    return _auth_headers(session_factory, "staff@meatmaster.ae", UserRole.staff)
