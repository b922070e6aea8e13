"""
Global test configuration and fixtures for the Vending Machine Info API

Every test gets its own SQLite file and upload directory through an app
built with create_app(). Environment defaults are set before the
application package is imported so the module-level app never touches
the real database.
"""

import os
import tempfile

_TEST_ROOT = tempfile.mkdtemp(prefix="vending-info-tests-")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = os.path.join(_TEST_ROOT, "uploads")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENVIRONMENT"] = "test"

import pytest
from fastapi.testclient import TestClient

from vending_info.core.limiter import limiter
from vending_info.main import create_app
from tests.utils.factories import (
    ADMIN_PASSWORD,
    OWNER_PASSWORD,
    MachineFactory,
    ProductFactory,
    UserFactory,
    auth_headers,
)


# ============================================================================
# Application Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def reset_limiter():
    """Clear rate limit counters so tests don't affect each other"""
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture(scope="function")
def app(tmp_path):
    """Application with a fresh database and upload directory"""
    application = create_app(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        upload_dir=str(tmp_path / "uploads"),
    )
    yield application
    application.state.engine.dispose()


@pytest.fixture(scope="function")
def client(app):
    """Test client on https so Secure cookies round-trip"""
    return TestClient(app, base_url="https://testserver")


@pytest.fixture(scope="function")
def db_session(app):
    """Session on the same database the app uses"""
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture(scope="function")
def storage(app):
    return app.state.file_storage


# ============================================================================
# Data Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def admin_user(db_session):
    return UserFactory.create_admin(db_session)


@pytest.fixture(scope="function")
def owner_user(db_session):
    return UserFactory.create(db_session, email="owner@example.com", name="Owner One")


@pytest.fixture(scope="function")
def other_owner(db_session):
    return UserFactory.create(db_session, email="other@example.com", name="Owner Two")


@pytest.fixture(scope="function")
def admin_headers(db_session, admin_user):
    return auth_headers(db_session, admin_user)


@pytest.fixture(scope="function")
def owner_headers(db_session, owner_user):
    return auth_headers(db_session, owner_user)


@pytest.fixture(scope="function")
def other_owner_headers(db_session, other_owner):
    return auth_headers(db_session, other_owner)


@pytest.fixture(scope="function")
def product(db_session):
    return ProductFactory.create(db_session, name="Cola", price=1.5)


@pytest.fixture(scope="function")
def machine(db_session, owner_user, product):
    return MachineFactory.create(
        db_session,
        owner_user,
        products=[product],
        payment_methods=["COIN", "CREDIT_CARD"],
    )


@pytest.fixture(scope="function")
def passwords():
    return {"admin": ADMIN_PASSWORD, "owner": OWNER_PASSWORD}


# ============================================================================
# Test Markers and Configuration
# ============================================================================

def pytest_collection_modifyitems(config, items):
    """Add markers based on file location"""
    for item in items:
        path = str(item.fspath)
        if "security" in path:
            item.add_marker(pytest.mark.security)
        if "integration" in path:
            item.add_marker(pytest.mark.integration)
        if "unit" in path:
            item.add_marker(pytest.mark.unit)
