"""
Pytest fixtures for driverpunch backend tests.

Provides the app with an in-memory database, a test client, accounts for
both roles and a directory driver with a known PIN.
"""

import pytest

from driverpunch import create_app
from driverpunch.extensions import db
from driverpunch.models import User, Driver
from driverpunch.models.auth import ROLE_ADMIN, ROLE_DRIVER
from driverpunch.services.auth_service import hash_password
from driverpunch.services.driver_service import hash_pin
from driverpunch.services import session_service


DRIVER_PIN = "1234"


@pytest.fixture(scope='session')
def app(tmp_path_factory):
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'ALLOW_ADMIN_SIGNUP': True,
        'FACE_MODEL_DIR': str(tmp_path_factory.mktemp("models")),
        'STREAM_KEEPALIVE_SECONDS': 1,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def driver(db_session):
    """Directory entry for DRV-001 with PIN 1234 and no enrolled face."""
    record = Driver(
        driver_id="DRV-001",
        name="Sam Carter",
        email="sam@example.com",
        pin_hash=hash_pin(DRIVER_PIN),
    )
    db_session.add(record)
    db_session.commit()
    return record


@pytest.fixture(scope='function')
def other_driver(db_session):
    record = Driver(driver_id="DRV-002", name="Alex Moreno", pin_hash=hash_pin("9876"))
    db_session.add(record)
    db_session.commit()
    return record


@pytest.fixture(scope='function')
def admin_user(db_session):
    user = User(
        email="admin@example.com",
        password_hash=hash_password("adminpass"),
        role=ROLE_ADMIN,
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def driver_user(db_session, driver):
    """Driver account linked to DRV-001."""
    user = User(
        email="sam@example.com",
        password_hash=hash_password("driverpass"),
        role=ROLE_DRIVER,
        driver_id=driver.driver_id,
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def other_driver_user(db_session, other_driver):
    user = User(
        email="alex@example.com",
        password_hash=hash_password("driverpass"),
        role=ROLE_DRIVER,
        driver_id=other_driver.driver_id,
    )
    db_session.add(user)
    db_session.commit()
    return user


def _bearer(user):
    _, token = session_service.create_session(user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope='function')
def admin_headers(admin_user):
    return _bearer(admin_user)


@pytest.fixture(scope='function')
def driver_headers(driver_user):
    return _bearer(driver_user)


@pytest.fixture(scope='function')
def other_driver_headers(other_driver_user):
    return _bearer(other_driver_user)
