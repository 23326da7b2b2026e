"""
Shared fixtures: an in-memory app, its session, a test client and sample
accounts.
"""
import pytest
from datetime import datetime, timedelta

from fluzio import create_app
from fluzio.extensions import db
from fluzio.models import Account, AccountRole


@pytest.fixture
def app():
    """Create test application."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def db_session(app):
    return db.session


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_headers():
    return {'X-Admin-Id': 'admin-1'}


def _add(account):
    db.session.add(account)
    db.session.commit()
    return account


@pytest.fixture
def new_business(db_session):
    """Fresh business at 1.1."""
    return _add(Account(id='biz-new', name='New Bakery', role=AccountRole.BUSINESS.value))


@pytest.fixture
def ready_business(db_session):
    """Operator at sub-level 9, ready to request promotion."""
    return _add(Account(
        id='biz-ready',
        name='Corner Cafe',
        role=AccountRole.BUSINESS.value,
        level=3,
        sub_level=9,
        xp=440,
        tier='GOLD',
    ))


@pytest.fixture
def pending_business(db_session):
    """Builder with an upgrade request waiting for an admin."""
    return _add(Account(
        id='biz-pending',
        name='Bike Repair',
        role=AccountRole.BUSINESS.value,
        level=2,
        sub_level=9,
        xp=450,
        tier='SILVER',
        upgrade_requested=True,
        upgrade_requested_at=datetime.utcnow() - timedelta(days=2),
    ))


@pytest.fixture
def explorer_customer(db_session):
    """Customer with no activity yet."""
    return _add(Account(id='cust-explorer', name='Ana', role=AccountRole.CUSTOMER.value))


@pytest.fixture
def insider_customer(db_session):
    """Customer meeting the Insider requirements."""
    return _add(Account(
        id='cust-insider',
        name='Ben',
        role=AccountRole.CUSTOMER.value,
        lifetime_points=800,
        missions_completed=40,
        rewards_redeemed=12,
        created_at=datetime(2025, 1, 1),
    ))
