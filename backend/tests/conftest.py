"""
Pytest fixtures for GasFlow backend tests.

Provides test database setup, two retailer tenants, an admin, the seeded
cylinder catalog and a test client.
"""

import pytest

from gasflow import create_app
from gasflow.extensions import db
from gasflow.models import ROLE_ADMIN, ROLE_USER, CylinderType, User
from gasflow.services import customer_service, distributor_service, staff_service
from gasflow.services.auth_service import hash_password
from gasflow.services.catalog_service import seed_cylinder_types


PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'LOG_LEVEL': 'WARNING',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='session')
def password_hash():
    """Hash the shared test password once per session."""
    return hash_password(PASSWORD)


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
def catalog(db_session):
    """Seed the cylinder catalog and index it by (company, category, weight)."""
    seed_cylinder_types()
    return {
        (ct.company, ct.category, float(ct.weight_kg)): ct
        for ct in db_session.query(CylinderType).all()
    }


@pytest.fixture(scope='function')
def hp_domestic(catalog):
    return catalog[("HPCL", "Domestic", 14.2)]


@pytest.fixture(scope='function')
def hp_commercial(catalog):
    return catalog[("HPCL", "Commercial", 19.0)]


@pytest.fixture(scope='function')
def io_domestic(catalog):
    return catalog[("IOCL", "Domestic", 5.0)]


def _make_user(db_session, password_hash, *, name, email, role=ROLE_USER):
    user = User(
        name=name,
        email=email,
        password_hash=password_hash,
        role=role,
        is_active=True,
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def tenant_a(db_session, password_hash):
    """Retailer A (first tenant)."""
    return _make_user(db_session, password_hash, name="Gupta Gas Agency", email="gupta@example.com")


@pytest.fixture(scope='function')
def tenant_b(db_session, password_hash):
    """Retailer B (second tenant)."""
    return _make_user(db_session, password_hash, name="Sharma LPG", email="sharma@example.com")


@pytest.fixture(scope='function')
def admin_user(db_session, password_hash):
    return _make_user(
        db_session, password_hash, name="Administrator", email="admin@example.com", role=ROLE_ADMIN
    )


@pytest.fixture(scope='function')
def distributor_a(tenant_a):
    return distributor_service.create_distributor(
        tenant_id=tenant_a.id,
        payload={
            "distributor_name": "Metro Distributors",
            "contact_number": "9876543210",
            "address": "12 Ring Road, Pune",
        },
    )


@pytest.fixture(scope='function')
def staff_a(tenant_a):
    return staff_service.create_staff(
        tenant_id=tenant_a.id,
        payload={"staff_name": "Ravi Kumar", "mobile_number": "9123456780"},
    )


@pytest.fixture(scope='function')
def customer_a(tenant_a):
    return customer_service.create_customer(
        tenant_id=tenant_a.id,
        payload={"customer_name": "Hotel Sagar", "phone_number": "9988776655"},
    )


def login(client, email, password=PASSWORD):
    """Log in through the API and return the bearer token."""
    response = client.post('/api/auth/login', json={"email": email, "password": password})
    assert response.status_code == 200, response.get_json()
    return response.get_json()["data"]["token"]


def auth_headers(token):
    """Generate authorization headers for API requests."""
    return {'Authorization': f'Bearer {token}'}
