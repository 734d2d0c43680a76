"""
Pytest fixtures for foodtrack backend tests.

Provides an in-memory database, a test client and two registered tenants
(organizations with live bearer tokens).
"""

from collections import namedtuple

import pytest
from foodtrack import create_app
from foodtrack.extensions import db
from foodtrack.services.auth_service import register_organization


TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    'JWT_SECRET': 'test-signing-secret',
    'VERIFY_TOKEN_SIGNATURE': False,
    'LOG_LEVEL': 'WARNING',
}

PASSWORD = "Password123!"

Tenant = namedtuple("Tenant", ["org_id", "email", "token", "headers"])


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TEST_CONFIG)

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


def _register(name: str, email: str) -> Tenant:
    org, token = register_organization({"name": name, "email": email, "password": PASSWORD})
    return Tenant(org_id=org.id, email=email, token=token, headers=auth_headers(token))


@pytest.fixture(scope='function')
def org_a(db_session):
    """Register Organization A (first tenant)."""
    return _register("Org A - Acme Foods", "ops@acme.test")


@pytest.fixture(scope='function')
def org_b(db_session):
    """Register Organization B (second tenant)."""
    return _register("Org B - Beta Bakery", "ops@beta.test")


@pytest.fixture(scope='function')
def ingredient_factory(client):
    """POST an ingredient as the given tenant and return its JSON."""
    def _create(tenant: Tenant, lotcode: str = "LOT-1", name: str = "Flour", date: str = "2025-03-01"):
        resp = client.post(
            '/api/ingredients',
            json={'lotcode': lotcode, 'name': name, 'date': date},
            headers=tenant.headers,
        )
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()
    return _create


@pytest.fixture(scope='function')
def employee_factory(client):
    """POST an employee as the given tenant and return its JSON."""
    def _create(tenant: Tenant, name: str = "Jo Baker", role: str = "Baker"):
        resp = client.post(
            '/api/employees',
            json={'name': name, 'role': role},
            headers=tenant.headers,
        )
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()
    return _create


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}
