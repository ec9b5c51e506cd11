"""
Pytest fixtures for AgroTrade backend tests.

Provides an application on an in-memory database, one staff user per
role/branch, a produce lot factory, and token helpers.
"""

import pytest

from agrotrade import create_app
from agrotrade.config import TestingConfig
from agrotrade.extensions import db
from agrotrade.models import Produce
from agrotrade.services import auth_service, token_service
from agrotrade.units import tonnes_to_kg, units_to_cents


PASSWORD = "secret123"


@pytest.fixture(scope='function')
def app():
    """Create application for testing with a fresh schema."""
    app = create_app(TestingConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    return db.session


def make_user(role: str, branch: str, email: str, name: str | None = None):
    return auth_service.create_user(
        name=name or email.split("@")[0].title(),
        email=email,
        password=PASSWORD,
        role=role,
        branch=branch,
        contact="0701234567",
    )


@pytest.fixture(scope='function')
def director(db_session):
    return make_user("director", "branch1", "director@agro.co", "Dana Director")


@pytest.fixture(scope='function')
def manager1(db_session):
    return make_user("manager", "branch1", "manager1@agro.co", "Mona Manager")


@pytest.fixture(scope='function')
def manager2(db_session):
    return make_user("manager", "branch2", "manager2@agro.co", "Mike Manager")


@pytest.fixture(scope='function')
def agent1(db_session):
    return make_user("agent", "branch1", "agent1@agro.co", "Alex Agent")


@pytest.fixture(scope='function')
def agent2(db_session):
    return make_user("agent", "branch2", "agent2@agro.co", "Ada Agent")


@pytest.fixture(scope='function')
def procurement1(db_session):
    return make_user("procurement", "branch1", "buyer1@agro.co", "Paul Procurement")


@pytest.fixture(scope='function')
def make_produce(db_session, manager1):
    """Factory: insert a produce lot directly, bypassing the API. Takes tonnes and currency units."""
    def _make(name="Beans", branch="branch1", stock=100.0, **overrides):
        produce = Produce(
            name=name,
            type=overrides.pop("type", "Legume"),
            stock_kg=tonnes_to_kg(stock),
            cost_cents=units_to_cents(overrides.pop("cost", 1000)),
            sale_price_cents=units_to_cents(overrides.pop("sale_price", 1500)),
            dealer_name=overrides.pop("dealer_name", "Kato Dealers"),
            contact=overrides.pop("contact", "0709876543"),
            branch=branch,
            recorded_by_id=overrides.pop("recorded_by_id", manager1.id),
            **overrides,
        )
        db_session.add(produce)
        db_session.commit()
        return produce

    return _make


def get_auth_token(client, email: str, password: str = PASSWORD) -> str:
    """Helper to get auth token for a user through the login endpoint."""
    response = client.post('/api/auth/login', json={
        'email': email,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token_or_user) -> dict:
    """Helper to create Authorization headers from a token or a User."""
    token = token_or_user if isinstance(token_or_user, str) else token_service.issue_token(token_or_user)
    return {'Authorization': f'Bearer {token}'}
