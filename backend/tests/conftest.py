"""
Pytest fixtures for PharmaPOS backend tests.

Provides test database setup, role/user/product factories, and auth helpers.
"""

from decimal import Decimal

import pytest

from pharmapos import create_app
from pharmapos.extensions import db
from pharmapos.models import Outlet, Product, Role, RolePermission, User
from pharmapos.permissions import MODULES, Action, Module
from pharmapos.services.auth_service import hash_password


DEFAULT_PASSWORD = "Password123"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'BOOTSTRAP_ON_STARTUP': False,
        'BCRYPT_ROUNDS': 4,
        'JWT_SECRET_KEY': 'test-jwt-secret-key-long-enough-for-hs256-signing',
        'RECORD_SALE_HISTORY': False,
        'SUBSTITUTION_API_URL': '',
        'SUBSTITUTION_API_KEY': '',
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


def grant(session, role: Role, module: str, *actions: str) -> None:
    """Allow actions on module for role (test helper)."""
    for action in actions:
        session.add(RolePermission(role_id=role.id, module=module, action=action, allowed=True))
    session.commit()


@pytest.fixture(scope='function')
def roles(db_session):
    """
    Admin: every module and action.
    Cashier: Products.show and Transactions.show only (no Transactions.create).
    """
    admin = Role(name="Admin")
    cashier = Role(name="Cashier")
    db_session.add_all([admin, cashier])
    db_session.commit()

    for module in MODULES:
        grant(db_session, admin, module, *[action.value for action in Action])

    grant(db_session, cashier, Module.PRODUCTS, Action.SHOW.value)
    grant(db_session, cashier, Module.TRANSACTIONS, Action.SHOW.value)

    return {"Admin": admin, "Cashier": cashier}


@pytest.fixture(scope='function')
def make_user(db_session):
    def _make_user(username, role, password=DEFAULT_PASSWORD, outlet_id=None, status="active"):
        user = User(
            username=username,
            password_hash=hash_password(password),
            role=role,
            outlet_id=outlet_id,
            status=status,
        )
        db_session.add(user)
        db_session.commit()
        return user
    return _make_user


@pytest.fixture(scope='function')
def make_outlet(db_session):
    def _make_outlet(name="Apotek Sehat Pusat", location="Jl. Merdeka 1", status="Active"):
        outlet = Outlet(name=name, location=location, status=status)
        db_session.add(outlet)
        db_session.commit()
        return outlet
    return _make_outlet


@pytest.fixture(scope='function')
def make_product(db_session):
    def _make_product(name="Paracetamol 500mg", stock=100, cost_price="1000", selling_price="1500", **extra):
        product = Product(
            name=name,
            stock=stock,
            cost_price=Decimal(cost_price),
            selling_price=Decimal(selling_price),
            **extra,
        )
        db_session.add(product)
        db_session.commit()
        return product
    return _make_product


def get_auth_token(client, username: str, password: str = DEFAULT_PASSWORD) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/login', json={
        'username': username,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def superadmin_headers(client, make_user):
    make_user("root", "superadmin")
    return auth_headers(get_auth_token(client, "root"))


@pytest.fixture(scope='function')
def admin_headers(client, roles, make_user):
    make_user("admin1", "Admin")
    return auth_headers(get_auth_token(client, "admin1"))


@pytest.fixture(scope='function')
def cashier_headers(client, roles, make_user):
    make_user("kasir1", "Cashier")
    return auth_headers(get_auth_token(client, "kasir1"))


@pytest.fixture(scope='function')
def login(client):
    """Log a user in and return Authorization headers."""
    def _login(username: str, password: str = DEFAULT_PASSWORD) -> dict:
        token = get_auth_token(client, username, password)
        assert token, f"login failed for {username}"
        return auth_headers(token)
    return _login
