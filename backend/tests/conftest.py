"""
Pytest fixtures for Adega backend tests.

Provides test database setup, seeded operators/products/customers, and a
test client.
"""

import pytest
from adega import create_app
from adega.config import TestConfig
from adega.extensions import db
from adega.models import User, Product, Customer, Sale, SaleItem, AuditLogEntry, CustomerPayment
from adega.models.auth import ROLE_ADMIN, ROLE_EMPLOYEE
from adega.decorators import OPERATOR_HEADER


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestConfig)

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
def admin(db_session):
    """Admin operator (password hash is irrelevant; auth happens upstream)."""
    user = User(name="Admin", email="admin@adega.test", password_hash="x", role=ROLE_ADMIN)
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def cashier(db_session):
    """Employee operator."""
    user = User(name="Caixa", email="caixa@adega.test", password_hash="x", role=ROLE_EMPLOYEE)
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def wine(db_session):
    """Product {stock=5, sell_price=10.00}."""
    product = Product(
        name="Vinho Tinto",
        category="Vinhos",
        sku="VIN-001",
        cost_price_cents=600,
        sell_price_cents=1000,
        stock=5,
        min_stock=2,
    )
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def beer(db_session):
    product = Product(
        name="Cerveja Lata",
        category="Cervejas",
        sku="CER-001",
        cost_price_cents=250,
        sell_price_cents=450,
        stock=24,
        min_stock=12,
    )
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def customer(db_session):
    """Customer {debt=0, credit_limit=100.00}."""
    c = Customer(name="Joao Silva", phone="11999990000", credit_limit_cents=10000, debt_cents=0)
    db_session.add(c)
    db_session.commit()
    return c


def operator_headers(user) -> dict:
    """Helper to create the operator identity header."""
    return {OPERATOR_HEADER: str(user.id)}


def snapshot(session) -> dict:
    """Every row the checkout engine can touch, as plain dicts."""
    session.expire_all()
    return {
        "products": [p.to_dict() for p in session.query(Product).order_by(Product.id)],
        "customers": [c.to_dict() for c in session.query(Customer).order_by(Customer.id)],
        "sales": [s.to_dict() for s in session.query(Sale).order_by(Sale.id)],
        "sale_items": [i.to_dict() for i in session.query(SaleItem).order_by(SaleItem.id)],
        "payments": [p.to_dict() for p in session.query(CustomerPayment).order_by(CustomerPayment.id)],
        "activity_logs": [e.to_dict() for e in session.query(AuditLogEntry).order_by(AuditLogEntry.id)],
    }
