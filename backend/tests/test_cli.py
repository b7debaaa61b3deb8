# Overview: Pytest coverage for Flask CLI commands.

from adega.models import User, Product
from adega.services import operator_service


def test_seed_admin_is_idempotent(app, db_session):
    runner = app.test_cli_runner()

    first = runner.invoke(args=["system", "seed-admin", "--password", "Segredo123"])
    second = runner.invoke(args=["system", "seed-admin", "--password", "Segredo123"])

    assert first.exit_code == 0, first.output
    assert "PASS" in first.output
    assert "already exists" in second.output

    admin = db_session.query(User).one()
    assert admin.is_admin
    assert operator_service.verify_password("Segredo123", admin.password_hash)
    assert not operator_service.verify_password("wrong-password", admin.password_hash)


def test_add_product_and_low_stock(app, db_session):
    runner = app.test_cli_runner()

    result = runner.invoke(args=[
        "products", "add", "--name", "Vodka", "--category", "Destilados",
        "--sell-price", "45.90", "--stock", "1", "--min-stock", "3",
    ])
    assert result.exit_code == 0, result.output

    product = db_session.query(Product).one()
    assert product.sell_price_cents == 4590

    low = runner.invoke(args=["products", "low-stock"])
    assert "Vodka" in low.output


def test_create_operator_rejects_short_password(app, db_session):
    runner = app.test_cli_runner()

    result = runner.invoke(args=[
        "operators", "create", "--name", "Ana", "--email", "ana@adega.test", "--password", "short",
    ])

    assert result.exit_code != 0
    assert db_session.query(User).count() == 0
