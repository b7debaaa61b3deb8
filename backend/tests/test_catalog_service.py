# Overview: Pytest coverage for catalog lookups and thin product writes.

import pytest

from adega.models import Product, AuditLogEntry
from adega.services import catalog_service
from adega.services.errors import ValidationError, ProductNotFound, InsufficientStock


def test_decrement_stock_refuses_to_go_negative(db_session, wine):
    with pytest.raises(InsufficientStock) as exc_info:
        catalog_service.decrement_stock(wine, 6)

    assert exc_info.value.details["available"] == 5
    assert wine.stock == 5


def test_decrement_stock_to_zero(db_session, wine):
    catalog_service.decrement_stock(wine, 5)
    assert wine.stock == 0


def test_require_product_missing(db_session):
    with pytest.raises(ProductNotFound):
        catalog_service.require_product(123)


def test_low_stock_lists_products_at_or_below_threshold(db_session, wine, beer):
    wine.stock = 2  # min_stock 2
    db_session.commit()

    low = catalog_service.list_low_stock()
    assert [p.id for p in low] == [wine.id]
    assert low[0].needs_reorder


def test_create_product_is_audited(db_session, admin):
    product = catalog_service.create_product(admin.id, {
        "name": "Cachaca 1L",
        "category": "Destilados",
        "sell_price_cents": 3500,
        "stock": 10,
    })

    assert product.id is not None
    assert product.min_stock == 5
    entry = db_session.query(AuditLogEntry).one()
    assert entry.action == "create_product"
    assert entry.operator_id == admin.id


@pytest.mark.parametrize("payload", [
    {"category": "Vinhos", "sell_price_cents": 100},
    {"name": "X", "category": "Vinhos", "sell_price_cents": -1},
    {"name": "X", "category": "Vinhos", "sell_price_cents": 100, "stock": -3},
    {"name": "X", "category": "Vinhos", "sell_price_cents": "10.50"},
    {"name": "X", "category": "Vinhos", "sell_price_cents": 100, "color": "red"},
])
def test_create_product_rejects_bad_payload(db_session, admin, payload):
    with pytest.raises(ValidationError):
        catalog_service.create_product(admin.id, payload)

    assert db_session.query(Product).count() == 0


def test_create_product_duplicate_sku(db_session, admin, wine):
    with pytest.raises(ValidationError):
        catalog_service.create_product(admin.id, {
            "name": "Outro", "category": "Vinhos", "sell_price_cents": 100, "sku": wine.sku,
        })


def test_update_product(db_session, admin, wine):
    updated = catalog_service.update_product(wine.id, admin.id, {"sell_price_cents": 1250, "stock": 9})

    assert updated.sell_price_cents == 1250
    assert updated.stock == 9
    assert db_session.query(AuditLogEntry).filter_by(action="update_product").count() == 1


def test_update_product_cannot_blank_name(db_session, admin, wine):
    with pytest.raises(ValidationError):
        catalog_service.update_product(wine.id, admin.id, {"name": "  "})
