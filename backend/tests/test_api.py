# Overview: Pytest coverage for the HTTP boundary (operator identity, status codes, payloads).

import pytest

from adega.models import Product, Customer, Sale
from adega.services.errors import TransactionConflict
from adega.services import sales_service
from conftest import operator_headers, snapshot


class TestOperatorIdentity:

    def test_missing_header(self, client, db_session, wine):
        response = client.post("/api/sales/", json={
            "payment_method": "CASH",
            "items": [{"product_id": wine.id, "quantity": 1}],
        })
        assert response.status_code == 401
        assert db_session.query(Sale).count() == 0

    def test_unknown_operator(self, client, db_session, wine):
        response = client.get("/api/products/", headers={"X-Operator-Id": "9999"})
        assert response.status_code == 401

    def test_inactive_operator(self, client, db_session, cashier):
        cashier.is_active = False
        db_session.commit()

        response = client.get("/api/products/", headers=operator_headers(cashier))
        assert response.status_code == 401

    def test_admin_only_routes(self, client, db_session, cashier):
        response = client.get("/api/audit/", headers=operator_headers(cashier))
        assert response.status_code == 403


class TestCheckoutRoute:

    def test_cash_checkout(self, client, db_session, cashier, wine):
        response = client.post("/api/sales/", headers=operator_headers(cashier), json={
            "payment_method": "cash",
            "items": [{"product_id": wine.id, "quantity": 3, "unit_price": 1}],
        })

        assert response.status_code == 201
        body = response.get_json()
        assert body["total_cents"] == 3000
        assert body["total"] == "30.00"

        db_session.expire_all()
        assert db_session.get(Product, wine.id).stock == 2
        assert db_session.get(Sale, body["sale_id"]).operator_id == cashier.id

    def test_insufficient_stock(self, client, db_session, cashier, wine):
        wine.stock = 2
        db_session.commit()

        response = client.post("/api/sales/", headers=operator_headers(cashier), json={
            "payment_method": "CASH",
            "items": [{"product_id": wine.id, "quantity": 3}],
        })

        assert response.status_code == 409
        body = response.get_json()
        assert body["code"] == "insufficient_stock"
        assert "Vinho Tinto" in body["error"]
        assert body["retryable"] is False

        db_session.expire_all()
        assert db_session.get(Product, wine.id).stock == 2

    def test_on_account_without_customer(self, client, db_session, cashier, wine):
        before = snapshot(db_session)

        response = client.post("/api/sales/", headers=operator_headers(cashier), json={
            "customer_id": None,
            "payment_method": "ON_ACCOUNT",
            "items": [{"product_id": wine.id, "quantity": 1}],
        })

        assert response.status_code == 400
        assert response.get_json()["code"] == "customer_required_for_credit"
        assert snapshot(db_session) == before

    def test_unknown_product(self, client, db_session, cashier):
        response = client.post("/api/sales/", headers=operator_headers(cashier), json={
            "payment_method": "CASH",
            "items": [{"product_id": 31337, "quantity": 1}],
        })
        assert response.status_code == 404
        assert response.get_json()["code"] == "product_not_found"

    def test_empty_cart(self, client, db_session, cashier):
        response = client.post("/api/sales/", headers=operator_headers(cashier), json={
            "payment_method": "CASH",
            "items": [],
        })
        assert response.status_code == 400
        assert response.get_json()["code"] == "validation_error"

    def test_conflict_is_marked_retryable(self, client, db_session, cashier, wine, monkeypatch):
        def conflicted(**kwargs):
            raise TransactionConflict("The operation conflicted with a concurrent change; please retry")

        monkeypatch.setattr(sales_service, "checkout", conflicted)

        response = client.post("/api/sales/", headers=operator_headers(cashier), json={
            "payment_method": "CASH",
            "items": [{"product_id": wine.id, "quantity": 1}],
        })
        assert response.status_code == 409
        assert response.get_json()["retryable"] is True

    def test_unexpected_error_is_generic_500(self, client, db_session, cashier, wine, monkeypatch):
        def boom(**kwargs):
            raise RuntimeError("secret internals")

        monkeypatch.setattr(sales_service, "checkout", boom)

        response = client.post("/api/sales/", headers=operator_headers(cashier), json={
            "payment_method": "CASH",
            "items": [{"product_id": wine.id, "quantity": 1}],
        })
        assert response.status_code == 500
        assert "secret" not in response.get_data(as_text=True)

    def test_get_sale_with_items(self, client, db_session, cashier, wine, beer):
        created = client.post("/api/sales/", headers=operator_headers(cashier), json={
            "payment_method": "PIX",
            "items": [{"product_id": wine.id, "quantity": 1}, {"product_id": beer.id, "quantity": 2}],
        }).get_json()

        response = client.get(f"/api/sales/{created['sale_id']}", headers=operator_headers(cashier))
        assert response.status_code == 200
        body = response.get_json()
        assert body["sale"]["total_cents"] == 1000 + 900
        assert body["sale"]["is_on_account"] is False
        assert [i["unit_price_cents"] for i in body["items"]] == [1000, 450]

        listed = client.get("/api/sales/", headers=operator_headers(cashier)).get_json()
        assert [s["id"] for s in listed["sales"]] == [created["sale_id"]]

    def test_get_missing_sale(self, client, db_session, cashier):
        response = client.get("/api/sales/404", headers=operator_headers(cashier))
        assert response.status_code == 404

    def test_list_sales_rejects_bad_since(self, client, db_session, cashier):
        response = client.get("/api/sales/?since=yesterday", headers=operator_headers(cashier))
        assert response.status_code == 400

    def test_list_sales_limit_is_at_least_one(self, client, db_session, cashier, wine):
        for _ in range(2):
            client.post("/api/sales/", headers=operator_headers(cashier), json={
                "payment_method": "CASH", "items": [{"product_id": wine.id, "quantity": 1}],
            })

        for limit in (-1, 0):
            response = client.get(f"/api/sales/?limit={limit}", headers=operator_headers(cashier))
            assert len(response.get_json()["sales"]) == 1


class TestCustomerRoutes:

    def test_on_account_sale_then_payment(self, client, db_session, cashier, beer, customer):
        beer.sell_price_cents = 500
        db_session.commit()

        sale = client.post("/api/sales/", headers=operator_headers(cashier), json={
            "customer_id": customer.id,
            "payment_method": "ON_ACCOUNT",
            "items": [{"product_id": beer.id, "quantity": 10}],
        })
        assert sale.status_code == 201
        assert sale.get_json()["total_cents"] == 5000

        response = client.post(
            f"/api/customers/{customer.id}/payments",
            headers=operator_headers(cashier),
            json={"amount_cents": 2000},
        )
        assert response.status_code == 201
        assert response.get_json()["customer"]["debt_cents"] == 3000

        db_session.expire_all()
        assert db_session.get(Customer, customer.id).debt_cents == 3000

        payments = client.get(f"/api/customers/{customer.id}/payments", headers=operator_headers(cashier))
        assert [p["amount_cents"] for p in payments.get_json()["payments"]] == [2000]

    def test_payment_requires_amount(self, client, db_session, cashier, customer):
        response = client.post(f"/api/customers/{customer.id}/payments", headers=operator_headers(cashier), json={})
        assert response.status_code == 400

    def test_overpayment_leaves_negative_debt(self, client, db_session, cashier, customer):
        customer.debt_cents = 1000
        db_session.commit()

        response = client.post(
            f"/api/customers/{customer.id}/payments",
            headers=operator_headers(cashier),
            json={"amount_cents": 1500},
        )
        assert response.status_code == 201
        assert response.get_json()["customer"]["debt_cents"] == -500

    def test_create_and_get_customer(self, client, db_session, cashier):
        created = client.post("/api/customers/", headers=operator_headers(cashier), json={
            "name": "Carla", "credit_limit_cents": 5000,
        })
        assert created.status_code == 201
        customer_id = created.get_json()["customer"]["id"]

        response = client.get(f"/api/customers/{customer_id}", headers=operator_headers(cashier))
        assert response.get_json()["customer"]["available_credit_cents"] == 5000


class TestProductAndAuditRoutes:

    def test_admin_creates_product(self, client, db_session, admin):
        response = client.post("/api/products/", headers=operator_headers(admin), json={
            "name": "Gin 750ml", "category": "Destilados", "sell_price_cents": 8990, "stock": 4,
        })
        assert response.status_code == 201
        assert response.get_json()["product"]["needs_reorder"] is True

    def test_employee_cannot_create_product(self, client, db_session, cashier):
        response = client.post("/api/products/", headers=operator_headers(cashier), json={
            "name": "Gin 750ml", "category": "Destilados", "sell_price_cents": 8990,
        })
        assert response.status_code == 403

    def test_update_missing_product(self, client, db_session, admin):
        response = client.put("/api/products/999", headers=operator_headers(admin), json={"stock": 1})
        assert response.status_code == 404

    def test_low_stock(self, client, db_session, cashier, wine, beer):
        beer.stock = 3
        db_session.commit()

        response = client.get("/api/products/low-stock", headers=operator_headers(cashier))
        assert [p["id"] for p in response.get_json()["products"]] == [beer.id]

    def test_audit_log_by_operator(self, client, db_session, admin, cashier, wine):
        client.post("/api/sales/", headers=operator_headers(cashier), json={
            "payment_method": "CASH", "items": [{"product_id": wine.id, "quantity": 1}],
        })

        response = client.get(f"/api/audit/?operator_id={cashier.id}", headers=operator_headers(admin))
        entries = response.get_json()["entries"]
        assert len(entries) == 1
        assert entries[0]["action"] == "sale"

    def test_audit_limit_is_at_least_one(self, client, db_session, admin, wine):
        for _ in range(2):
            client.post("/api/sales/", headers=operator_headers(admin), json={
                "payment_method": "CASH", "items": [{"product_id": wine.id, "quantity": 1}],
            })

        response = client.get("/api/audit/?limit=-1", headers=operator_headers(admin))
        assert len(response.get_json()["entries"]) == 1


class TestRequestBodies:

    @pytest.mark.parametrize("method, path", [
        ("post", "/api/sales/"),
        ("post", "/api/customers/"),
        ("post", "/api/customers/{customer_id}/payments"),
        ("post", "/api/products/"),
        ("put", "/api/products/{product_id}"),
    ])
    @pytest.mark.parametrize("body", [[1], "text", 42])
    def test_non_object_body_is_a_validation_error(
        self, client, db_session, admin, wine, customer, method, path, body
    ):
        before = snapshot(db_session)
        url = path.format(customer_id=customer.id, product_id=wine.id)

        response = getattr(client, method)(url, headers=operator_headers(admin), json=body)

        assert response.status_code == 400
        payload = response.get_json()
        assert payload["code"] == "validation_error"
        assert payload["error"] == "Request body must be a JSON object"
        assert snapshot(db_session) == before


def test_health(client, db_session):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json()["checks"]["database"]["status"] == "healthy"
