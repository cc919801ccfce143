"""
API tests: storefront order actions, conversion and inventory endpoints.

Runs against the application engine, which conftest points at a temporary
SQLite file.
"""
import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from conftest import seed_storefront_order, seed_variant
from supply_manager.core.database import create_db_and_tables, engine, get_session
from supply_manager.main import app
from supply_manager.models import CustomerOrder, ProductVariant


@pytest.fixture(scope="module", autouse=True)
def setup_db():
    create_db_and_tables()
    yield


@pytest.fixture(scope="module")
def client():
    with TestClient(app, raise_server_exceptions=True) as c:
        yield c


@pytest.fixture
def db():
    with Session(engine) as s:
        yield s


class TestHealth:
    def test_health(self, client):
        r = client.get("/api/health")
        assert r.status_code == 200
        assert r.json()["db"] == "ok"

    def test_root(self, client):
        assert client.get("/").json()["docs"] == "/docs"


class TestStorefrontQueries:
    def test_detail_includes_shopper_and_items(self, client, db):
        order = seed_storefront_order(db, email="detail@example.com", items=[{}, {}])
        r = client.get(f"/api/storefront-orders/{order.id}")
        assert r.status_code == 200
        data = r.json()
        assert data["customer"]["email"] == "detail@example.com"
        assert len(data["items"]) == 2
        assert data["convertedCustomerOrderId"] is None

    def test_detail_not_found(self, client):
        assert client.get("/api/storefront-orders/missing").status_code == 404

    def test_list_filters_status_case_insensitive(self, client, db):
        seed_storefront_order(db, order_name="SF-LIST-1", status="Pending")
        r = client.get("/api/storefront-orders", params={"status": "pending", "search": "SF-LIST"})
        assert r.status_code == 200
        data = r.json()
        assert data["total"] == 1
        assert data["items"][0]["orderName"] == "SF-LIST-1"

    def test_list_hides_archived(self, client, db):
        seed_storefront_order(db, order_name="SF-HIDDEN", is_archived=True)
        r = client.get("/api/storefront-orders", params={"search": "SF-HIDDEN"})
        assert r.json()["total"] == 0
        r = client.get(
            "/api/storefront-orders", params={"search": "SF-HIDDEN", "include_archived": True}
        )
        assert r.json()["total"] == 1


class TestConvertEndpoint:
    def test_convert_returns_camel_case(self, client, db):
        order = seed_storefront_order(db, email="convert@example.com", items=[{}])

        r = client.post(
            f"/api/storefront-orders/{order.id}/convert-to-customer-order",
            json={"notes": "Deliver before noon"},
        )

        assert r.status_code == 200
        data = r.json()
        assert data["success"] is True
        assert data["customerOrderId"]
        assert "itemErrors" not in data

        detail = client.get(f"/api/customer-orders/{data['customerOrderId']}").json()
        assert detail["notes"] == "Deliver before noon"
        assert detail["sourceStorefrontOrderId"] == order.id
        assert len(detail["items"]) == 1

    def test_convert_without_body(self, client, db):
        order = seed_storefront_order(db, email="nobody@example.com", items=[{}])
        r = client.post(f"/api/storefront-orders/{order.id}/convert-to-customer-order")
        assert r.status_code == 200

    def test_item_errors_reported(self, client, db):
        order = seed_storefront_order(
            db, email="partial@example.com", items=[{}, {"product_id": None}]
        )
        r = client.post(f"/api/storefront-orders/{order.id}/convert-to-customer-order", json={})
        assert r.status_code == 200
        assert len(r.json()["itemErrors"]) == 1

    def test_unknown_order(self, client):
        r = client.post("/api/storefront-orders/missing/convert-to-customer-order", json={})
        assert r.status_code == 404
        body = r.json()
        assert body["success"] is False
        assert body["stage"] == "lookup"

    def test_unknown_selected_customer(self, client, db):
        order = seed_storefront_order(db, email="pick@example.com", items=[{}])
        r = client.post(
            f"/api/storefront-orders/{order.id}/convert-to-customer-order",
            json={"selectedCustomerId": "nope"},
        )
        assert r.status_code == 404
        assert r.json()["error"] == "Selected customer not found"

    def test_second_conversion_conflicts(self, client, db):
        order = seed_storefront_order(db, email="twice@example.com", items=[{}])
        url = f"/api/storefront-orders/{order.id}/convert-to-customer-order"
        assert client.post(url, json={}).status_code == 200
        assert client.post(url, json={}).status_code == 409

    def test_malformed_body_rejected(self, client, db):
        order = seed_storefront_order(db, email="garbled@example.com", items=[{}])
        r = client.post(
            f"/api/storefront-orders/{order.id}/convert-to-customer-order",
            content=b"{not json",
            headers={"content-type": "application/json"},
        )
        assert r.status_code == 422
        assert client.get(f"/api/storefront-orders/{order.id}").json()["convertedCustomerOrderId"] is None

    def test_header_write_failure_returns_500(self, client, engine, session):
        # isolated engine so dropping the header table leaves the shared database alone
        order = seed_storefront_order(session, email="broken@example.com", items=[{}])
        CustomerOrder.__table__.drop(engine)

        def _failing_session():
            with Session(engine) as s:
                yield s

        app.dependency_overrides[get_session] = _failing_session
        try:
            r = client.post(
                f"/api/storefront-orders/{order.id}/convert-to-customer-order", json={}
            )
        finally:
            app.dependency_overrides.pop(get_session, None)

        assert r.status_code == 500
        body = r.json()
        assert body["success"] is False
        assert body["stage"] == "order"
        assert body["error"] == "Failed to create customer order"
        assert "customerOrderId" not in body

    def test_export_customer_order(self, client, db):
        order = seed_storefront_order(db, email="export@example.com", items=[{}])
        converted = client.post(
            f"/api/storefront-orders/{order.id}/convert-to-customer-order", json={}
        ).json()
        r = client.get(f"/api/customer-orders/{converted['customerOrderId']}/export")
        assert r.status_code == 200
        assert "spreadsheetml" in r.headers["content-type"]
        assert "SF-1001.xlsx" in r.headers["content-disposition"]
        assert r.content[:2] == b"PK"

    def test_customer_search_finds_created_customer(self, client, db):
        order = seed_storefront_order(db, email="findme@example.com", items=[{}])
        client.post(f"/api/storefront-orders/{order.id}/convert-to-customer-order", json={})
        r = client.get("/api/customers", params={"search": "findme@"})
        assert [c["email"] for c in r.json()] == ["findme@example.com"]


class TestLifecycleEndpoints:
    def test_accept(self, client, db):
        order = seed_storefront_order(db, status="Pending")
        r = client.post(f"/api/storefront-orders/{order.id}/accept", json={"notes": "ok"})
        assert r.status_code == 200
        assert r.json()["status"] == "Approved"

        logs = client.get(f"/api/storefront-orders/{order.id}/logs").json()
        assert logs[0]["action"] == "accept"
        assert logs[0]["newStatus"] == "Approved"

    def test_accept_invalid_state(self, client, db):
        order = seed_storefront_order(db, status="Approved")
        assert client.post(f"/api/storefront-orders/{order.id}/accept").status_code == 400

    def test_reject_requires_reason(self, client, db):
        order = seed_storefront_order(db, status="Pending")
        r = client.post(f"/api/storefront-orders/{order.id}/reject", json={})
        assert r.status_code == 400

    def test_reject(self, client, db):
        order = seed_storefront_order(db, status="Pending")
        r = client.post(
            f"/api/storefront-orders/{order.id}/reject", json={"rejectionReason": "No stock"}
        )
        assert r.status_code == 200
        assert r.json()["status"] == "Rejected"

    def test_archive_unknown(self, client):
        assert client.post("/api/storefront-orders/missing/archive").status_code == 404


class TestInventoryEndpoints:
    def _payload(self, variant_id, **change):
        return {
            "productName": "Paver Slab",
            "variantName": "Charcoal 24x24",
            "snapshot": {
                "variantId": variant_id,
                "unit": "Square Feet",
                "currentQuantity": 1000,
                "currentPallets": 1,
                "currentLayers": 0,
                "feetPerLayer": 100,
                "layersPerPallet": 10,
                "warningThreshold": 500,
                "criticalThreshold": 100,
            },
            "change": change,
        }

    def test_impact_preview(self, client):
        r = client.post(
            "/api/inventory/impact",
            json=[
                self._payload("v-1", changeQuantity=250),
                self._payload("v-2", changeQuantity=10, isTransient=True),
            ],
        )
        assert r.status_code == 200
        rows = r.json()
        assert len(rows) == 1
        assert rows[0]["result"] == {
            "newQuantity": 750,
            "newPallets": 0,
            "newLayers": 8,
            "status": "Ok",
            "willPersist": True,
        }

    def test_impact_accepts_null_quantities(self, client):
        payload = self._payload("v-3", changeQuantity=None)
        payload["snapshot"]["currentQuantity"] = None
        r = client.post("/api/inventory/impact", json=[payload])
        assert r.status_code == 200
        (row,) = r.json()
        assert row["result"]["newQuantity"] == 0
        assert row["result"]["willPersist"] is False

    def test_impact_rejects_bad_payload(self, client):
        r = client.post("/api/inventory/impact", json=[{"change": {}}])
        assert r.status_code == 422

    def test_apply_and_warnings(self, client, db):
        variant = seed_variant(db, quantity=600, name="Warned Variant")

        r = client.post(
            "/api/inventory/apply", json=[self._payload(variant.id, changeQuantity=150)]
        )
        assert r.status_code == 200
        assert r.json()["applied"][0]["newQuantity"] == 450

        db.expire_all()
        assert db.get(ProductVariant, variant.id).quantity == 450

        warnings = client.get("/api/inventory/warnings").json()
        names = [item["variantName"] for item in warnings["items"]]
        assert "Warned Variant" in names
        assert warnings["count"] == len(warnings["items"])
