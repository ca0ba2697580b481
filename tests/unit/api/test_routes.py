"""HTTP tests for the product, category and health routers."""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from src.catalog.api.http.app import app
from src.catalog.api.http.deps import get_db_service
from src.catalog.core.errors import InternalError, TransactionTimeout
from src.catalog.core.services import DbSessionService
from src.catalog.entities.category.repository import CategoryRepository


@pytest.fixture
def client(db: DbSessionService) -> Generator[TestClient]:
    """Client wired to the per-test database; startup is skipped."""
    app.dependency_overrides[get_db_service] = lambda: db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def category_ids(client: TestClient) -> list[int]:
    ids = []
    for name in ("Electronics", "Clothing", "Books"):
        response = client.post("/categories", json={"name": name})
        assert response.status_code == 201
        ids.append(response.json()["id"])
    return ids


def _create_product(client: TestClient, category_ids: list[int], **fields) -> dict:
    payload = {"name": "Laptop", "price": "999.99", "category_ids": category_ids}
    payload.update(fields)
    response = client.post("/products", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestHealth:
    def test_liveness(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_readiness(self, client: TestClient):
        response = client.get("/health/ready")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ready"
        assert body["checks"]["database"]["type"] == "sqlite"

    def test_readiness_reports_unhealthy_database(self, client: TestClient, monkeypatch):
        monkeypatch.setattr(DbSessionService, "health_check", lambda self: False)

        response = client.get("/health/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"

    def test_request_id_is_echoed(self, client: TestClient):
        response = client.get("/health", headers={"X-Request-ID": "abc-123"})

        assert response.headers["X-Request-ID"] == "abc-123"


class TestProductRoutes:
    def test_create_and_get(self, client: TestClient, category_ids: list[int]):
        created = _create_product(client, [category_ids[1], category_ids[0]], sku="LAP-1")

        assert created["price"] == "999.99"
        assert [c["name"] for c in created["categories"]] == ["Electronics", "Clothing"]

        fetched = client.get(f"/products/{created['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["categories"] == created["categories"]

    def test_create_with_unknown_category(self, client: TestClient, category_ids: list[int]):
        response = client.post(
            "/products", json={"name": "Laptop", "price": "1.00", "category_ids": [99]}
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Category with ID 99 not found"
        assert client.get("/products").json()["total"] == 0

    def test_create_with_invalid_body(self, client: TestClient):
        response = client.post("/products", json={"name": "", "price": "-3", "category_ids": []})

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "ValidationFailed"
        assert {v["field"] for v in body["violations"]} == {"name", "price", "category_ids"}

    def test_duplicate_sku_conflicts(self, client: TestClient, category_ids: list[int]):
        _create_product(client, category_ids[:1], sku="DUP")

        response = client.post(
            "/products",
            json={"name": "Other", "price": "2.00", "sku": "DUP", "category_ids": category_ids[:1]},
        )

        assert response.status_code == 409

    def test_get_missing_product(self, client: TestClient):
        response = client.get("/products/123")

        assert response.status_code == 404
        assert response.json()["error"] == "NotFoundError"

    def test_update_replaces_categories(self, client: TestClient, category_ids: list[int]):
        product = _create_product(client, category_ids[:2])

        response = client.put(
            f"/products/{product['id']}", json={"category_ids": [category_ids[2]]}
        )

        assert response.status_code == 200
        assert [c["id"] for c in response.json()["categories"]] == [category_ids[2]]

    def test_update_with_unknown_category_changes_nothing(
        self, client: TestClient, category_ids: list[int]
    ):
        product = _create_product(client, [category_ids[1]])

        response = client.put(
            f"/products/{product['id']}",
            json={"name": "Changed", "category_ids": [category_ids[1], 99]},
        )

        assert response.status_code == 404
        after = client.get(f"/products/{product['id']}").json()
        assert after["name"] == "Laptop"
        assert [c["id"] for c in after["categories"]] == [category_ids[1]]

    def test_update_rejects_null_price(self, client: TestClient, category_ids: list[int]):
        product = _create_product(client, category_ids[:1])

        response = client.put(f"/products/{product['id']}", json={"price": None})

        assert response.status_code == 422
        assert response.json()["violations"][0]["field"] == "price"

    def test_delete(self, client: TestClient, category_ids: list[int]):
        product = _create_product(client, category_ids)

        response = client.delete(f"/products/{product['id']}")

        assert response.status_code == 204
        assert client.get(f"/products/{product['id']}").status_code == 404
        assert client.delete(f"/products/{product['id']}").status_code == 404

    def test_list_filters_and_pages(self, client: TestClient, category_ids: list[int]):
        for index in range(5):
            _create_product(
                client,
                [category_ids[index % 2]],
                name=f"Item {index}",
                in_stock=index != 2,
            )

        first = client.get("/products", params={"page_size": 2}).json()
        assert first["total"] == 5
        assert first["total_pages"] == 3
        assert [p["name"] for p in first["items"]] == ["Item 0", "Item 1"]

        electronics = client.get("/products", params={"category_id": category_ids[0]}).json()
        assert [p["name"] for p in electronics["items"]] == ["Item 0", "Item 2", "Item 4"]

        out_of_stock = client.get("/products", params={"in_stock": "false"}).json()
        assert [p["name"] for p in out_of_stock["items"]] == ["Item 2"]

    def test_list_rejects_huge_page(self, client: TestClient):
        response = client.get("/products", params={"page": str(10**19)})

        assert response.status_code == 422
        assert response.json()["violations"][0]["field"] == "page"

    def test_list_rejects_page_zero(self, client: TestClient):
        response = client.get("/products", params={"page": 0})

        assert response.status_code == 422
        assert response.json()["violations"][0]["field"] == "page"


class TestCategoryRoutes:
    def test_list_sorted_with_counts(self, client: TestClient, category_ids: list[int]):
        _create_product(client, category_ids[:2])

        plain = client.get("/categories").json()
        assert [c["name"] for c in plain] == ["Books", "Clothing", "Electronics"]
        assert all(c["product_count"] is None for c in plain)

        counted = client.get("/categories", params={"include_product_count": "true"}).json()
        assert {c["name"]: c["product_count"] for c in counted} == {
            "Books": 0,
            "Clothing": 1,
            "Electronics": 1,
        }

    def test_duplicate_name(self, client: TestClient, category_ids: list[int]):
        response = client.post("/categories", json={"name": "Books"})

        assert response.status_code == 409

    def test_update(self, client: TestClient, category_ids: list[int]):
        response = client.put(
            f"/categories/{category_ids[2]}", json={"description": "Paper and ink"}
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Books"
        assert response.json()["description"] == "Paper and ink"

    def test_delete_detaches_products(self, client: TestClient, category_ids: list[int]):
        product = _create_product(client, category_ids[:2])

        assert client.delete(f"/categories/{category_ids[0]}").status_code == 204

        after = client.get(f"/products/{product['id']}").json()
        assert [c["id"] for c in after["categories"]] == [category_ids[1]]
        assert client.get(f"/categories/{category_ids[0]}").status_code == 404

    def test_category_products(self, client: TestClient, category_ids: list[int]):
        _create_product(client, [category_ids[0]], name="A")
        _create_product(client, [category_ids[1]], name="B")
        _create_product(client, [category_ids[0]], name="C")

        response = client.get(f"/categories/{category_ids[0]}/products")

        assert response.status_code == 200
        assert [p["name"] for p in response.json()["items"]] == ["A", "C"]
        assert client.get("/categories/99/products").status_code == 404


class TestErrorMapping:
    def test_timeout_maps_to_gateway_timeout(self, client: TestClient, monkeypatch):
        def _slow(self, include_product_count=False):
            raise TransactionTimeout(0.5)

        monkeypatch.setattr(CategoryRepository, "list", _slow)

        response = client.get("/categories")

        assert response.status_code == 504
        assert response.json()["error"] == "TransactionTimeout"

    def test_internal_error_hides_details(self, client: TestClient, monkeypatch):
        def _broken(self, include_product_count=False):
            raise InternalError("disk I/O error at /var/lib/db")

        monkeypatch.setattr(CategoryRepository, "list", _broken)

        response = client.get("/categories")

        assert response.status_code == 500
        assert response.json()["message"] == "Internal Server Error"
