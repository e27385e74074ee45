"""
HTTP tests for catalog lookups and product listing.

Run: pytest stockdesk/backend/tests/test_catalog_api.py -v
"""

import uuid

from tests.factories import csv_bytes


class TestCategories:

    def test_create_and_list(self, client):
        response = client.post("/api/categories", json={"name": "Electronics", "description": "Gadgets"})

        assert response.status_code == 201
        assert response.json()["name"] == "Electronics"
        names = [c["name"] for c in client.get("/api/categories").json()]
        assert names == ["Electronics"]

    def test_unknown_parent(self, client):
        response = client.post("/api/categories", json={"name": "Phones", "parent_id": str(uuid.uuid4())})

        assert response.status_code == 404


class TestBrands:

    def test_duplicate_name_case_insensitive(self, client):
        assert client.post("/api/brands", json={"name": "Acme"}).status_code == 201

        response = client.post("/api/brands", json={"name": "ACME"})

        assert response.status_code == 409

    def test_auto_created_flag_listed(self, client, seeded):
        client.post(
            "/api/products/bulk-import",
            files={"file": ("p.csv", csv_bytes("SKU,Name,Brand", "ABC-1,Widget,Zeta"), "text/csv")},
        )

        brands = client.get("/api/brands").json()
        assert [(b["name"], b["auto_created"]) for b in brands] == [("Zeta", True)]


class TestWarehouses:

    def test_create_uppercases_code(self, client):
        response = client.post("/api/warehouses", json={"name": "Main", "code": "main"})

        assert response.status_code == 201
        assert response.json()["code"] == "MAIN"

    def test_duplicate_code(self, client):
        client.post("/api/warehouses", json={"name": "Main", "code": "MAIN"})

        response = client.post("/api/warehouses", json={"name": "Other", "code": "main"})

        assert response.status_code == 409

    def test_enables_import(self, client):
        """An empty store rejects imports until a category and a warehouse exist."""
        payload = csv_bytes("SKU,Name", "ABC-1,Widget")
        files = {"file": ("p.csv", payload, "text/csv")}

        assert client.post("/api/products/bulk-import", files=files).status_code == 400

        client.post("/api/categories", json={"name": "General"})
        client.post("/api/warehouses", json={"name": "Main", "code": "MAIN"})

        response = client.post("/api/products/bulk-import", files={"file": ("p.csv", payload, "text/csv")})
        assert response.json()["success"] == 1


class TestProducts:

    def _import(self, client, *lines):
        return client.post(
            "/api/products/bulk-import",
            files={"file": ("p.csv", csv_bytes(*lines), "text/csv")},
        )

    def test_list_and_search(self, client, seeded):
        self._import(
            client,
            "SKU,Name,Type,Brand,Active",
            "ABC-1,Widget,,Acme,yes",
            "ABC-2,Gadget,,,no",
            "SERV-1,Repairs,SERVICE,,",
        )

        assert len(client.get("/api/products").json()) == 3
        assert [p["sku"] for p in client.get("/api/products", params={"search": "widg"}).json()] == ["ABC-1"]
        assert [p["sku"] for p in client.get("/api/products", params={"search": "acme"}).json()] == ["ABC-1"]
        services = client.get("/api/products", params={"type": "service"}).json()
        assert [p["service_code"] for p in services] == ["SERV-1"]
        inactive = client.get("/api/products", params={"active": "false"}).json()
        assert [p["sku"] for p in inactive] == ["ABC-2"]

    def test_detail(self, client, seeded):
        self._import(client, "SKU,Name,Quantity,Supplier Name", "ABC-1,Widget,7,Acme Supply")
        product_id = client.get("/api/products").json()[0]["id"]

        detail = client.get(f"/api/products/{product_id}").json()

        assert detail["sku"] == "ABC-1"
        assert detail["stock_items"][0]["quantity"] == 7
        assert detail["suppliers"][0]["supplier_name"] == "Acme Supply"
        assert detail["image_urls"] == []

    def test_detail_not_found(self, client):
        assert client.get(f"/api/products/{uuid.uuid4()}").status_code == 404
