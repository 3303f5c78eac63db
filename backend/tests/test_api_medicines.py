"""API tests for /api/medicines."""
import pytest


@pytest.fixture
def paracetamol(client):
    resp = client.post(
        "/api/medicines",
        json={"name": "Paracetamol 500mg", "price": "25.50", "stockQuantity": 10, "description": "Fever"},
    )
    assert resp.status_code == 201
    return resp.json()


class TestCrud:

    def test_create_returns_record(self, paracetamol):
        assert paracetamol["id"]
        assert paracetamol["name"] == "Paracetamol 500mg"
        assert paracetamol["price"] == "25.50"
        assert paracetamol["stockQuantity"] == 10
        assert paracetamol["description"] == "Fever"

    def test_create_defaults(self, client):
        resp = client.post("/api/medicines", json={"name": "Vitamin D3", "price": 65})
        assert resp.status_code == 201
        body = resp.json()
        assert body["stockQuantity"] == 0
        assert body["description"] == ""
        assert body["price"] == "65.00"

    def test_list_is_ordered_by_name(self, client):
        for name in ["Zinc", "Amoxicillin", "Cetirizine"]:
            client.post("/api/medicines", json={"name": name, "price": "1"})
        resp = client.get("/api/medicines")
        assert resp.status_code == 200
        assert [m["name"] for m in resp.json()] == ["Amoxicillin", "Cetirizine", "Zinc"]

    def test_search_by_name(self, client, paracetamol):
        client.post("/api/medicines", json={"name": "Cetirizine 10mg", "price": "15"})
        resp = client.get("/api/medicines", params={"search": "PARA"})
        assert [m["id"] for m in resp.json()] == [paracetamol["id"]]

    def test_get_by_id(self, client, paracetamol):
        resp = client.get(f"/api/medicines/{paracetamol['id']}")
        assert resp.status_code == 200
        assert resp.json() == paracetamol

    def test_get_missing_is_404(self, client):
        resp = client.get("/api/medicines/does-not-exist")
        assert resp.status_code == 404
        assert resp.json()["detail"]["error"] == "NotFound"

    def test_partial_update(self, client, paracetamol):
        resp = client.put(f"/api/medicines/{paracetamol['id']}", json={"price": "27"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["price"] == "27.00"
        assert body["name"] == "Paracetamol 500mg"
        assert body["stockQuantity"] == 10

    def test_update_missing_is_404(self, client):
        resp = client.put("/api/medicines/nope", json={"name": "X"})
        assert resp.status_code == 404

    def test_update_negative_stock_is_400(self, client, paracetamol):
        resp = client.put(f"/api/medicines/{paracetamol['id']}", json={"stockQuantity": -1})
        assert resp.status_code == 400
        assert client.get(f"/api/medicines/{paracetamol['id']}").json()["stockQuantity"] == 10

    def test_delete(self, client, paracetamol):
        resp = client.delete(f"/api/medicines/{paracetamol['id']}")
        assert resp.status_code == 200
        assert resp.json() == {"message": "Medicine deleted successfully", "id": paracetamol["id"]}
        assert client.get(f"/api/medicines/{paracetamol['id']}").status_code == 404
        assert client.delete(f"/api/medicines/{paracetamol['id']}").status_code == 404


class TestCreateValidation:

    @pytest.mark.parametrize(
        "payload, field",
        [
            ({"price": "10"}, "name"),
            ({"name": "", "price": "10"}, "name"),
            ({"name": "X"}, "price"),
            ({"name": "X", "price": "-1"}, "price"),
            ({"name": "X", "price": "ten"}, "price"),
            ({"name": "X", "price": "1", "stockQuantity": -5}, "stockQuantity"),
        ],
    )
    def test_bad_payload_is_400(self, client, payload, field):
        resp = client.post("/api/medicines", json=payload)
        assert resp.status_code == 400
        detail = resp.json()["detail"]
        assert detail["error"] == "ValidationError"
        assert field in [d["field"] for d in detail["details"]]
        assert client.get("/api/medicines").json() == []


class TestStockAdjustment:

    def test_restock_and_sale(self, client, paracetamol):
        url = f"/api/medicines/{paracetamol['id']}/stock"
        assert client.patch(url, json={"delta": 5}).json()["stockQuantity"] == 15
        assert client.patch(url, json={"delta": -15}).json()["stockQuantity"] == 0

    def test_overdraw_is_refused(self, client, paracetamol):
        resp = client.patch(f"/api/medicines/{paracetamol['id']}/stock", json={"delta": -11})
        assert resp.status_code == 400
        detail = resp.json()["detail"]
        assert detail["error"] == "InsufficientStock"
        assert detail["details"][0]["availableStock"] == 10
        assert detail["details"][0]["requestedQuantity"] == 11
        assert client.get(f"/api/medicines/{paracetamol['id']}").json()["stockQuantity"] == 10

    def test_non_integer_delta_is_400(self, client, paracetamol):
        resp = client.patch(f"/api/medicines/{paracetamol['id']}/stock", json={"delta": "abc"})
        assert resp.status_code == 400
        assert resp.json()["detail"]["details"][0]["field"] == "delta"

    def test_missing_medicine_is_404(self, client):
        resp = client.patch("/api/medicines/nope/stock", json={"delta": 1})
        assert resp.status_code == 404


class TestLowStock:

    def test_threshold_filter_and_order(self, client):
        for name, qty in [("A", 50), ("B", 3), ("C", 0), ("D", 19)]:
            client.post("/api/medicines", json={"name": name, "price": "1", "stockQuantity": qty})

        names = [m["name"] for m in client.get("/api/medicines/low-stock").json()]
        assert names == ["C", "B", "D"]

        names = [m["name"] for m in client.get("/api/medicines/low-stock", params={"threshold": 5}).json()]
        assert names == ["C", "B"]


class TestBulkAndCsv:

    def test_bulk_create(self, client):
        rows = [
            {"name": "Metformin 500mg", "price": "12.00", "stockQuantity": 200},
            {"name": "Amlodipine 5mg", "price": "22.50"},
        ]
        resp = client.post("/api/medicines/bulk", json=rows)
        assert resp.status_code == 201
        assert [m["name"] for m in resp.json()] == ["Metformin 500mg", "Amlodipine 5mg"]
        assert len(client.get("/api/medicines").json()) == 2

    def test_bulk_with_bad_row_adds_nothing(self, client):
        rows = [{"name": "Metformin 500mg", "price": "12"}, {"name": "Bad", "price": "-1"}]
        resp = client.post("/api/medicines/bulk", json=rows)
        assert resp.status_code == 400
        assert client.get("/api/medicines").json() == []

    def test_bulk_empty_list_is_400(self, client):
        assert client.post("/api/medicines/bulk", json=[]).status_code == 400

    def test_csv_import(self, client):
        content = "name,price,stockQuantity,description\nDolo 650mg,30,150,Fever\nORS Sachet,10.5,,\n"
        resp = client.post(
            "/api/medicines/import", files={"file": ("meds.csv", content.encode("utf-8"), "text/csv")}
        )
        assert resp.status_code == 201
        created = {m["name"]: m for m in resp.json()}
        assert created["Dolo 650mg"]["stockQuantity"] == 150
        assert created["ORS Sachet"]["price"] == "10.50"
        assert created["ORS Sachet"]["stockQuantity"] == 0

    def test_csv_import_with_bad_row_adds_nothing(self, client):
        content = "name,price\nDolo 650mg,30\nBroken,abc\n"
        resp = client.post("/api/medicines/import", files={"file": ("meds.csv", content, "text/csv")})
        assert resp.status_code == 400
        assert resp.json()["detail"]["details"] == [
            {"row": 3, "field": "price", "message": "Price must be a number"}
        ]
        assert client.get("/api/medicines").json() == []

    def test_csv_import_rejects_non_utf8(self, client):
        resp = client.post(
            "/api/medicines/import", files={"file": ("meds.csv", b"name,price\n\xff\xfe,1\n", "text/csv")}
        )
        assert resp.status_code == 400

    def test_csv_export(self, client, paracetamol):
        resp = client.get("/api/medicines/export")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert "attachment" in resp.headers["content-disposition"]
        lines = resp.text.strip().splitlines()
        assert lines[0] == "name,price,stockQuantity,description"
        assert lines[1] == "Paracetamol 500mg,25.50,10,Fever"


def test_security_headers(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.headers["x-content-type-options"] == "nosniff"
    assert resp.headers["x-frame-options"] == "DENY"


class TestOutOfRangeAmounts:

    @pytest.mark.parametrize("price", ["1e30", "99999999999", 1e30])
    def test_create_rejects_huge_price(self, client, price):
        resp = client.post("/api/medicines", json={"name": "X", "price": price})
        assert resp.status_code == 400
        assert resp.json()["detail"]["details"][0]["field"] == "price"
        assert client.get("/api/medicines").json() == []

    def test_update_rejects_huge_price_and_keeps_record(self, client, paracetamol):
        resp = client.put(f"/api/medicines/{paracetamol['id']}", json={"price": "1e30"})
        assert resp.status_code == 400
        assert resp.json()["detail"]["details"][0]["field"] == "price"
        assert client.get(f"/api/medicines/{paracetamol['id']}").json()["price"] == "25.50"

    def test_bulk_rejects_huge_price(self, client):
        rows = [{"name": "A", "price": "1"}, {"name": "B", "price": "1e30"}]
        assert client.post("/api/medicines/bulk", json=rows).status_code == 400
        assert client.get("/api/medicines").json() == []

    def test_csv_import_rejects_huge_price(self, client):
        content = "name,price\nA,1\nB,1e30\n"
        resp = client.post("/api/medicines/import", files={"file": ("meds.csv", content, "text/csv")})
        assert resp.status_code == 400
        assert resp.json()["detail"]["details"][0]["row"] == 3
        assert client.get("/api/medicines").json() == []

    def test_amount_is_rounded_to_cents_on_input(self, client):
        resp = client.post("/api/medicines", json={"name": "X", "price": "12.345"})
        assert resp.json()["price"] == "12.35"


class TestUnexpectedFailures:

    def _assert_generic_500(self, resp):
        assert resp.status_code == 500
        detail = resp.json()["detail"]
        assert detail["error"] == "InternalError"
        assert "boom" not in detail["message"]

    @staticmethod
    def _boom(*args, **kwargs):
        raise RuntimeError("boom")

    def test_update(self, client, db, paracetamol, monkeypatch):
        monkeypatch.setattr(db.medicines, "update", self._boom)
        self._assert_generic_500(client.put(f"/api/medicines/{paracetamol['id']}", json={"price": "1"}))

    def test_stock_adjustment(self, client, paracetamol, monkeypatch):
        from app.services import inventory_service

        monkeypatch.setattr(inventory_service, "adjust_stock", self._boom)
        self._assert_generic_500(client.patch(f"/api/medicines/{paracetamol['id']}/stock", json={"delta": 1}))

    def test_bulk_and_import(self, client, monkeypatch):
        from app.services import inventory_service

        monkeypatch.setattr(inventory_service, "add_medicines", self._boom)
        self._assert_generic_500(client.post("/api/medicines/bulk", json=[{"name": "A", "price": "1"}]))
        resp = client.post("/api/medicines/import", files={"file": ("m.csv", "name,price\nA,1\n", "text/csv")})
        self._assert_generic_500(resp)
