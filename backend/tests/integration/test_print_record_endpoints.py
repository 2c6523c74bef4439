"""
Integration tests for print record endpoints

Logging prints draws filament; costs follow current spool prices.
"""
import pytest
from fastapi.testclient import TestClient

from filaledger.api.deps import get_store
from filaledger.main import app


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def spool(client):
    def _make(name="Black", price=100.0, weight=1000.0):
        response = client.post("/api/v1/materials", json={
            "brand": "Bambu Lab", "main_category": "PLA", "sub_category": "Basic",
            "name": name, "price": price, "initial_weight": weight,
        })
        assert response.status_code == 201
        return response.json()
    return _make


def _remaining(client, material_id):
    return client.get(f"/api/v1/materials/{material_id}").json()["remaining_weight"]


class TestSingleMaterialRecord:
    """Test logging single-material prints"""

    def test_record_and_cost(self, client, spool):
        """Test logging a single-material print and its cost"""
        material = spool()
        response = client.post("/api/v1/print-records/single", json={
            "model_name": "Benchy",
            "maker_world_link": "https://makerworld.com/en/models/1",
            "material_id": material["id"],
            "weight": 200.0,
        })
        assert response.status_code == 201, response.text
        body = response.json()
        assert body["clamped"] == []
        record = body["record"]
        assert record["cost"] == pytest.approx(20.0)
        assert record["has_maker_world_link"] is True
        assert record["is_multi_material"] is False
        assert record["usages"][0]["material_name"] == "Bambu Lab PLA Basic Black"
        assert _remaining(client, material["id"]) == 800.0

    def test_over_consumption_is_clamped(self, client, spool):
        """Test that an oversized print is clamped and reported"""
        material = spool(weight=40.0)
        body = client.post("/api/v1/print-records/single", json={
            "model_name": "Vase", "material_id": material["id"], "weight": 50.0,
        }).json()
        assert body["clamped"] == [material["id"]]
        assert body["record"]["total_weight"] == 40.0
        assert _remaining(client, material["id"]) == 0.0

    def test_unknown_material(self, client):
        """Test logging against an unknown spool"""
        response = client.post("/api/v1/print-records/single", json={
            "model_name": "Ghost", "material_id": "missing", "weight": 5.0,
        })
        assert response.status_code == 404
        assert response.json()["error"] == "MATERIAL_NOT_FOUND"
        assert client.get("/api/v1/print-records").json() == []

    @pytest.mark.parametrize("weight", [0, -5])
    def test_non_positive_weight_rejected(self, client, spool, weight):
        """Test that non-positive weights are rejected"""
        material = spool()
        response = client.post("/api/v1/print-records/single", json={
            "model_name": "Benchy", "material_id": material["id"], "weight": weight,
        })
        assert response.status_code == 422
        assert _remaining(client, material["id"]) == 1000.0


class TestMultiMaterialRecord:
    """Test logging multi-material prints"""

    def test_multi_material_allocation(self, client, spool):
        """Test the clamped multi-material allocation"""
        a = spool(name="A", weight=40.0)
        b = spool(name="B", weight=100.0)
        body = client.post("/api/v1/print-records/multi", json={
            "model_name": "Duo",
            "usages": [{"material_id": a["id"], "weight": 50.0}, {"material_id": b["id"], "weight": 30.0}],
        }).json()

        usages = body["record"]["usages"]
        assert [(u["material_id"], u["weight_used"]) for u in usages] == [(a["id"], 40.0), (b["id"], 30.0)]
        assert body["clamped"] == [a["id"]]
        assert _remaining(client, a["id"]) == 0.0
        assert _remaining(client, b["id"]) == 70.0

    def test_unknown_materials_are_skipped(self, client, spool):
        """Test that unknown spools are skipped and reported"""
        a = spool()
        body = client.post("/api/v1/print-records/multi", json={
            "model_name": "Partial",
            "usages": [{"material_id": "missing", "weight": 10.0}, {"material_id": a["id"], "weight": 10.0}],
        }).json()
        assert body["skipped"] == ["missing"]
        assert [u["material_id"] for u in body["record"]["usages"]] == [a["id"]]

    def test_nothing_resolved(self, client):
        """Test that nothing is logged when no spool resolves"""
        response = client.post("/api/v1/print-records/multi", json={
            "model_name": "Ghost", "usages": [{"material_id": "x", "weight": 1.0}],
        })
        assert response.status_code == 201
        assert response.json() == {"record": None, "clamped": [], "skipped": ["x"]}


class TestRecordQueries:
    """Test record listing, detail and deletion"""

    def test_detail_breakdown_after_material_deleted(self, client, spool):
        """Test the breakdown after a spool is deleted"""
        a = spool(name="A", price=100.0)
        b = spool(name="B", price=50.0)
        record = client.post("/api/v1/print-records/multi", json={
            "model_name": "Duo",
            "usages": [{"material_id": a["id"], "weight": 100.0}, {"material_id": b["id"], "weight": 100.0}],
        }).json()["record"]
        client.delete(f"/api/v1/materials/{a['id']}")

        detail = client.get(f"/api/v1/print-records/{record['id']}").json()
        assert [item["resolved"] for item in detail["breakdown"]] == [False, True]
        assert detail["breakdown"][0]["cost"] == 0.0
        assert detail["cost"] == pytest.approx(5.0)

    def test_cost_follows_price_edit(self, client, spool):
        """Test that record cost follows price edits"""
        material = spool()
        record = client.post("/api/v1/print-records/single", json={
            "model_name": "Box", "material_id": material["id"], "weight": 200.0,
        }).json()["record"]
        client.patch(f"/api/v1/materials/{material['id']}", json={"price": 200.0})

        assert client.get(f"/api/v1/print-records/{record['id']}").json()["cost"] == pytest.approx(40.0)

    def test_search(self, client, spool):
        """Test record search"""
        material = spool()
        for name in ("Dragon", "Benchy"):
            client.post("/api/v1/print-records/single", json={
                "model_name": name, "material_id": material["id"], "weight": 1.0,
            })
        results = client.get("/api/v1/print-records", params={"q": "drag"}).json()
        assert [r["model_name"] for r in results] == ["Dragon"]

    def test_delete_keeps_weight(self, client, spool):
        """Test that deleting a record keeps spool weights"""
        material = spool()
        record = client.post("/api/v1/print-records/single", json={
            "model_name": "Benchy", "material_id": material["id"], "weight": 100.0,
        }).json()["record"]

        assert client.delete(f"/api/v1/print-records/{record['id']}").status_code == 204
        assert _remaining(client, material["id"]) == 900.0
        assert client.get(f"/api/v1/print-records/{record['id']}").status_code == 404
        assert client.delete(f"/api/v1/print-records/{record['id']}").status_code == 404


class TestRecordValidation:
    """Request checks before anything is drawn"""

    def test_blank_model_name_rejected(self, client, spool):
        """A whitespace-only model name is a validation error"""
        material = spool()
        response = client.post("/api/v1/print-records/single", json={
            "model_name": "   ", "material_id": material["id"], "weight": 5.0,
        })
        assert response.status_code == 422
        assert _remaining(client, material["id"]) == 1000.0

    def test_blank_model_name_rejected_for_multi(self, client, spool):
        """Multi-material logging checks the model name too"""
        material = spool()
        response = client.post("/api/v1/print-records/multi", json={
            "model_name": " ", "usages": [{"material_id": material["id"], "weight": 5.0}],
        })
        assert response.status_code == 422
        assert _remaining(client, material["id"]) == 1000.0
