"""
Integration tests for statistics, backup and printer status endpoints
"""
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from filaledger.api.deps import get_printer_status, get_store
from filaledger.main import app
from filaledger.schemas.printer import PrintTaskList
from filaledger.services.printer_status import PrinterStatusAggregator


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_printer_status] = lambda: None
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def material(client):
    return client.post("/api/v1/materials", json={
        "brand": "eSUN", "main_category": "PLA+", "sub_category": "None", "name": "Red",
        "price": 80.0, "initial_weight": 1000.0,
    }).json()


class TestRootEndpoints:
    """Test service endpoints"""

    def test_root_and_health(self, client):
        """Test the root and health endpoints"""
        assert client.get("/").json()["status"] == "online"
        assert client.get("/health").json() == {"status": "healthy"}


class TestStatistics:
    """Test the statistics endpoint"""

    def test_empty(self, client):
        """Test statistics of an empty store"""
        stats = client.get("/api/v1/statistics").json()
        assert stats["record_count"] == 0
        assert stats["total_consumed_cost"] == 0.0
        assert stats["average_cost_per_gram"] == 0.0
        assert stats["recent_records"] == []

    def test_with_records(self, client, material):
        """Test statistics after two prints"""
        for weight in (100.0, 50.0):
            client.post("/api/v1/print-records/single", json={
                "model_name": f"Part {weight}", "material_id": material["id"], "weight": weight,
            })

        stats = client.get("/api/v1/statistics").json()
        assert stats["record_count"] == 2
        assert stats["total_consumed_weight"] == pytest.approx(150.0)
        assert stats["total_consumed_cost"] == pytest.approx(12.0)
        assert stats["average_cost_per_gram"] == pytest.approx(0.08)
        assert stats["inventory"]["total_remaining_weight"] == pytest.approx(850.0)
        assert stats["recent_records"][0]["model_name"] == "Part 50.0"
        assert stats["recent_records"][0]["cost"] == pytest.approx(4.0)


class TestBackup:
    """Test backup export and restore"""

    def test_export_and_restore(self, client, material):
        """Test exporting and restoring a backup"""
        client.post("/api/v1/print-records/single", json={
            "model_name": "Benchy", "material_id": material["id"], "weight": 15.0,
        })
        document = client.get("/api/v1/backup").json()
        assert len(document["materials"]) == 1
        assert document["print_records"][0]["usages"][0]["material_name"] == "eSUN PLA+ Red"

        client.delete(f"/api/v1/materials/{material['id']}")
        result = client.post("/api/v1/backup/restore", json=document).json()
        assert result["materials"] == 1
        assert client.get(f"/api/v1/materials/{material['id']}").json()["remaining_weight"] == 985.0

    def test_restore_rejects_broken_document(self, client, material):
        """Test that a broken backup changes nothing"""
        response = client.post("/api/v1/backup/restore", json={"materials": [{"id": "x"}]})
        assert response.status_code == 422
        assert len(client.get("/api/v1/materials").json()) == 1


class TestPrinterStatus:
    """Test printer status endpoints"""

    def test_disabled(self, client):
        """Test the status when the cloud is disabled"""
        body = client.get("/api/v1/printer-status").json()
        assert body["enabled"] is False
        assert client.post("/api/v1/printer-status/refresh").status_code == 409

    def test_refresh_and_record_task(self, client, store, material):
        """Test refreshing tasks and logging one"""
        cloud = MagicMock()
        cloud.fetch_recent_tasks.return_value = PrintTaskList.model_validate({
            "total": 9,
            "hits": [{"id": 7, "title": "Gridfinity bin", "weight": 33.0, "amsDetailMapping": []}],
        })
        aggregator = PrinterStatusAggregator(store, cloud)
        app.dependency_overrides[get_printer_status] = lambda: aggregator

        refreshed = client.post("/api/v1/printer-status/refresh").json()
        assert refreshed["observed_print_count"] == 9
        assert len(refreshed["tasks"]) == 1

        response = client.post("/api/v1/printer-status/tasks/7/record", json={"material_ids": [material["id"]]})
        assert response.status_code == 201
        assert response.json()["record"]["model_name"] == "Gridfinity bin"
        assert client.get("/api/v1/statistics").json()["observed_print_count"] == 9

        assert client.post("/api/v1/printer-status/tasks/8/record",
                           json={"material_ids": [material["id"]]}).status_code == 404

    def test_recording_heavy_task_reports_clamp(self, client, store):
        """A task heavier than the spool is clamped and reported"""
        small = client.post("/api/v1/materials", json={
            "brand": "eSUN", "main_category": "PLA+", "name": "Scrap", "price": 10.0, "initial_weight": 20.0,
        }).json()
        cloud = MagicMock()
        cloud.fetch_recent_tasks.return_value = PrintTaskList.model_validate({
            "total": 1,
            "hits": [{"id": 11, "title": "Big bracket", "weight": 33.0, "amsDetailMapping": []}],
        })
        aggregator = PrinterStatusAggregator(store, cloud)
        app.dependency_overrides[get_printer_status] = lambda: aggregator
        client.post("/api/v1/printer-status/refresh")

        body = client.post("/api/v1/printer-status/tasks/11/record", json={"material_ids": [small["id"]]}).json()
        assert body["clamped"] == [small["id"]]
        assert body["skipped"] == []
        assert body["record"]["total_weight"] == 20.0

    def test_recording_task_with_unknown_spool_reports_skip(self, client, store, material):
        """Unknown spools in a multi-spool task are listed as skipped"""
        cloud = MagicMock()
        cloud.fetch_recent_tasks.return_value = PrintTaskList.model_validate({
            "total": 1,
            "hits": [{"id": 12, "title": "Sign", "weight": 40.0, "amsDetailMapping": []}],
        })
        aggregator = PrinterStatusAggregator(store, cloud)
        app.dependency_overrides[get_printer_status] = lambda: aggregator
        client.post("/api/v1/printer-status/refresh")

        body = client.post("/api/v1/printer-status/tasks/12/record",
                           json={"material_ids": [material["id"], "missing"]}).json()
        assert body["skipped"] == ["missing"]
        assert body["clamped"] == []
        assert [u["weight_used"] for u in body["record"]["usages"]] == [20.0]
