"""
Unit tests for the Store

Each call is its own transaction; these tests go through the public surface
only, the way the API and the printer aggregator use it.
"""
import threading

import pytest

from filaledger.exceptions import ValidationError, MaterialNotFoundError
from filaledger.models.taxonomy import CUSTOM_LABEL
from filaledger.schemas.material import MaterialUpdate
from filaledger.schemas.preset import PresetCreate


class TestInitialize:
    """Test first-start seeding"""

    def test_seeds_empty_store_once(self, store):
        """Test that seeding runs only into an empty store"""
        assert store.initialize() is True
        preset_count = len(store.list_presets())
        assert preset_count > 0
        assert "Bambu Lab" in store.brands()

        assert store.initialize() is False
        assert len(store.list_presets()) == preset_count

    def test_seeding_can_be_disabled(self, store):
        """Test initialize without built-in data"""
        assert store.initialize(seed_builtin=False) is False
        assert store.brands() == [CUSTOM_LABEL]

    def test_builtin_presets_survive_delete(self, seeded_store):
        """Built-in presets are not removed"""
        ids = [p.id for p in seeded_store.list_presets()]
        assert seeded_store.delete_presets(ids[:3]) == 0
        assert len(seeded_store.list_presets()) == len(ids)


class TestTaxonomy:
    """Test taxonomy operations through the store"""

    def test_add_custom_brand_twice(self, seeded_store):
        """Test that a custom brand is added once"""
        seeded_store.add_custom_brand("Elegoo")
        seeded_store.add_custom_brand("Elegoo")
        brands = seeded_store.brands()
        assert brands.count("Elegoo") == 1
        assert brands[-1] == CUSTOM_LABEL

    def test_taxonomy_snapshot(self, seeded_store):
        """Test the combined taxonomy view"""
        seeded_store.add_custom_main_category("PP")
        taxonomy = seeded_store.taxonomy()
        assert taxonomy["main_categories"][-2:] == ["PP", CUSTOM_LABEL]
        assert taxonomy["custom"]["main_category"] == ["PP"]
        assert taxonomy["custom"]["brand"] == []

    def test_failed_add_rolls_back(self, seeded_store):
        """Test that a rejected label leaves nothing behind"""
        with pytest.raises(ValidationError):
            seeded_store.add_custom_sub_category("   ")
        assert seeded_store.custom_labels("sub_category") == []

    def test_material_labels_are_registered(self, seeded_store, material_data):
        """A spool with new labels extends the taxonomy"""
        seeded_store.add_material(material_data(brand="Elegoo", main_category="PLA Galaxy", sub_category=""))
        assert seeded_store.custom_labels("brand") == ["Elegoo"]
        assert seeded_store.custom_labels("main_category") == ["PLA Galaxy"]
        assert seeded_store.custom_labels("sub_category") == []
        assert seeded_store.brands()[-2:] == ["Elegoo", CUSTOM_LABEL]

    def test_preset_labels_are_registered(self, seeded_store):
        """A preset with a new brand extends the taxonomy"""
        seeded_store.add_preset(PresetCreate(brand="Kingroon", main_category="PLA", color_name="Sky"))
        assert seeded_store.custom_labels("brand") == ["Kingroon"]
        assert seeded_store.custom_labels("main_category") == []

    def test_updated_labels_are_registered(self, seeded_store, material_data):
        """Editing a spool into a new category registers it"""
        material = seeded_store.add_material(material_data())
        seeded_store.update_material(material.id, MaterialUpdate(main_category="PLA Galaxy"))
        assert seeded_store.custom_labels("main_category") == ["PLA Galaxy"]


class TestMaterials:
    """Test spool operations through the store"""

    def test_returned_entities_are_usable_after_commit(self, store, material_data):
        """Test that returned spools are readable after the session closes"""
        material = store.add_material(material_data())
        assert material.full_name == "Bambu Lab PLA Matte Ivory White"
        assert store.get_material(material.id).remaining_weight == 1000.0

    def test_mark_as_depleted_missing_is_noop(self, store):
        """Test that depleting an unknown spool returns None"""
        assert store.mark_as_depleted("missing") is None

    def test_mark_as_depleted(self, store, material_data):
        """Test depleting a spool through the store"""
        material = store.add_material(material_data(price=100.0))
        depleted = store.mark_as_depleted(material.id)
        assert depleted.remaining_weight == 0.0
        assert depleted.initial_weight == 1000.0
        assert depleted.price == 100.0

    def test_consume_unknown_raises(self, store):
        """Test that drawing from an unknown spool raises"""
        with pytest.raises(MaterialNotFoundError):
            store.consume("missing", 5)

    def test_failed_update_leaves_material_unchanged(self, store, material_data):
        """Test that a rejected edit is rolled back"""
        material = store.add_material(material_data())
        with pytest.raises(ValidationError):
            store.update_material(material.id, MaterialUpdate(price=300.0, remaining_weight=2000.0))
        assert store.get_material(material.id).price == 100.0

    def test_inventory_summary(self, store, material_data):
        """Test the inventory summary numbers"""
        a = store.add_material(material_data(brand="Bambu Lab"))
        b = store.add_material(material_data(brand="eSUN", initial_weight=500.0))
        store.consume(a.id, 100)
        store.mark_as_depleted(b.id)

        summary = store.inventory_summary()
        assert summary["material_count"] == 2
        assert summary["available_count"] == 1
        assert summary["depleted_count"] == 1
        assert summary["total_remaining_weight"] == 900.0
        assert summary["total_used_weight"] == 600.0
        assert [entry["brand"] for entry in summary["by_brand"]] == ["Bambu Lab", "eSUN"]


class TestPrintRecords:
    """Test print logging through the store"""

    def test_create_then_add(self, store, material_data):
        """Test creating a record and logging it separately"""
        material = store.add_material(material_data())
        record = store.create_single_material_record("Benchy", "", material.id, 20.0)

        # consumption is already committed, the record is not logged yet
        assert store.get_material(material.id).remaining_weight == 980.0
        assert store.list_print_records() == []

        store.add_print_record(record)
        assert [r.id for r in store.list_print_records()] == [record.id]

    def test_multi_material_scenario(self, store, material_data):
        """Test the clamped multi-material allocation"""
        a = store.add_material(material_data(name="A", initial_weight=40.0))
        b = store.add_material(material_data(name="B", initial_weight=100.0))

        record = store.record_multi_material_print("Duo", "", [(a.id, 50.0), (b.id, 30.0)])

        assert [(u.material_id, u.weight_used) for u in record.usages] == [(a.id, 40.0), (b.id, 30.0)]
        assert store.get_material(a.id).remaining_weight == 0.0
        assert store.get_material(b.id).remaining_weight == 70.0

    def test_multi_with_no_resolved_material_logs_nothing(self, store):
        """Test that nothing is logged when no spool resolves"""
        assert store.record_multi_material_print("Ghost", "", [("x", 10.0)]) is None
        assert store.list_print_records() == []

    def test_single_with_unknown_material(self, store):
        """Test that an unknown spool logs nothing"""
        assert store.record_single_material_print("Ghost", "", "missing", 10.0) is None
        assert store.list_print_records() == []

    def test_cost_scenario(self, store, material_data):
        """Test cost before and after a price edit"""
        material = store.add_material(material_data(price=100.0, initial_weight=1000.0))
        record = store.record_single_material_print("Box", "", material.id, 200.0)
        assert store.get_cost_for_record(record) == pytest.approx(20.0)

        store.update_material(material.id, MaterialUpdate(price=200.0))
        assert store.get_cost_for_record(record) == pytest.approx(40.0)

    def test_delete_keeps_weights_and_updates_totals(self, store, material_data):
        """Test that deleting a record only changes totals"""
        material = store.add_material(material_data())
        first = store.record_single_material_print("One", "", material.id, 100.0)
        store.record_single_material_print("Two", "", material.id, 50.0)

        assert store.total_consumed_weight() == pytest.approx(150.0)
        store.delete_print_record(first.id)
        assert store.total_consumed_weight() == pytest.approx(50.0)
        assert store.get_material(material.id).remaining_weight == 850.0

    def test_record_after_material_deleted(self, store, material_data):
        """Test a record whose spool was deleted"""
        material = store.add_material(material_data())
        record = store.record_single_material_print("Benchy", "", material.id, 100.0)
        store.delete_material(material.id)

        fetched = store.get_print_record(record.id)
        assert fetched.material_name == "Bambu Lab PLA Matte Ivory White"
        assert store.get_cost_for_record(fetched) == 0.0


class TestStatistics:
    """Test dashboard statistics"""

    def test_statistics(self, store, material_data):
        """Test the dashboard numbers"""
        store.recent_records_limit = 2
        material = store.add_material(material_data(price=100.0))
        for name in ["A", "B", "C"]:
            store.record_single_material_print(name, "", material.id, 100.0)
        store.notify_print_count(17)

        stats = store.statistics()
        assert stats["record_count"] == 3
        assert stats["total_consumed_weight"] == pytest.approx(300.0)
        assert stats["total_consumed_cost"] == pytest.approx(30.0)
        assert stats["average_cost_per_gram"] == pytest.approx(0.1)
        assert stats["observed_print_count"] == 17
        assert [r.model_name for r in stats["recent_records"]] == ["C", "B"]
        assert all(cost == pytest.approx(10.0) for cost in stats["recent_record_costs"].values())

    def test_observed_count_starts_unknown(self, store):
        """Test that the print count is unknown until reported"""
        assert store.observed_print_count is None
        assert store.statistics()["observed_print_count"] is None


class TestConcurrency:
    """Test that store calls are serialized"""

    def test_parallel_consumption_never_overdraws(self, store, material_data):
        """Test that concurrent draws never overdraw a spool"""
        material = store.add_material(material_data(initial_weight=100.0))
        applied = []

        def worker():
            for _ in range(10):
                applied.append(store.consume(material.id, 3.0).applied)

        threads = [threading.Thread(target=worker) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sum(applied) == pytest.approx(100.0)
        assert store.get_material(material.id).remaining_weight == pytest.approx(0.0)
