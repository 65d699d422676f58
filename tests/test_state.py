# Tests for runway.sync.state
# Record sets and YAML state stores

import pytest
import yaml

from runway.sync.state import (
    DURABLE_STATE_FILENAME,
    AssetRecord,
    PendingUpload,
    RecordSet,
    StateStore,
    open_stores,
)


@pytest.fixture
def records() -> RecordSet:
    """Record set with two assets."""
    record_set = RecordSet()
    record_set.upsert("assets/b.png", AssetRecord(hash="bbb", id="2", synced_at="2026-01-01T00:00:00+00:00"))
    record_set.upsert("assets/a.png", AssetRecord(hash="aaa", id="1"))
    return record_set


class TestAssetRecord:
    """Tests for AssetRecord serialization."""

    def test_to_dict_skips_none(self):
        assert AssetRecord(hash="h", id="5").to_dict() == {"hash": "h", "id": "5"}

    def test_from_dict_coerces_numeric_id(self):
        assert AssetRecord.from_dict({"hash": "h", "id": 123}).id == "123"

    def test_from_dict_requires_hash(self):
        with pytest.raises(ValueError):
            AssetRecord.from_dict({"id": "1"})


class TestRecordSet:
    """Tests for RecordSet."""

    def test_get_and_upsert(self, records):
        assert records.get("assets/a.png").id == "1"
        records.upsert("assets/a.png", AssetRecord(hash="new", id="9"))
        assert records.get("assets/a.png").hash == "new"
        assert records.get("missing") is None

    def test_remove(self, records):
        assert records.remove("assets/a.png") is True
        assert records.remove("assets/a.png") is False
        assert "assets/a.png" not in records

    def test_identities_sorted(self, records):
        assert records.identities() == ["assets/a.png", "assets/b.png"]
        assert list(records) == ["assets/a.png", "assets/b.png"]

    def test_prune(self, records):
        removed = records.prune(["assets/b.png"])
        assert removed == ["assets/a.png"]
        assert len(records) == 1

    def test_to_dict_sorted(self, records):
        assert list(records.to_dict()) == ["assets/a.png", "assets/b.png"]


class TestStateStore:
    """Tests for StateStore."""

    def test_missing_file_loads_empty(self, temp_dir):
        store = StateStore(temp_dir / "state.yaml")
        assert len(store.load("local")) == 0
        assert store.warnings == []

    def test_round_trip(self, temp_dir, records):
        store = StateStore(temp_dir / "state.yaml")
        store.persist("local", records)
        assert store.load("local") == records

    def test_persist_is_byte_stable(self, temp_dir, records):
        path = temp_dir / "state.yaml"
        store = StateStore(path)
        store.persist("local", records)
        first = path.read_bytes()
        store.persist("local", store.load("local"))
        assert path.read_bytes() == first

    def test_persist_keeps_other_targets(self, temp_dir, records):
        store = StateStore(temp_dir / "state.yaml")
        store.persist("production", records)
        store.persist("staging", RecordSet())
        assert store.load("production") == records

    def test_document_layout(self, temp_dir, records):
        path = temp_dir / "state.yaml"
        StateStore(path).persist("production", records)
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert data["version"] == 1
        assert data["targets"]["production"]["assets"]["assets/a.png"] == {"hash": "aaa", "id": "1"}

    def test_corrupt_yaml_degrades_with_warning(self, temp_dir):
        path = temp_dir / "state.yaml"
        path.write_text("targets: [unclosed", encoding="utf-8")
        store = StateStore(path)
        assert len(store.load("local")) == 0
        assert len(store.warnings) == 1
        assert "unreadable" in store.warnings[0]

    def test_malformed_record_degrades_with_warning(self, temp_dir):
        path = temp_dir / "state.yaml"
        path.write_text("version: 1\ntargets:\n  local:\n    assets:\n      a.png: 5\n", encoding="utf-8")
        store = StateStore(path)
        assert len(store.load("local")) == 0
        assert store.warnings

    def test_persist_over_corrupt_file(self, temp_dir, records):
        path = temp_dir / "state.yaml"
        path.write_text("targets: [unclosed", encoding="utf-8")
        store = StateStore(path)
        store.persist("local", records)
        assert StateStore(path).load("local") == records

    def test_clear(self, temp_dir, records):
        store = StateStore(temp_dir / "state.yaml")
        store.persist("local", records)
        assert store.clear("local") is True
        assert store.clear("local") is False
        assert len(store.load("local")) == 0


class TestPendingUploads:
    """Tests for in-progress markers."""

    def test_round_trip(self, temp_dir):
        store = StateStore(temp_dir / "state.yaml")
        store.persist_pending("production", {"a.png": PendingUpload(hash="h", started_at="t")})
        assert store.load_pending("production") == {"a.png": PendingUpload(hash="h", started_at="t")}

    def test_markers_do_not_touch_records(self, temp_dir, records):
        store = StateStore(temp_dir / "state.yaml")
        store.persist("production", records)
        store.persist_pending("production", {"a.png": PendingUpload(hash="h")})
        store.persist_pending("production", {})
        assert store.load("production") == records
        assert store.load_pending("production") == {}

    def test_clearing_nothing_creates_no_file(self, temp_dir):
        path = temp_dir / "state.yaml"
        StateStore(path).persist_pending("production", {})
        assert not path.exists()


class TestOpenStores:
    """Tests for open_stores."""

    def test_locations(self, temp_dir):
        durable, local = open_stores(temp_dir)
        assert durable.path == temp_dir / DURABLE_STATE_FILENAME
        assert local.path == temp_dir / ".runway" / "state.yaml"
