"""Tests for the workspace document store."""

import json

import pytest

from wpdind.exceptions import ConcurrentModificationError, StateError
from wpdind.models.instance import InstanceRecord, StackSpec
from wpdind.services.workspace_store import WorkspaceStore


def _record(name="shop"):
    return InstanceRecord(
        name=name, port=8001, stack=StackSpec("nginx", "8.3", "8.0"), created_at="now"
    )


def test_load_missing_returns_default(store):
    workspace = store.load()

    assert workspace.instances == {}
    assert workspace.revision == 0
    assert workspace.workspace_type == "multi-instance"
    assert not store.exists()


def test_save_bumps_revision(store):
    workspace = store.load()
    workspace.instances["shop"] = _record()
    store.save(workspace)

    assert workspace.revision == 1
    data = json.loads(store.config_path.read_text())
    assert data["revision"] == 1
    assert data["instances"]["shop"]["port"] == 8001
    assert data["instances"]["shop"]["status"] == "creating"


def test_stale_revision_is_rejected(store):
    first = store.load()
    second = store.load()

    first.instances["a"] = _record("a")
    store.save(first)

    second.instances["b"] = _record("b")
    with pytest.raises(ConcurrentModificationError) as exc_info:
        store.save(second)
    assert exc_info.value.expected_revision == 0
    assert exc_info.value.actual_revision == 1


def test_unchanged_save_leaves_file_untouched(store):
    with store.transaction() as workspace:
        workspace.workspace_name = "demo"
    before = store.config_path.read_bytes()

    with store.transaction():
        pass

    assert store.config_path.read_bytes() == before
    assert store.load().revision == 1


def test_unknown_keys_survive_round_trip(store):
    store.config_path.parent.mkdir(parents=True, exist_ok=True)
    store.config_path.write_text(
        json.dumps({"workspaceName": "demo", "customTool": {"x": 1}, "revision": 4})
    )

    with store.transaction() as workspace:
        workspace.instances["shop"] = _record()

    data = json.loads(store.config_path.read_text())
    assert data["customTool"] == {"x": 1}
    assert data["revision"] == 5


def test_failed_transaction_does_not_write(store):
    with store.transaction() as workspace:
        workspace.workspace_name = "demo"
    before = store.config_path.read_bytes()

    with pytest.raises(RuntimeError):
        with store.transaction() as workspace:
            workspace.instances["shop"] = _record()
            raise RuntimeError("boom")

    assert store.config_path.read_bytes() == before


def test_invalid_json_raises_state_error(store):
    store.config_path.parent.mkdir(parents=True, exist_ok=True)
    store.config_path.write_text("{not json")

    with pytest.raises(StateError, match="not valid JSON"):
        store.load()


def test_non_object_document_raises_state_error(store):
    store.config_path.parent.mkdir(parents=True, exist_ok=True)
    store.config_path.write_text("[]")

    with pytest.raises(StateError):
        store.load()


def test_no_temp_files_left_behind(tmp_path):
    store = WorkspaceStore(tmp_path / "config.json")
    with store.transaction() as workspace:
        workspace.workspace_name = "demo"

    leftovers = [p.name for p in tmp_path.iterdir() if p.name.endswith(".tmp")]
    assert leftovers == []
