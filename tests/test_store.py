import json

import pytest

from stwdowatcher.config import Settings
from stwdowatcher.models import RetrievalMeta, SeenSet
from stwdowatcher.store import JsonStateStore, SeenStateCorrupted


def build_store(tmp_path) -> JsonStateStore:
    return JsonStateStore(seen_path=tmp_path / "seen.json",
                          meta_path=tmp_path / "meta.json")


def test_from_settings_uses_state_dir(tmp_path):
    store = JsonStateStore.from_settings(Settings(state_dir=tmp_path))
    assert store.seen_path == tmp_path / "stwdo-last.json"
    assert store.meta_path == tmp_path / "stwdo-meta.json"


def test_missing_files_load_as_defaults(tmp_path):
    store = build_store(tmp_path)
    assert store.load_meta() == RetrievalMeta()
    assert store.load_seen() == SeenSet()


def test_meta_round_trip_uses_camel_case_keys(tmp_path):
    store = build_store(tmp_path)
    store.save_meta(RetrievalMeta(etag='"abc"', last_modified="Sat, 18 Oct 2026 10:00:00 GMT"))

    assert json.loads(store.meta_path.read_text()) == {
        "etag": '"abc"',
        "lastModified": "Sat, 18 Oct 2026 10:00:00 GMT",
    }
    assert store.load_meta().etag == '"abc"'


def test_meta_omits_absent_fields(tmp_path):
    store = build_store(tmp_path)
    store.save_meta(RetrievalMeta(etag="v1"))
    assert json.loads(store.meta_path.read_text()) == {"etag": "v1"}


@pytest.mark.parametrize("payload", ["{not json", "[1, 2]", '{"etag": 5}'])
def test_malformed_meta_downgrades_to_empty(tmp_path, payload):
    store = build_store(tmp_path)
    store.meta_path.write_text(payload)
    assert store.load_meta() == RetrievalMeta()


def test_seen_round_trip_preserves_order(tmp_path):
    store = build_store(tmp_path)
    store.save_seen(SeenSet(["b", "a", "c"]))

    assert json.loads(store.seen_path.read_text()) == {"offers": ["b", "a", "c"]}
    assert store.load_seen().to_list() == ["b", "a", "c"]


@pytest.mark.parametrize(
    "payload",
    ['{"offers": "nope"}', '{"offers": [1, 2]}', "[]", '{"other": []}'],
)
def test_seen_with_unexpected_shape_is_empty(tmp_path, payload):
    store = build_store(tmp_path)
    store.seen_path.write_text(payload)
    assert store.load_seen() == SeenSet()


def test_unparseable_seen_file_raises(tmp_path):
    store = build_store(tmp_path)
    store.seen_path.write_text('{"offers": ["https://a"')

    with pytest.raises(SeenStateCorrupted):
        store.load_seen()


def test_save_creates_parent_directory_and_leaves_no_temp_files(tmp_path):
    store = JsonStateStore(seen_path=tmp_path / "state" / "seen.json",
                           meta_path=tmp_path / "state" / "meta.json")
    store.save_seen(SeenSet(["x"]))
    store.save_seen(SeenSet(["x", "y"]))

    assert [path.name for path in (tmp_path / "state").iterdir()] == ["seen.json"]
    assert store.load_seen().to_list() == ["x", "y"]


@pytest.mark.parametrize("payload", ["", "  \n"])
def test_blank_seen_file_loads_as_empty(tmp_path, payload):
    store = build_store(tmp_path)
    store.seen_path.write_text(payload)
    assert store.load_seen() == SeenSet()


def test_save_keeps_existing_file_mode(tmp_path):
    store = build_store(tmp_path)
    store.seen_path.write_text('{"offers": []}')
    store.seen_path.chmod(0o666)

    store.save_seen(SeenSet(["x"]))

    assert store.seen_path.stat().st_mode & 0o777 == 0o666


def test_save_new_file_is_world_readable(tmp_path):
    store = build_store(tmp_path)
    store.save_meta(RetrievalMeta(etag="v1"))
    assert store.meta_path.stat().st_mode & 0o777 == 0o644
