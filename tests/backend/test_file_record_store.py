from attribute_lib.storage import FileRecordStore, RecordCodec, RecordStatus, record_key
from attribute_lib.storage.serializer import YAMLSerializer


def make_store(tmp_path, **kwargs):
    root = tmp_path / "attributes"
    root.mkdir(exist_ok=True)
    return FileRecordStore(root, **kwargs)


def test_path_for_encodes_components(tmp_path):
    s = make_store(tmp_path)
    assert s.path_for("plugin", "alice").name == "plugin.alice"
    assert s.path_for("my ns", "a/b").name == "my%20ns.a%2Fb"
    # Dots are encoded so the separator is unambiguous
    assert s.path_for("a.b", "c").name == "a%2Eb.c"
    assert s.path_for("a", "b.c").name == "a.b%2Ec"
    assert record_key("a.b", "c") != record_key("a", "b.c")


def test_missing_record_loads_empty(tmp_path):
    s = make_store(tmp_path)
    res = s.load_record("ns", "alice")
    assert res.attributes == {}
    assert res.status is RecordStatus.ABSENT
    assert s.load("ns", "alice") == {}


def test_save_load_delete(tmp_path):
    s = make_store(tmp_path)
    assert s.save("ns", "alice", {"x": 1, "y": [1, 2]}) is True
    assert s.path_for("ns", "alice").is_file()

    fresh = FileRecordStore(s.store_path)
    res = fresh.load_record("ns", "alice")
    assert res.ok
    assert res.attributes == {"x": 1, "y": [1, 2]}

    assert s.delete("ns", "alice") is True
    assert not s.path_for("ns", "alice").exists()
    assert s.load("ns", "alice") == {}
    # deleting again is idempotent
    assert s.delete("ns", "alice") is True


def test_save_writes_through_cache(tmp_path):
    s = make_store(tmp_path)
    s.save("ns", "alice", {"x": 1})
    assert s.path_for("ns", "alice") in s.cache
    # Served from cache, even if the file vanishes behind our back
    s.path_for("ns", "alice").unlink()
    assert s.load("ns", "alice") == {"x": 1}


def test_delete_evicts_cache(tmp_path):
    s = make_store(tmp_path)
    s.save("ns", "alice", {"x": 1})
    s.delete("ns", "alice")
    assert s.path_for("ns", "alice") not in s.cache
    assert s.load("ns", "alice") == {}


def test_corrupt_record_loads_empty(tmp_path):
    s = make_store(tmp_path)
    s.path_for("ns", "alice").write_bytes(b"\x00garbage\xff")
    res = s.load_record("ns", "alice")
    assert res.status is RecordStatus.CORRUPT
    assert res.attributes == {}


def test_record_key_mismatch_is_corrupt(tmp_path):
    s = make_store(tmp_path)
    packet = s.codec.encode(record_key("ns", "bob"), {"secret": 1}, True)
    s.path_for("ns", "alice").write_bytes(packet)
    res = s.load_record("ns", "alice")
    assert res.status is RecordStatus.CORRUPT
    assert res.attributes == {}


def test_compressed_and_plain_records_coexist(tmp_path):
    compressed = make_store(tmp_path, compress=True)
    compressed.save("ns", "alice", {"a": 1})
    plain = FileRecordStore(compressed.store_path, compress=False)
    plain.save("ns", "bob", {"b": 2})

    # Either configuration reads both records
    for store in (FileRecordStore(compressed.store_path, compress=True),
                  FileRecordStore(compressed.store_path, compress=False)):
        assert store.load("ns", "alice") == {"a": 1}
        assert store.load("ns", "bob") == {"b": 2}


def test_yaml_inner_serializer(tmp_path):
    s = make_store(tmp_path, codec=RecordCodec(serializer=YAMLSerializer()))
    s.save("ns", "alice", {"k": "v"})
    assert FileRecordStore(s.store_path, codec=RecordCodec(serializer=YAMLSerializer())).load("ns", "alice") == {"k": "v"}


def test_unserializable_save_fails(tmp_path):
    s = make_store(tmp_path)
    assert s.save("ns", "alice", {"x": object()}) is False
    assert not s.path_for("ns", "alice").exists()
    assert s.path_for("ns", "alice") not in s.cache


def test_failed_write_returns_false(tmp_path):
    s = FileRecordStore(tmp_path / "does-not-exist")
    assert s.save("ns", "alice", {"x": 1}) is False
    assert s.path_for("ns", "alice") not in s.cache


def test_list_users(tmp_path):
    s = make_store(tmp_path)
    s.save("ns", "bob", {"k": 1})
    s.save("ns", "alice", {"k": 1})
    s.save("ns", "a.b/c", {"k": 1})
    s.save("other", "carol", {"k": 1})
    s.save("ns.sub", "dave", {"k": 1})
    # foreign and temporary files are ignored
    (s.store_path / "ns.eve.tmp").write_bytes(b"")
    (s.store_path / "ns.").mkdir()

    assert s.list_users("ns") == ["a.b/c", "alice", "bob"]
    assert s.list_users("other") == ["carol"]
    assert s.list_users("ns.sub") == ["dave"]
    assert s.list_users("empty") == []


def test_list_users_missing_root(tmp_path):
    assert FileRecordStore(tmp_path / "nope").list_users("ns") == []


def test_overlong_name_loads_as_absent(tmp_path):
    s = make_store(tmp_path)
    res = s.load_record("ns", "u" * 300)
    assert res.attributes == {}
    assert res.status is RecordStatus.ABSENT
    assert s.save("ns", "u" * 300, {"k": 1}) is False


def test_cache_matches_what_disk_returns(tmp_path):
    s = make_store(tmp_path)
    assert s.save("ns", "alice", {"a": {1: (2, 3)}}) is True
    assert s.load("ns", "alice") == {"a": {"1": [2, 3]}}
    assert FileRecordStore(s.store_path).load("ns", "alice") == {"a": {"1": [2, 3]}}
