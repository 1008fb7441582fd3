import threading

import pytest

from gokata.sharded_map import ShardedMap, hash_key


def test_basic_operations():
    m = ShardedMap(16)
    m.set("foo", 42)
    assert m.get("foo") == 42
    assert "foo" in m

    assert m.get("bar") is None
    assert "bar" not in m

    m.set("foo", 100)
    assert m.get("foo") == 100

    m.delete("foo")
    assert "foo" not in m
    assert m.get("foo", -1) == -1


def test_delete_missing_is_noop():
    m = ShardedMap(4)
    m.set("a", 1)
    m.delete("zzz")
    assert m.keys() == ["a"]


def test_keys():
    m = ShardedMap(8)
    keys = ["a", "b", "c", "d", "e"]
    for i, k in enumerate(keys):
        m.set(k, i)
    result = m.keys()
    assert len(result) == len(keys)
    assert set(result) == set(keys)
    assert len(m) == 5


def test_int_keys():
    m = ShardedMap(16)
    m.set(1, "one")
    m.set(2, "two")
    m.set(1000000, "million")
    assert m.get(1) == "one"
    assert m.get(1000000) == "million"
    assert m.get(2) == "two"


def test_concurrent_access():
    m = ShardedMap(32)

    def writer(worker):
        for j in range(1000):
            key = worker * 1000 + j
            m.set(key, key * 2)

    def reader():
        for j in range(1000):
            m.get(j)

    def deleter(worker):
        for j in range(100):
            m.delete(worker * 100 + j)

    def lister():
        m.keys()

    threads = [threading.Thread(target=writer, args=(i,)) for i in range(10)]
    threads += [threading.Thread(target=reader) for _ in range(10)]
    threads += [threading.Thread(target=deleter, args=(i,)) for i in range(5)]
    threads += [threading.Thread(target=lister) for _ in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert 9500 <= len(m) <= 10000
    for key in range(500, 10000):
        assert m.get(key) == key * 2


def test_example_usage():
    m = ShardedMap(16)
    m.set("users:alice", 100)
    m.set("users:bob", 200)
    assert f"Alice's count: {m.get('users:alice')}" == "Alice's count: 100"


@pytest.mark.parametrize("shards", [0, -3])
def test_invalid_shard_count(shards):
    with pytest.raises(ValueError):
        ShardedMap(shards)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("", 0xCBF29CE484222325),
        ("a", 0xAF63DC4C8601EC8C),
        ("ab", 0x089C4407B545986A),
        ("abc", 0xE71FA2190541574B),
    ],
)
def test_hash_key_fnv1a_vectors(text, expected):
    assert hash_key(text) == expected


def test_int_key_hashes_like_its_text():
    assert hash_key(1000000) == hash_key("1000000")


def test_shard_index_is_stable_and_in_range():
    m = ShardedMap(7)
    for key in ["x", "y", 42, "users:alice"]:
        index = m.shard_index(key)
        assert 0 <= index < 7
        assert m.shard_index(key) == index
        assert index == hash_key(key) % 7


def test_single_shard_holds_everything():
    m = ShardedMap(1)
    for i in range(50):
        m.set(i, str(i))
    assert len(m) == 50
    assert sorted(m.keys()) == list(range(50))