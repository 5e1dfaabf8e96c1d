"""Tests for cart snapshot stores"""
import asyncio
import json
from unittest.mock import AsyncMock

import pytest

from cartsync.cart import Cart, FileSnapshotStore, MemorySnapshotStore, Product, RedisSnapshotStore
from cartsync.cart.storage import CorruptSnapshot, decode_snapshot, encode_snapshot
from cartsync.errors import PersistenceError


KEY = "@RocketShoes:cart"


@pytest.fixture
def sample_cart():
    """Two-item cart"""
    return Cart((
        Product(id=2, title="Tênis VR", price="139.90", image="2.jpg", amount=2),
        Product(id=1, title="Tênis Leve", price="179.90", image="1.jpg", amount=1),
    ))


def test_decode_empty_values():
    """Test absent values decode to an empty cart"""
    assert decode_snapshot(None) == Cart()
    assert decode_snapshot("") == Cart()
    assert decode_snapshot("null") == Cart()
    assert decode_snapshot("[]") == Cart()


@pytest.mark.parametrize("raw", [
    "{not json",
    '{"id": 1}',
    '[{"id": 1, "title": "x", "price": 1, "image": "", "amount": 0}]',
    '[{"id": 1, "title": "x"}]',
    '[{"id": 1, "title": "x", "price": "abc", "image": "", "amount": 1}]',
    '[{"id": 1, "title": "x", "price": "NaN", "image": "", "amount": 1}]',
    '[{"id": 1, "title": "x", "price": true, "image": "", "amount": 1}]',
    '["oops"]',
    '[{"id": 1, "title": "x", "price": 1, "image": "", "amount": 1},'
    ' {"id": 1, "title": "x", "price": 1, "image": "", "amount": 1}]',
])
def test_decode_corrupt_values(raw):
    """Test malformed snapshots are reported as corrupt"""
    with pytest.raises(CorruptSnapshot):
        decode_snapshot(raw)


def test_encode_is_item_array(sample_cart):
    """Test the snapshot is a plain JSON array of line items"""
    data = json.loads(encode_snapshot(sample_cart))

    assert [item["id"] for item in data] == [2, 1]
    assert data[0] == {"id": 2, "title": "Tênis VR", "price": 139.9, "image": "2.jpg", "amount": 2}


class TestMemorySnapshotStore:
    """Tests for the in-memory store"""

    @pytest.mark.asyncio
    async def test_load_empty(self):
        assert await MemorySnapshotStore(KEY).load() == Cart()

    @pytest.mark.asyncio
    async def test_round_trip(self, sample_cart):
        store = MemorySnapshotStore(KEY)

        await store.save(sample_cart)

        assert await store.load() == sample_cart

    @pytest.mark.asyncio
    async def test_corrupt_value_discarded(self):
        store = MemorySnapshotStore(KEY, initial="[{broken")

        assert await store.load() == Cart()
        assert store.value is None

    @pytest.mark.asyncio
    async def test_bad_price_discarded(self):
        """Test an unparseable price is corrupt, not a free product"""
        raw = json.dumps([{"id": 1, "title": "x", "price": "abc", "image": "", "amount": 1}])
        store = MemorySnapshotStore(KEY, initial=raw)

        assert await store.load() == Cart()
        assert store.value is None


class TestFileSnapshotStore:
    """Tests for the file-backed store"""

    @pytest.mark.asyncio
    async def test_missing_file_loads_empty(self, tmp_path):
        store = FileSnapshotStore(tmp_path / "storage.json", KEY)

        assert await store.load() == Cart()

    @pytest.mark.asyncio
    async def test_restart_round_trip(self, tmp_path, sample_cart):
        """Test a fresh store instance reads what the previous one wrote"""
        path = tmp_path / "nested" / "storage.json"
        await FileSnapshotStore(path, KEY).save(sample_cart)

        loaded = await FileSnapshotStore(path, KEY).load()

        assert loaded == sample_cart
        assert [item.id for item in loaded] == [2, 1]

    @pytest.mark.asyncio
    async def test_last_write_wins(self, tmp_path, sample_cart):
        store = FileSnapshotStore(tmp_path / "storage.json", KEY)

        await store.save(sample_cart)
        await store.save(sample_cart.without(2))

        assert [item.id for item in await store.load()] == [1]

    @pytest.mark.asyncio
    async def test_keys_share_one_file(self, tmp_path, sample_cart):
        """Test other keys in the file are left alone"""
        path = tmp_path / "storage.json"
        path.write_text(json.dumps({"theme": "dark"}), encoding="utf-8")

        await FileSnapshotStore(path, KEY).save(sample_cart)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["theme"] == "dark"
        assert json.loads(data[KEY])[0]["id"] == 2

    @pytest.mark.asyncio
    async def test_no_temp_files_left(self, tmp_path, sample_cart):
        store = FileSnapshotStore(tmp_path / "storage.json", KEY)

        await store.save(sample_cart)

        assert [p.name for p in tmp_path.iterdir()] == ["storage.json"]

    @pytest.mark.asyncio
    async def test_corrupt_snapshot_discarded(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text(json.dumps({KEY: "[{broken", "theme": "dark"}), encoding="utf-8")

        assert await FileSnapshotStore(path, KEY).load() == Cart()
        assert json.loads(path.read_text(encoding="utf-8")) == {"theme": "dark"}

    @pytest.mark.asyncio
    async def test_unreadable_file_reset(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text("not json at all", encoding="utf-8")

        assert await FileSnapshotStore(path, KEY).load() == Cart()
        assert json.loads(path.read_text(encoding="utf-8")) == {}

    @pytest.mark.asyncio
    async def test_write_failure_raises_persistence_error(self, tmp_path, sample_cart):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        store = FileSnapshotStore(blocker / "storage.json", KEY)

        with pytest.raises(PersistenceError):
            await store.save(sample_cart)

    @pytest.mark.asyncio
    async def test_file_io_runs_in_worker_thread(self, tmp_path, sample_cart, monkeypatch):
        """Test disk access is handed to asyncio.to_thread"""
        offloaded = []
        to_thread = asyncio.to_thread

        async def recording_to_thread(func, *args):
            offloaded.append(func.__name__)
            return await to_thread(func, *args)

        monkeypatch.setattr(asyncio, "to_thread", recording_to_thread)
        store = FileSnapshotStore(tmp_path / "storage.json", KEY)

        await store.save(sample_cart)
        assert await store.load() == sample_cart

        assert offloaded == ["_read_all", "_write_all", "_read_all", "_read_all"]


class TestRedisSnapshotStore:
    """Tests for the Upstash Redis store"""

    @pytest.mark.asyncio
    async def test_save_sets_namespaced_key(self, sample_cart):
        redis = AsyncMock()
        store = RedisSnapshotStore(redis, KEY)

        await store.save(sample_cart)

        redis.set.assert_awaited_once_with(f"cart:{KEY}", encode_snapshot(sample_cart))

    @pytest.mark.asyncio
    async def test_load_reads_snapshot(self, sample_cart):
        redis = AsyncMock()
        redis.get.return_value = encode_snapshot(sample_cart)

        assert await RedisSnapshotStore(redis, KEY).load() == sample_cart
        redis.get.assert_awaited_once_with(f"cart:{KEY}")

    @pytest.mark.asyncio
    async def test_load_missing_key(self):
        redis = AsyncMock()
        redis.get.return_value = None

        assert await RedisSnapshotStore(redis, KEY).load() == Cart()

    @pytest.mark.asyncio
    async def test_corrupt_snapshot_deleted(self):
        redis = AsyncMock()
        redis.get.return_value = "{{{"

        assert await RedisSnapshotStore(redis, KEY).load() == Cart()
        redis.delete.assert_awaited_once_with(f"cart:{KEY}")

    @pytest.mark.asyncio
    async def test_read_error_loads_empty(self):
        redis = AsyncMock()
        redis.get.side_effect = ConnectionError("unreachable")

        assert await RedisSnapshotStore(redis, KEY).load() == Cart()

    @pytest.mark.asyncio
    async def test_write_error_raises_persistence_error(self, sample_cart):
        redis = AsyncMock()
        redis.set.side_effect = ConnectionError("unreachable")

        with pytest.raises(PersistenceError):
            await RedisSnapshotStore(redis, KEY).save(sample_cart)
