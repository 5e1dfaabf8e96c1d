"""
Cart snapshot storage.

A snapshot is the JSON array of serialized line items kept under a single
namespaced key. `load()` never fails the caller: a missing, unreadable or
corrupt snapshot yields an empty cart. `save()` raises PersistenceError.
"""
import asyncio
import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from cartsync.db import RedisKeys
from cartsync.errors import ERROR_SNAPSHOT_CORRUPT, ERROR_SNAPSHOT_WRITE, PersistenceError
from cartsync.logging import get_logger
from .models import Cart

logger = get_logger(__name__)


class CorruptSnapshot(ValueError):
    """Stored value is not a valid cart snapshot."""


def encode_snapshot(cart: Cart) -> str:
    return json.dumps(cart.to_list(), ensure_ascii=False, separators=(",", ":"))


def decode_snapshot(raw: Any) -> Cart:
    """Parse a stored value into a Cart. Empty values decode to an empty cart."""
    if raw is None or raw == "" or raw == b"":
        return Cart()
    try:
        data = json.loads(raw) if isinstance(raw, (str, bytes, bytearray)) else raw
        if data is None:
            return Cart()
        if not isinstance(data, list):
            raise CorruptSnapshot(f"{ERROR_SNAPSHOT_CORRUPT}: expected a list, got {type(data).__name__}")
        return Cart.from_list(data)
    except CorruptSnapshot:
        raise
    except (json.JSONDecodeError, UnicodeDecodeError, KeyError, TypeError, ValueError, ArithmeticError) as e:
        raise CorruptSnapshot(f"{ERROR_SNAPSHOT_CORRUPT}: {e}") from e


class SnapshotStore(ABC):
    """Single keyed slot holding the cart snapshot."""

    def __init__(self, key: str):
        self.key = key

    async def load(self) -> Cart:
        """Return the last persisted cart, or an empty cart."""
        try:
            raw = await self._read()
        except Exception as e:
            logger.error(f"Failed to read cart snapshot {self.key!r}: {e}")
            return Cart()

        try:
            return decode_snapshot(raw)
        except CorruptSnapshot as e:
            # Corrupted data - discard it and start empty
            logger.warning(f"Discarding corrupt cart snapshot {self.key!r}: {e}")
            try:
                await self._discard()
            except Exception as discard_error:
                logger.error(f"Failed to discard corrupt cart snapshot: {discard_error}")
            return Cart()

    async def save(self, cart: Cart) -> None:
        """Overwrite the snapshot with `cart`."""
        payload = encode_snapshot(cart)
        try:
            await self._write(payload)
        except Exception as e:
            logger.error(f"Failed to save cart snapshot {self.key!r}: {e}")
            raise PersistenceError(f"{ERROR_SNAPSHOT_WRITE}: {e}") from e

    @abstractmethod
    async def _read(self) -> Optional[str]:
        ...

    @abstractmethod
    async def _write(self, payload: str) -> None:
        ...

    @abstractmethod
    async def _discard(self) -> None:
        ...


class MemorySnapshotStore(SnapshotStore):
    """In-process slot. Survives CartManager instances, not the process."""

    def __init__(self, key: str = "cart", initial: Optional[str] = None):
        super().__init__(key)
        self.value: Optional[str] = initial

    async def _read(self) -> Optional[str]:
        return self.value

    async def _write(self, payload: str) -> None:
        self.value = payload

    async def _discard(self) -> None:
        self.value = None


class FileSnapshotStore(SnapshotStore):
    """
    Durable local storage backed by a JSON file.

    The file maps storage keys to snapshots, like a browser's localStorage,
    so several carts can share one file. Writes go to a temp file in the
    same directory and are moved into place with os.replace.
    File I/O runs in a worker thread.
    """

    def __init__(self, path: str | os.PathLike, key: str):
        super().__init__(key)
        self.path = Path(path)

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path, encoding="utf-8") as f:
            content = f.read()
        if not content.strip():
            return {}
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise CorruptSnapshot(f"{ERROR_SNAPSHOT_CORRUPT}: {self.path} is not valid JSON") from e
        if not isinstance(data, dict):
            raise CorruptSnapshot(f"{ERROR_SNAPSHOT_CORRUPT}: {self.path} does not hold an object")
        return data

    def _write_all(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".cart-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            try:
                os.unlink(tmp_path)
            except FileNotFoundError:
                pass
            raise

    async def load(self) -> Cart:
        try:
            await asyncio.to_thread(self._read_all)
        except CorruptSnapshot as e:
            logger.warning(f"Discarding unreadable storage file {self.path}: {e}")
            try:
                await asyncio.to_thread(self._write_all, {})
            except OSError as write_error:
                logger.error(f"Failed to reset storage file {self.path}: {write_error}")
            return Cart()
        except OSError as e:
            logger.error(f"Failed to read storage file {self.path}: {e}")
            return Cart()
        return await super().load()

    async def _read(self) -> Optional[str]:
        value = (await asyncio.to_thread(self._read_all)).get(self.key)
        if value is None:
            return None
        return value if isinstance(value, str) else json.dumps(value)

    async def _write(self, payload: str) -> None:
        try:
            data = await asyncio.to_thread(self._read_all)
        except CorruptSnapshot:
            data = {}
        # Stored as a JSON string, the way localStorage holds it
        data[self.key] = payload
        await asyncio.to_thread(self._write_all, data)

    async def _discard(self) -> None:
        data = await asyncio.to_thread(self._read_all)
        if self.key in data:
            del data[self.key]
            await asyncio.to_thread(self._write_all, data)


class RedisSnapshotStore(SnapshotStore):
    """Upstash Redis slot. No TTL: the snapshot outlives the process."""

    def __init__(self, redis, key: str):
        super().__init__(key)
        self.redis = redis

    @property
    def redis_key(self) -> str:
        return RedisKeys.cart_key(self.key)

    async def _read(self) -> Optional[str]:
        return await self.redis.get(self.redis_key)

    async def _write(self, payload: str) -> None:
        await self.redis.set(self.redis_key, payload)

    async def _discard(self) -> None:
        await self.redis.delete(self.redis_key)
