from contextlib import asynccontextmanager
from fnmatch import fnmatchcase

from common.db.store import KeyValueStore, StoreTransaction
from common.errors import ConcurrentUpdateError


class MemoryTransaction(StoreTransaction):
    def __init__(self, store: "MemoryStore"):
        self.store = store
        self.watched: dict[str, int] = {}
        self.writes: dict[str, bytes] = {}

    def watch(self, *keys: str):
        for key in keys:
            self.watched.setdefault(key, self.store.version(key))

    async def get(self, key: str) -> bytes | None:
        if key in self.writes:
            return self.writes[key]
        self.watch(key)
        return self.store.data.get(key)

    def set(self, key: str, value: bytes):
        self.writes[key] = value


class MemoryStore(KeyValueStore):
    """Process-local store with the same optimistic semantics as RedisStore."""

    def __init__(self):
        self.data: dict[str, bytes] = {}
        self.versions: dict[str, int] = {}

    def version(self, key: str) -> int:
        return self.versions.get(key, 0)

    def _write(self, key: str, value: bytes | None):
        if value is None:
            self.data.pop(key, None)
        else:
            self.data[key] = value
        self.versions[key] = self.version(key) + 1

    async def get(self, key: str) -> bytes | None:
        return self.data.get(key)

    async def get_many(self, keys: list[str]) -> list[bytes | None]:
        return [self.data.get(key) for key in keys]

    async def set(self, key: str, value: bytes):
        self._write(key, value)

    async def delete(self, key: str):
        self._write(key, None)

    async def incr(self, key: str) -> int:
        value = int(self.data.get(key, b"0")) + 1
        self._write(key, str(value).encode())
        return value

    async def keys(self, pattern: str) -> list[str]:
        return [key for key in self.data if fnmatchcase(key, pattern)]

    @asynccontextmanager
    async def transaction(self, *watch: str):
        tx = MemoryTransaction(self)
        tx.watch(*watch)
        yield tx
        # no await between the check and the writes, so this is atomic on the loop
        if any(self.version(key) != version for key, version in tx.watched.items()):
            raise ConcurrentUpdateError()
        for key, value in tx.writes.items():
            self._write(key, value)

    async def close(self):
        pass
