from contextlib import asynccontextmanager

from redis.asyncio import Redis
from redis.exceptions import RedisError, WatchError

from common.db.store import KeyValueStore, StoreTransaction
from common.db.util import retry_db_call
from common.errors import ConcurrentUpdateError, DBError


class RedisTransaction(StoreTransaction):
    def __init__(self, pipe):
        self.pipe = pipe
        self.watched: set[str] = set()
        self.writes: dict[str, bytes] = {}

    async def watch(self, *keys: str):
        new_keys = [key for key in keys if key not in self.watched]
        if new_keys:
            await self.pipe.watch(*new_keys)
            self.watched.update(new_keys)

    async def get(self, key: str) -> bytes | None:
        if key in self.writes:
            return self.writes[key]
        await self.watch(key)
        # watching puts the pipeline in immediate mode until multi()
        return await self.pipe.get(key)

    def set(self, key: str, value: bytes):
        self.writes[key] = value


class RedisStore(KeyValueStore):
    def __init__(self, db: Redis):
        self.db = db

    async def get(self, key: str) -> bytes | None:
        try:
            return await retry_db_call(self.db.get, key)
        except RedisError as e:
            raise DBError(str(e)) from e

    async def get_many(self, keys: list[str]) -> list[bytes | None]:
        if not keys:
            return []
        try:
            return await retry_db_call(self.db.mget, keys)
        except RedisError as e:
            raise DBError(str(e)) from e

    async def set(self, key: str, value: bytes):
        try:
            await retry_db_call(self.db.set, key, value)
        except RedisError as e:
            raise DBError(str(e)) from e

    async def delete(self, key: str):
        try:
            await retry_db_call(self.db.delete, key)
        except RedisError as e:
            raise DBError(str(e)) from e

    async def incr(self, key: str) -> int:
        try:
            return await retry_db_call(self.db.incr, key)
        except RedisError as e:
            raise DBError(str(e)) from e

    async def keys(self, pattern: str) -> list[str]:
        try:
            return [key.decode() if isinstance(key, bytes) else key
                    async for key in self.db.scan_iter(match=pattern)]
        except RedisError as e:
            raise DBError(str(e)) from e

    @asynccontextmanager
    async def transaction(self, *watch: str):
        try:
            async with self.db.pipeline(transaction=True) as pipe:
                tx = RedisTransaction(pipe)
                await tx.watch(*watch)
                yield tx
                if tx.writes:
                    pipe.multi()
                    for key, value in tx.writes.items():
                        pipe.set(key, value)
                    await pipe.execute()
        except WatchError as e:
            # a watched key has been modified, the transaction is aborted
            raise ConcurrentUpdateError() from e
        except RedisError as e:
            raise DBError(str(e)) from e

    async def close(self):
        await self.db.close()
