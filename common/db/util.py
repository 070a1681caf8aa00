import asyncio
import logging

from redis.asyncio import Redis, Sentinel
from redis.exceptions import ConnectionError, TimeoutError, RedisError, WatchError
from redis.sentinel import MasterNotFoundError

from common.config import Settings


async def retry_db_call(func, *args, retries=5, **kwargs):
    for attempt in range(retries):
        try:
            return await func(*args, **kwargs)
        except WatchError:
            raise
        except (MasterNotFoundError, ConnectionError, TimeoutError, RedisError) as e:
            logging.info(f"Attempt {attempt + 1} failed: {e},  {type(e).__name__}:")
            if attempt < retries - 1:
                await asyncio.sleep(0.5)
                continue
            else:
                raise e


def create_redis(settings: Settings) -> Redis:
    if settings.redis_sentinel_hosts:
        sentinel = Sentinel(
            [
                (host.split(':')[0].strip(), int(host.split(':')[1]))
                for host in settings.redis_sentinel_hosts.split(',')
            ],
            password=settings.redis_password
        )
        return sentinel.master_for(
            service_name=settings.redis_service_name,
            password=settings.redis_password,
            db=settings.redis_db
        )
    return Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        password=settings.redis_password,
        db=settings.redis_db
    )


def create_store(settings: Settings):
    # deferred, redis_store imports retry_db_call from here
    from common.db.memory_store import MemoryStore
    from common.db.redis_store import RedisStore

    if settings.storage_backend == "memory":
        return MemoryStore()
    if settings.storage_backend == "redis":
        return RedisStore(create_redis(settings))
    raise ValueError(f"Unknown storage backend: {settings.storage_backend}")
