from abc import ABC, abstractmethod
from typing import AsyncContextManager


class StoreTransaction(ABC):
    """Unit of work over a key-value store.

    Every key read through the transaction is watched: if another writer
    changes it before commit, the commit fails with ConcurrentUpdateError.
    Writes are buffered and applied atomically on commit.
    """

    @abstractmethod
    async def get(self, key: str) -> bytes | None:
        pass

    @abstractmethod
    def set(self, key: str, value: bytes):
        pass


class KeyValueStore(ABC):

    @abstractmethod
    async def get(self, key: str) -> bytes | None:
        pass

    @abstractmethod
    async def get_many(self, keys: list[str]) -> list[bytes | None]:
        pass

    @abstractmethod
    async def set(self, key: str, value: bytes):
        pass

    @abstractmethod
    async def delete(self, key: str):
        pass

    @abstractmethod
    async def incr(self, key: str) -> int:
        pass

    @abstractmethod
    async def keys(self, pattern: str) -> list[str]:
        pass

    @abstractmethod
    def transaction(self, *watch: str) -> AsyncContextManager[StoreTransaction]:
        """Open a transaction, watching ``watch`` up front.

        Commits when the block exits normally, discards every buffered
        write when it raises.
        """

    @abstractmethod
    async def close(self):
        pass
