"""Persistent local state store.

A tiny async key/value interface holding the user ID, the device token and
the selected server environment. Callers get it injected; tests use the
in-memory implementation.
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .models.local_state import LocalState
from .utils.retry import retry_on_lock

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Last-write-wins string store, atomic per key."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        ...


class MemoryKeyValueStore(KeyValueStore):
    """Process-local store. Contents are lost when the process exits."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    async def set(self, key: str, value: str) -> None:
        self._values[key] = value


class SqlKeyValueStore(KeyValueStore):
    """Store backed by the local_state table.

    Reads and writes go through a write-through cache so that a database
    outage surfaces as the last known value (or absence) instead of an error.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory
        self._cache: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[str]:
        try:
            async with self._session_factory() as session:
                row = await session.get(LocalState, key)
        except SQLAlchemyError as e:
            logger.warning(f"Local state read failed for '{key}', using cached value: {e}")
            return self._cache.get(key)

        if row is None:
            return self._cache.get(key)
        self._cache[key] = row.value
        return row.value

    async def set(self, key: str, value: str) -> None:
        self._cache[key] = value

        # A failed commit leaves its session unusable, so each attempt opens a new one
        async def write() -> None:
            async with self._session_factory() as session:
                row = await session.get(LocalState, key)
                if row is None:
                    session.add(LocalState(key=key, value=value))
                else:
                    row.value = value
                await session.commit()

        try:
            await retry_on_lock(write)
        except SQLAlchemyError as e:
            logger.error(f"Local state write failed for '{key}', kept in memory only: {e}")
