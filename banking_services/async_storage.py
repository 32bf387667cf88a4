"""
Async Storage Backend Module

Provides the async storage interface used by every store in the service.
The in-memory and SQLite backends run the synchronous implementations in a
worker thread so the event loop never blocks on storage I/O; PostgreSQL is
served natively through asyncpg.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Any
import asyncio
import json

from .storage import StorageInterface, InMemoryStorage, SQLiteStorage


class AsyncStorageInterface(ABC):
    """Abstract interface for async storage backends"""

    @abstractmethod
    async def next_id(self, table: str) -> int:
        """Allocate the next primary key for a table"""
        pass

    @abstractmethod
    async def save(self, table: str, record_id: int, data: Dict[str, Any]) -> None:
        """Insert or replace a record by primary key"""
        pass

    @abstractmethod
    async def load(self, table: str, record_id: int) -> Optional[Dict[str, Any]]:
        """Load a record from storage"""
        pass

    @abstractmethod
    async def load_all(self, table: str) -> List[Dict[str, Any]]:
        """Load all records from a table in insertion order"""
        pass

    @abstractmethod
    async def delete(self, table: str, record_id: int) -> bool:
        """Delete a record from storage"""
        pass

    @abstractmethod
    async def exists(self, table: str, record_id: int) -> bool:
        """Check if a record exists"""
        pass

    @abstractmethod
    async def find(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Find records matching filters"""
        pass

    @abstractmethod
    async def count(self, table: str) -> int:
        """Count records in table"""
        pass

    @abstractmethod
    async def clear_table(self, table: str) -> None:
        """Clear all records from a table"""
        pass

    async def initialize(self) -> None:
        """Prepare connections (default no-op)"""
        pass

    async def close(self) -> None:
        """Close storage connection (default no-op)"""
        pass


class AsyncThreadedStorage(AsyncStorageInterface):
    """Runs a synchronous backend in a worker thread"""

    def __init__(self, sync_storage: StorageInterface):
        self._sync_storage = sync_storage
        self._lock = asyncio.Lock()

    async def _run(self, func, *args):
        async with self._lock:
            return await asyncio.to_thread(func, *args)

    async def next_id(self, table: str) -> int:
        return await self._run(self._sync_storage.next_id, table)

    async def save(self, table: str, record_id: int, data: Dict[str, Any]) -> None:
        await self._run(self._sync_storage.save, table, record_id, data)

    async def load(self, table: str, record_id: int) -> Optional[Dict[str, Any]]:
        return await self._run(self._sync_storage.load, table, record_id)

    async def load_all(self, table: str) -> List[Dict[str, Any]]:
        return await self._run(self._sync_storage.load_all, table)

    async def delete(self, table: str, record_id: int) -> bool:
        return await self._run(self._sync_storage.delete, table, record_id)

    async def exists(self, table: str, record_id: int) -> bool:
        return await self._run(self._sync_storage.exists, table, record_id)

    async def find(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        return await self._run(self._sync_storage.find, table, filters)

    async def count(self, table: str) -> int:
        return await self._run(self._sync_storage.count, table)

    async def clear_table(self, table: str) -> None:
        await self._run(self._sync_storage.clear_table, table)

    async def close(self) -> None:
        await asyncio.to_thread(self._sync_storage.close)


class AsyncInMemoryStorage(AsyncThreadedStorage):
    """Async wrapper around InMemoryStorage for tests and local runs"""

    def __init__(self):
        super().__init__(InMemoryStorage())


class AsyncSQLiteStorage(AsyncThreadedStorage):
    """Async wrapper around SQLiteStorage"""

    def __init__(self, db_path: str = ":memory:"):
        super().__init__(SQLiteStorage(db_path))


class AsyncPostgreSQLStorage(AsyncStorageInterface):
    """True async PostgreSQL using asyncpg"""

    def __init__(self, connection_string: str, pool_size: int = 10):
        self.connection_string = connection_string
        self.pool_size = pool_size
        self.pool = None
        self._tables = set()

    async def initialize(self):
        """Create connection pool — call on app startup"""
        try:
            import asyncpg
        except ImportError:
            raise ImportError("asyncpg is required for AsyncPostgreSQLStorage")

        self.pool = await asyncpg.create_pool(
            self.connection_string,
            min_size=2,
            max_size=self.pool_size,
            command_timeout=60
        )
        async with self.pool.acquire() as conn:
            await conn.execute('''
                CREATE TABLE IF NOT EXISTS "_sequences" (
                    name TEXT PRIMARY KEY,
                    value BIGINT NOT NULL
                )
            ''')

    async def close(self):
        """Close pool — call on app shutdown"""
        if self.pool:
            await self.pool.close()

    @staticmethod
    def _decode(data: Any) -> Dict[str, Any]:
        if isinstance(data, str):
            return json.loads(data)
        return dict(data)

    @staticmethod
    def _filter_value(value: Any) -> str:
        # ->> yields the JSON text of scalars, strings unquoted
        if isinstance(value, str):
            return value
        return json.dumps(value)

    async def _ensure_table(self, table: str) -> None:
        if not self.pool:
            raise RuntimeError("Pool not initialized. Call initialize() first.")
        if table in self._tables:
            return

        async with self.pool.acquire() as conn:
            await conn.execute(f'''
                CREATE TABLE IF NOT EXISTS "{table}" (
                    id BIGINT PRIMARY KEY,
                    data JSONB NOT NULL,
                    created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW(),
                    updated_at TIMESTAMP WITH TIME ZONE DEFAULT NOW()
                )
            ''')
        self._tables.add(table)

    async def next_id(self, table: str) -> int:
        if not self.pool:
            raise RuntimeError("Pool not initialized. Call initialize() first.")

        async with self.pool.acquire() as conn:
            return await conn.fetchval('''
                INSERT INTO "_sequences" (name, value) VALUES ($1, 1)
                ON CONFLICT (name) DO UPDATE SET value = "_sequences".value + 1
                RETURNING value
            ''', table)

    async def save(self, table: str, record_id: int, data: Dict[str, Any]) -> None:
        await self._ensure_table(table)

        async with self.pool.acquire() as conn:
            await conn.execute(f'''
                INSERT INTO "{table}" (id, data, updated_at)
                VALUES ($1, $2, NOW())
                ON CONFLICT (id)
                DO UPDATE SET data = $2, updated_at = NOW()
            ''', record_id, json.dumps(data, default=str))

    async def load(self, table: str, record_id: int) -> Optional[Dict[str, Any]]:
        await self._ensure_table(table)

        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(f'SELECT data FROM "{table}" WHERE id = $1', record_id)
            if row:
                return self._decode(row['data'])
            return None

    async def load_all(self, table: str) -> List[Dict[str, Any]]:
        await self._ensure_table(table)

        async with self.pool.acquire() as conn:
            rows = await conn.fetch(f'SELECT data FROM "{table}" ORDER BY id')
            return [self._decode(row['data']) for row in rows]

    async def delete(self, table: str, record_id: int) -> bool:
        await self._ensure_table(table)

        async with self.pool.acquire() as conn:
            result = await conn.execute(f'DELETE FROM "{table}" WHERE id = $1', record_id)
            return result != 'DELETE 0'

    async def exists(self, table: str, record_id: int) -> bool:
        await self._ensure_table(table)

        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(f'SELECT 1 FROM "{table}" WHERE id = $1', record_id)
            return row is not None

    async def find(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        await self._ensure_table(table)

        conditions = []
        params = []
        for key, value in filters.items():
            params.append(self._filter_value(value))
            conditions.append(f"data->>'{key}' = ${len(params)}")

        where_clause = " AND ".join(conditions) if conditions else "1=1"

        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                f'SELECT data FROM "{table}" WHERE {where_clause} ORDER BY id', *params
            )
            return [self._decode(row['data']) for row in rows]

    async def count(self, table: str) -> int:
        await self._ensure_table(table)

        async with self.pool.acquire() as conn:
            return await conn.fetchval(f'SELECT COUNT(*) FROM "{table}"')

    async def clear_table(self, table: str) -> None:
        await self._ensure_table(table)

        async with self.pool.acquire() as conn:
            await conn.execute(f'DELETE FROM "{table}"')


def create_async_storage(
    storage_type: str = "memory",
    database_url: str = "",
    pool_size: int = 10
) -> AsyncStorageInterface:
    """Factory function to create async storage instances"""
    storage_type = storage_type.lower()

    if storage_type == "postgresql":
        if not database_url:
            raise ValueError("database_url is required for postgresql storage")
        return AsyncPostgreSQLStorage(database_url, pool_size)

    if storage_type == "sqlite":
        db_path = database_url
        if db_path.startswith("sqlite:///"):
            db_path = db_path[len("sqlite:///"):]
        return AsyncSQLiteStorage(db_path or ":memory:")

    if storage_type == "memory":
        return AsyncInMemoryStorage()

    raise ValueError(f"Unknown storage type '{storage_type}'")
