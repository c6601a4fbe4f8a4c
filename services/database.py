"""
Database Service
================
Async PostgreSQL connection pool and query helpers using psycopg3.

PostgreSQL acts as a document store here: every collection is a table with
an id, a partition column and a JSONB document. The partition column is the
field the collection is most often filtered by (department for technicians,
category for parts, status for work orders).
"""

import logging
from typing import Any, Optional

from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from config.settings import get_database_url, DATABASE

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS technicians (
        id          TEXT PRIMARY KEY,
        department  TEXT NOT NULL DEFAULT '',
        doc         JSONB NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS parts_inventory (
        id          TEXT PRIMARY KEY,
        category    TEXT NOT NULL DEFAULT '',
        doc         JSONB NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_parts_inventory_part_number ON parts_inventory ((doc->>'partNumber'))",
    """
    CREATE TABLE IF NOT EXISTS work_orders (
        id          TEXT PRIMARY KEY,
        status      TEXT NOT NULL,
        doc         JSONB NOT NULL,
        created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_work_orders_status ON work_orders (status)",
    """
    CREATE TABLE IF NOT EXISTS agent_versions (
        agent_name       TEXT NOT NULL,
        version          INTEGER NOT NULL,
        model            TEXT NOT NULL,
        instructions     TEXT NOT NULL,
        definition_hash  TEXT NOT NULL,
        created_at       TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        PRIMARY KEY (agent_name, version),
        UNIQUE (agent_name, definition_hash)
    )
    """,
)


class DatabaseService:
    """Async PostgreSQL database service with connection pooling."""

    _pool: Optional[AsyncConnectionPool] = None

    @classmethod
    async def initialize(cls) -> None:
        """Initialize the connection pool."""
        if cls._pool is not None:
            return

        dsn = get_database_url()
        cls._pool = AsyncConnectionPool(
            conninfo=dsn,
            min_size=DATABASE["min_connections"],
            max_size=DATABASE["max_connections"],
            kwargs={"row_factory": dict_row},
            open=False,
        )
        await cls._pool.open()
        logger.info(f"Database connection pool initialized ({DATABASE['host']}/{DATABASE['name']})")

    @classmethod
    async def close(cls) -> None:
        """Close the connection pool."""
        if cls._pool:
            await cls._pool.close()
            cls._pool = None
            logger.info("Database connection pool closed")

    @classmethod
    def _get_pool(cls) -> AsyncConnectionPool:
        if cls._pool is None:
            logger.error("Database pool used before DatabaseService.initialize()")
            raise RuntimeError("Database pool is not initialized; call DatabaseService.initialize() first")
        return cls._pool

    @classmethod
    async def ensure_schema(cls) -> None:
        """Create the collections if they do not exist yet."""
        async with cls._get_pool().connection() as conn:
            async with conn.cursor() as cur:
                for statement in SCHEMA_STATEMENTS:
                    await cur.execute(statement)
            await conn.commit()
        logger.info("Database schema ensured")

    @classmethod
    async def fetch_all(
        cls, query: str, params: Optional[tuple] = None
    ) -> list[dict[str, Any]]:
        """Execute a query and return all rows as a list of dicts."""
        async with cls._get_pool().connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(query, params)
                rows = await cur.fetchall()
                return [dict(row) for row in rows]

    @classmethod
    async def execute_returning(
        cls, query: str, params: Optional[tuple] = None
    ) -> Optional[dict[str, Any]]:
        """Execute a query and return the first row (for INSERT ... RETURNING)."""
        async with cls._get_pool().connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(query, params)
                row = await cur.fetchone()
            await conn.commit()
            return dict(row) if row else None
