"""PostgreSQL entity store adapter.

Each collection is one table holding ``(id text primary key, doc jsonb)``.
Filters are compiled to SQL by ``build_where_clause``; when a filter
compiles exactly, sorting, paging, counting and deletes run in the
database too. Otherwise the SQL selection is a superset that is narrowed
with ``match_document`` so both adapters share the same semantics.
Conditional updates lock their rows with ``SELECT ... FOR UPDATE`` inside
a transaction.
"""

import json
import logging
import re
from contextlib import asynccontextmanager
from typing import Dict, List, Optional

import asyncpg
from asyncpg import Connection, Pool

from ..entities.protocols import Document, Filter, Sort, Update, UpdateOperation
from ..utils.codec import decode_value, encode_value
from ..utils.documents import apply_update, match_document, paginate, sort_documents
from ..utils.sql import build_order_clause, build_where_clause
from ....core.exceptions import ConflictError, StoreError

logger = logging.getLogger(__name__)

_COLLECTION_NAME = re.compile(r"^[a-z_]+$")


@asynccontextmanager
async def _store_errors(operation: str):
    try:
        yield
    except asyncpg.UniqueViolationError as e:
        raise ConflictError("Duplicate id") from e
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
        logger.error(f"Entity store {operation} failed: {e}")
        raise StoreError() from e


class AsyncPGCollection:
    """jsonb-table backed document collection."""

    def __init__(self, store: "AsyncPGEntityStore", name: str):
        if not _COLLECTION_NAME.match(name):
            raise ValueError(f"Invalid collection name {name}")
        self.name = name
        self._store = store
        self._table = f"{store.table_prefix}{name}"

    async def _select(
        self,
        connection: Connection,
        flt: Optional[Filter],
        sort: Optional[Sort] = None,
        skip: int = 0,
        limit: Optional[int] = None,
        lock: bool = False,
    ) -> List[Document]:
        where, params, exact = build_where_clause(flt)
        order = build_order_clause(sort)
        query = f"SELECT doc FROM {self._table} WHERE {where}"
        paged_in_sql = exact and order is not None
        if paged_in_sql:
            if order:
                query += f" {order}"
            if limit is not None:
                params.append(limit)
                query += f" LIMIT ${len(params)}"
            if skip:
                params.append(skip)
                query += f" OFFSET ${len(params)}"
        if lock:
            query += " FOR UPDATE"
        rows = await connection.fetch(query, *params)
        docs = [decode_value(row["doc"]) for row in rows]
        if paged_in_sql:
            return docs
        docs = [doc for doc in docs if match_document(doc, flt)]
        return paginate(sort_documents(docs, sort), skip, limit)

    async def _write(self, connection: Connection, doc: Document) -> None:
        await connection.execute(
            f"UPDATE {self._table} SET doc = $2::jsonb WHERE id = $1",
            doc["id"],
            encode_value(doc),
        )

    async def find_by_id(self, document_id: str) -> Optional[Document]:
        async with _store_errors("find_by_id"), self._store.acquire() as connection:
            row = await connection.fetchrow(f"SELECT doc FROM {self._table} WHERE id = $1", document_id)
        return decode_value(row["doc"]) if row else None

    async def find_one(self, flt: Filter, sort: Optional[Sort] = None) -> Optional[Document]:
        found = await self.find_many(flt, sort=sort, limit=1)
        return found[0] if found else None

    async def find_many(
        self,
        flt: Optional[Filter] = None,
        sort: Optional[Sort] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Document]:
        async with _store_errors("find_many"), self._store.acquire() as connection:
            return await self._select(connection, flt, sort=sort, skip=skip, limit=limit)

    async def count(self, flt: Optional[Filter] = None) -> int:
        where, params, exact = build_where_clause(flt)
        if not exact:
            return len(await self.find_many(flt))
        async with _store_errors("count"), self._store.acquire() as connection:
            return await connection.fetchval(f"SELECT count(*) FROM {self._table} WHERE {where}", *params)

    async def insert(self, document: Document) -> Document:
        async with _store_errors("insert"), self._store.acquire() as connection:
            await connection.execute(
                f"INSERT INTO {self._table} (id, doc) VALUES ($1, $2::jsonb)",
                document["id"],
                encode_value(document),
            )
        return document

    async def update_one(
        self, flt: Filter, update: Update, return_updated: bool = True
    ) -> Optional[Document]:
        async with _store_errors("update_one"), self._store.transaction() as connection:
            for doc in await self._select(connection, flt, limit=1, lock=True):
                updated = apply_update(doc, update, flt)
                await self._write(connection, updated)
                return updated if return_updated else doc
        return None

    async def update_many(self, flt: Filter, update: Update) -> int:
        return await self.bulk_update([UpdateOperation(flt, update, many=True)])

    async def bulk_update(self, operations: List[UpdateOperation]) -> int:
        modified = 0
        async with _store_errors("bulk_update"), self._store.transaction() as connection:
            for operation in operations:
                limit = None if operation.many else 1
                for doc in await self._select(connection, operation.filter, limit=limit, lock=True):
                    await self._write(connection, apply_update(doc, operation.update, operation.filter))
                    modified += 1
        return modified

    async def find_one_and_delete(self, flt: Filter) -> Optional[Document]:
        async with _store_errors("find_one_and_delete"), self._store.transaction() as connection:
            for doc in await self._select(connection, flt, limit=1, lock=True):
                await connection.execute(f"DELETE FROM {self._table} WHERE id = $1", doc["id"])
                return doc
        return None

    async def delete_one(self, flt: Filter) -> bool:
        return await self.find_one_and_delete(flt) is not None

    async def delete_many(self, flt: Filter) -> int:
        where, params, exact = build_where_clause(flt)
        async with _store_errors("delete_many"), self._store.transaction() as connection:
            if exact:
                rows = await connection.fetch(f"DELETE FROM {self._table} WHERE {where} RETURNING id", *params)
                return len(rows)
            ids = [doc["id"] for doc in await self._select(connection, flt, lock=True)]
            if ids:
                await connection.execute(f"DELETE FROM {self._table} WHERE id = ANY($1::text[])", ids)
        return len(ids)


class AsyncPGEntityStore:
    """Entity store on PostgreSQL through an asyncpg pool."""

    def __init__(self, database_url: str, table_prefix: str = "starship_", **pool_config):
        self.pool: Optional[Pool] = None
        self.dsn = database_url.replace("+asyncpg", "")
        self.table_prefix = table_prefix
        self.pool_config = {
            "min_size": 5,
            "max_size": 20,
            "command_timeout": 60,
            **pool_config
        }
        self._collections: Dict[str, AsyncPGCollection] = {}

    @staticmethod
    async def _init_connection(connection: Connection) -> None:
        await connection.set_type_codec(
            "jsonb", encoder=json.dumps, decoder=json.loads, schema="pg_catalog"
        )

    async def connect(self) -> None:
        if self.pool is None:
            logger.info(f"Creating database pool with size {self.pool_config['max_size']}")
            async with _store_errors("connect"):
                self.pool = await asyncpg.create_pool(
                    self.dsn,
                    init=self._init_connection,
                    server_settings={"application_name": "starship-server"},
                    **self.pool_config
                )
            logger.info("Database pool created successfully")

    async def close(self) -> None:
        if self.pool:
            await self.pool.close()
            self.pool = None
            logger.info("Database pool closed")

    @asynccontextmanager
    async def acquire(self):
        """Acquire a connection from the pool."""
        if not self.pool:
            await self.connect()
        async with self.pool.acquire() as connection:
            yield connection

    @asynccontextmanager
    async def transaction(self):
        """Create a transaction context."""
        async with self.acquire() as connection:
            async with connection.transaction():
                yield connection

    async def ensure_collection(self, name: str) -> None:
        collection = self.collection(name)
        async with _store_errors("ensure_collection"), self.acquire() as connection:
            await connection.execute(
                f"CREATE TABLE IF NOT EXISTS {collection._table} (id text PRIMARY KEY, doc jsonb NOT NULL)"
            )

    def collection(self, name: str) -> AsyncPGCollection:
        if name not in self._collections:
            self._collections[name] = AsyncPGCollection(self, name)
        return self._collections[name]

    async def health_check(self) -> bool:
        """Check database health."""
        try:
            async with self.acquire() as connection:
                return await connection.fetchval("SELECT 1") == 1
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            logger.error(f"Database health check failed: {e}")
            return False
