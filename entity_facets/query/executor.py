# entity_facets/query/executor.py
"""Raw SQL execution against the entity store."""

import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence

from sqlalchemy.engine import Engine
from starlette.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)


class SqlExecutor(Protocol):
    """Runs one positional SQL statement and returns its rows as mappings."""

    async def execute(self, sql: str, parameters: Sequence[Any]) -> Optional[List[Dict[str, Any]]]:
        ...


class EngineSqlExecutor:
    """SqlExecutor backed by a SQLAlchemy engine's connection pool.

    Each statement checks out its own pooled connection and runs in the threadpool,
    so statements issued together execute concurrently.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    async def execute(self, sql: str, parameters: Sequence[Any]) -> List[Dict[str, Any]]:
        return await run_in_threadpool(self._execute_sync, sql, tuple(parameters))

    def _execute_sync(self, sql: str, parameters: tuple) -> List[Dict[str, Any]]:
        with self.engine.connect() as connection:
            result = connection.exec_driver_sql(sql, parameters)
            rows = [dict(row) for row in result.mappings()]
        logger.debug(f"Fetched {len(rows)} rows")
        return rows
