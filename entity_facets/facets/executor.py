# entity_facets/facets/executor.py
"""Run a facet query batch concurrently and parse the raw rows."""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from entity_facets.facets.schemas import (
    RANGES_KEY,
    FacetAggregates,
    ListAggregateRow,
    QueryBatchEntry,
    RangeAggregateRow,
)
from entity_facets.query.executor import SqlExecutor

logger = logging.getLogger(__name__)


async def execute_batch(sql_executor: SqlExecutor, batch: List[QueryBatchEntry]) -> FacetAggregates:
    """
    Execute every batch entry concurrently.

    The first failing statement fails the whole batch: a missing facet would make
    the full_set comparison against the total meaningless.
    """
    results: Dict[str, Optional[List[Dict[str, Any]]]] = {}
    await asyncio.gather(*(_run_entry(sql_executor, entry, results) for entry in batch))

    ranges_rows = results.pop(RANGES_KEY, None) or []
    ranges = RangeAggregateRow.from_row(ranges_rows[0] if ranges_rows else None)

    lists = {}
    for key, rows in results.items():
        if rows is None:
            continue
        lists[key] = [ListAggregateRow.from_row(row) for row in rows]

    return FacetAggregates(ranges=ranges, lists=lists)


async def _run_entry(sql_executor: SqlExecutor, entry: QueryBatchEntry, results: Dict[str, Any]) -> None:
    try:
        results[entry.key] = await sql_executor.execute(entry.sql, entry.parameters)
    except Exception as e:
        logger.error(f"Facet query '{entry.key}' failed: {str(e)}")
        raise
