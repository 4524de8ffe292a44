"""
Query module for the facet engine.

Main Components:
- QueryBuilder / EntityQuery: compile declarative specs into positional SQL
- Filter compilation: declarative filter trees into WHERE conditions
- SqlExecutor: raw SQL execution against the entity store
"""

from .builder import EntityQuery, QueryBuilder, parse_sort
from .executor import EngineSqlExecutor, SqlExecutor
from .schemas import CompiledSql, QuerySpec, SqlTemplate, SubquerySlot

__all__ = [
    "QueryBuilder",
    "EntityQuery",
    "parse_sort",
    "EngineSqlExecutor",
    "SqlExecutor",
    "CompiledSql",
    "QuerySpec",
    "SqlTemplate",
    "SubquerySlot",
]
