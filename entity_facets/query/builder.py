"""
Core QueryBuilder class for compiling declarative query specs into SQL.

Every statement the facet engine runs goes through this builder, so filter
compilation (publication predicate included) has a single implementation.
Statements compile against the engine's dialect into positional SQL text with a
parameter list in textual order.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from sqlalchemy import func, literal_column, select
from sqlalchemy.engine import Dialect, Engine
from sqlalchemy.sql import Select
from sqlalchemy.sql.elements import ColumnElement

from entity_facets.core.exceptions import InvalidQueryError, UnsupportedDialectError
from entity_facets.metadata.catalog import EntityMetadata, MetadataCatalog
from entity_facets.query.executor import SqlExecutor
from entity_facets.query.filters import build_conditions
from entity_facets.query.schemas import PARAMSTYLE_PLACEHOLDERS, CompiledSql, QuerySpec, SelectItem, SortSpec

logger = logging.getLogger(__name__)

SORT_DIRECTIONS = ("asc", "desc")


class QueryBuilder:
    """
    Factory for entity queries bound to one dialect and metadata catalog.

    Only positional paramstyles are supported because compiled statements are
    spliced together and their parameter lists concatenated in textual order.
    """

    def __init__(self, catalog: MetadataCatalog, dialect: Dialect, sql_executor: Optional[SqlExecutor] = None):
        if not dialect.positional or dialect.paramstyle not in PARAMSTYLE_PLACEHOLDERS:
            raise UnsupportedDialectError(
                f"Dialect '{dialect.name}' uses paramstyle '{dialect.paramstyle}'; "
                f"supported: {', '.join(PARAMSTYLE_PLACEHOLDERS)}"
            )
        self.catalog = catalog
        self.dialect = dialect
        self.sql_executor = sql_executor

    @classmethod
    def from_engine(cls, catalog: MetadataCatalog, engine: Engine, sql_executor: Optional[SqlExecutor] = None) -> "QueryBuilder":
        return cls(catalog, engine.dialect, sql_executor)

    @property
    def paramstyle(self) -> str:
        return self.dialect.paramstyle

    def create_query(self, uid: str, alias: str = "t0") -> "EntityQuery":
        """Create a query over an entity type, its table aliased as `alias`."""
        return EntityQuery(self, self.catalog.get(uid), alias)

    def compile_expression(self, element: ColumnElement) -> str:
        """Render a column expression as it appears inside compiled statements."""
        return str(element.compile(dialect=self.dialect))

    def quote(self, name: str) -> str:
        """Quote an identifier when the dialect requires it."""
        return self.dialect.identifier_preparer.quote(name)


class EntityQuery:
    """A single query over one entity type."""

    def __init__(self, builder: QueryBuilder, metadata: EntityMetadata, alias: str):
        self.builder = builder
        self.metadata = metadata
        self.table = metadata.table.alias(alias)
        self.spec = QuerySpec()
        self._count = False

    def init(self, spec: Union[QuerySpec, Dict[str, Any], None] = None, **kwargs: Any) -> "EntityQuery":
        """Set the query spec from a QuerySpec, a mapping, or keyword arguments."""
        if spec is None:
            spec = QuerySpec(**kwargs)
        elif isinstance(spec, dict):
            spec = QuerySpec(**spec)
        self.spec = spec
        return self

    def count(self) -> "EntityQuery":
        """Select count(*) instead of columns; with a group-by that is one row per group."""
        self._count = True
        return self

    def column(self, name: str) -> ColumnElement:
        """Get the aliased column for a logical attribute or physical column name."""
        column_key = self.metadata.get_column_key(name)
        if column_key is None:
            raise InvalidQueryError(f"Unknown attribute '{name}' for {self.metadata.uid}")
        return self.table.c[column_key]

    def build(self) -> Select:
        """Build the SQLAlchemy Select for the current spec."""
        spec = self.spec

        if self._count:
            columns = [func.count().label("count")]
        else:
            columns = self._resolve_select(spec.select, spec.populate)

        stmt = select(*columns).select_from(self.table)

        where = build_conditions(self.metadata, self.table, spec.filters)
        if where is not None:
            stmt = stmt.where(where)

        if spec.group_by:
            stmt = stmt.group_by(*[self._resolve_group_by(item) for item in spec.group_by])

        for name, direction in parse_sort(spec.order_by):
            column = self.column(name)
            stmt = stmt.order_by(column.desc() if direction == "desc" else column.asc())

        if spec.offset is not None:
            stmt = stmt.offset(spec.offset)
        if spec.limit is not None:
            stmt = stmt.limit(spec.limit)

        return stmt

    def compile_sql(self) -> CompiledSql:
        """Compile to positional SQL text with bound parameters in textual order."""
        compiled = self.build().compile(dialect=self.builder.dialect)
        state = compiled.construct_expanded_state()

        parameters = []
        for name in state.positiontup or []:
            value = state.parameters[name]
            processor = _get_bind_processor(compiled, state, name)
            parameters.append(processor(value) if processor is not None else value)

        logger.debug(f"Compiled query for {self.metadata.uid}: {state.statement} {parameters}")
        return CompiledSql(sql=state.statement, parameters=parameters, paramstyle=self.builder.paramstyle)

    async def execute(self) -> Optional[List[Dict[str, Any]]]:
        """Compile and run the query with the builder's SQL executor."""
        if self.builder.sql_executor is None:
            raise RuntimeError("QueryBuilder has no SQL executor configured")
        compiled = self.compile_sql()
        return await self.builder.sql_executor.execute(compiled.sql, compiled.parameters)

    def _resolve_select(self, items: Optional[List[SelectItem]], populate: Optional[List[str]]) -> List[ColumnElement]:
        if not items or populate == ["*"] or populate == "*":
            return list(self.table.c)

        columns: List[ColumnElement] = []
        seen = set()
        for item in list(items) + list(populate or []):
            column = item if isinstance(item, ColumnElement) else self.column(item)
            key = getattr(column, "key", None) or str(column)
            if key in seen:
                continue
            seen.add(key)
            columns.append(column)
        return columns

    def _resolve_group_by(self, item: SelectItem) -> ColumnElement:
        if isinstance(item, ColumnElement):
            return item
        column_key = self.metadata.get_column_key(item)
        if column_key is not None:
            return self.table.c[column_key]
        # Anything else is passed through as a raw SQL expression
        return literal_column(item)


def _get_bind_processor(compiled, state, name: str) -> Optional[Callable[[Any], Any]]:
    """
    Find the type's bind processor for a positional parameter.

    The expanded state only carries processors for expanding (IN) binds; plain
    binds use the compiled statement's own processors. Expanded names such as
    `name_1_1` fall back to their base bind `name_1`.
    """
    processor = state.processors.get(name) or compiled._bind_processors.get(name)
    if processor is None and name not in compiled.binds:
        base_name = name.rpartition("_")[0]
        processor = compiled._bind_processors.get(base_name)
    return processor


def parse_sort(sort: SortSpec) -> List[Tuple[str, str]]:
    """
    Normalize a sort spec into (attribute, direction) pairs.

    Accepts "name", "name:desc", comma separated strings, {"name": "desc"} mappings
    and lists mixing any of those.
    """
    if not sort:
        return []

    pairs: List[Tuple[str, str]] = []
    if isinstance(sort, str):
        for part in sort.split(","):
            part = part.strip()
            if not part:
                continue
            name, _, direction = part.partition(":")
            pairs.append((name.strip(), (direction.strip() or "asc").lower()))
    elif isinstance(sort, dict):
        for name, direction in sort.items():
            pairs.append((name, str(direction).lower()))
    else:
        for item in sort:
            pairs.extend(parse_sort(item))

    for name, direction in pairs:
        if direction not in SORT_DIRECTIONS:
            raise InvalidQueryError(f"Invalid sort direction '{direction}' for '{name}'")
    return pairs
