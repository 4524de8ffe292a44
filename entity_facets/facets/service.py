# entity_facets/facets/service.py
"""Facet service: filter facets, group-by counts and grouped listings."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

from sqlalchemy.engine import Engine

from entity_facets.core.config import Settings, get_settings
from entity_facets.facets.classifier import build_config
from entity_facets.facets.executor import execute_batch
from entity_facets.facets.filters import update_filters
from entity_facets.facets.group_by import (
    GroupByKeys,
    build_full_query,
    build_group_subquery,
    count_groups,
    remap_rows,
)
from entity_facets.facets.normalizer import normalize
from entity_facets.facets.queries import build_queries
from entity_facets.facets.schemas import FacetConfig, FacetResult
from entity_facets.metadata.catalog import EntityMetadata, MetadataCatalog
from entity_facets.query.builder import QueryBuilder
from entity_facets.query.executor import EngineSqlExecutor, SqlExecutor
from entity_facets.query.schemas import SortSpec

logger = logging.getLogger(__name__)


@dataclass
class FacetContext:
    """Collaborators a FacetService works with."""

    catalog: MetadataCatalog
    query_builder: QueryBuilder
    sql_executor: SqlExecutor
    settings: Settings = field(default_factory=get_settings)

    def __post_init__(self):
        if self.query_builder.sql_executor is None:
            self.query_builder.sql_executor = self.sql_executor

    @classmethod
    def from_engine(cls, catalog: MetadataCatalog, engine: Engine, settings: Optional[Settings] = None) -> "FacetContext":
        """Wire a context that runs every statement on the engine's pool."""
        sql_executor = EngineSqlExecutor(engine)
        return cls(
            catalog=catalog,
            query_builder=QueryBuilder.from_engine(catalog, engine, sql_executor),
            sql_executor=sql_executor,
            settings=settings or get_settings(),
        )


class FacetService:
    """Entry points of the facet engine."""

    def __init__(self, context: FacetContext):
        self.context = context

    # ===== GROUP BY =====

    async def run_group_by_count(
        self,
        uid: str,
        group_by: GroupByKeys,
        *,
        filters: Optional[Dict[str, Any]] = None,
        publication_state: Optional[str] = None,
    ) -> Optional[int]:
        """Count distinct group-key combinations; None when the backend returns nothing."""
        metadata = self.context.catalog.get(uid)
        filters = self._update_filters(metadata, filters, publication_state)
        return await count_groups(self.context.query_builder, metadata, group_by, filters)

    async def run_group_by(
        self,
        uid: str,
        group_by: GroupByKeys,
        *,
        filters: Optional[Dict[str, Any]] = None,
        fields: Optional[List[str]] = None,
        populate: Optional[List[str]] = None,
        publication_state: Optional[str] = None,
        limit: Optional[int] = None,
        sort: SortSpec = None,
        start: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """List one representative record (the lowest id) per distinct group."""
        metadata = self.context.catalog.get(uid)
        filters = self._update_filters(metadata, filters, publication_state)

        subquery = build_group_subquery(self.context.query_builder, metadata, group_by, filters)
        compiled = build_full_query(
            self.context.query_builder,
            metadata,
            subquery,
            fields=fields,
            populate=populate,
            sort=sort,
            start=start,
            limit=limit,
        )

        rows = await self.context.sql_executor.execute(compiled.sql, compiled.parameters)
        return remap_rows(metadata, rows)

    # ===== FILTER FACETS =====

    async def run_filters(
        self,
        uid: str,
        facets_config: Optional[Iterable[Union[FacetConfig, dict]]] = None,
        *,
        filters: Optional[Dict[str, Any]] = None,
        fields: Optional[List[str]] = None,
        publication_state: Optional[str] = None,
        max_values: Optional[int] = None,
    ) -> List[FacetResult]:
        """
        Compute filter facets for the filtered entity set.

        Args:
            uid: Entity type identifier
            facets_config: Explicit facet configuration; derived from the attributes when None
            filters: Filter tree restricting the entity set
            fields: Attribute allow-list used when the configuration is derived
            publication_state: "live" (default) restricts to published records
            max_values: Distinct value limit for list facets; defaults to the settings value

        Returns:
            Facet results in configuration order
        """
        metadata = self.context.catalog.get(uid)

        configs = build_config(metadata, facets_config, fields)
        if not configs:
            return []

        filters = self._update_filters(metadata, filters, publication_state)
        batch = build_queries(self.context.query_builder, metadata, configs, filters)
        logger.debug(f"Running {len(batch)} facet queries for {uid}")

        aggregates = await execute_batch(self.context.sql_executor, batch)

        if max_values is None:
            max_values = self.context.settings.max_facet_values
        return normalize(aggregates, configs, max_values=max_values)

    def _update_filters(
        self, metadata: EntityMetadata, filters: Optional[Dict[str, Any]], publication_state: Optional[str]
    ) -> Dict[str, Any]:
        return update_filters(
            metadata, filters, publication_state, publication_attribute=self.context.settings.publication_attribute
        )
