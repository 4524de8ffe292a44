# entity_facets/facets/queries.py
"""Instantiate the facet template into a batch of aggregate statements."""

import logging
from typing import Any, Dict, List, Optional

from entity_facets.facets.schemas import (
    FACET_TYPE_LIST,
    FACET_TYPE_RANGE,
    RANGES_KEY,
    FacetConfig,
    QueryBatchEntry,
)
from entity_facets.facets.templater import build_template
from entity_facets.metadata.catalog import EntityMetadata
from entity_facets.query.builder import QueryBuilder

logger = logging.getLogger(__name__)


def build_queries(
    query_builder: QueryBuilder,
    metadata: EntityMetadata,
    facet_configs: List[FacetConfig],
    filters: Optional[Dict[str, Any]],
) -> List[QueryBatchEntry]:
    """
    Build one grouped count statement per list facet plus one combined ranges statement.

    The ranges statement selects the filtered total and min/max/count for every
    range facet. All statements share the template's parameters.
    """
    template = build_template(query_builder, metadata.uid, filters)
    query = query_builder.create_query(metadata.uid)
    quote = query_builder.quote

    queries: List[QueryBatchEntry] = []
    ranges_select = [f"count(*) AS {quote('total')}"]

    for config in facet_configs:
        if not config.key or not config.type:
            continue

        column = query_builder.compile_expression(query.column(config.key))

        if config.type == FACET_TYPE_LIST:
            select = f"{column} AS {quote('value')}, count({column}) AS {quote('count')}"
            compiled = template.render(select, f" GROUP BY {column}")
            queries.append(QueryBatchEntry(key=config.key, sql=compiled.sql, parameters=compiled.parameters))
            continue

        if config.type == FACET_TYPE_RANGE:
            ranges_select.append(
                f"max({column}) AS {quote('max_' + config.key)}, "
                f"min({column}) AS {quote('min_' + config.key)}, "
                f"count({column}) AS {quote('count_' + config.key)}"
            )
            continue

        logger.warning(f"build_queries: facet '{config.key}' has an unknown type '{config.type}'")

    compiled = template.render(", ".join(ranges_select))
    queries.append(QueryBatchEntry(key=RANGES_KEY, sql=compiled.sql, parameters=compiled.parameters))

    return queries
