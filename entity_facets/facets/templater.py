# entity_facets/facets/templater.py
"""Build the shared, filtered base statement that every facet query is rendered from."""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import literal_column

from entity_facets.query.builder import QueryBuilder
from entity_facets.query.schemas import GROUP_BY_SLOT, SELECT_SLOT, SqlTemplate, replace_once

logger = logging.getLogger(__name__)

SELECT_SENTINEL = "tmp_select"
GROUP_BY_SENTINEL = "tmp_group_by"


def build_template(query_builder: QueryBuilder, uid: str, filters: Optional[Dict[str, Any]]) -> SqlTemplate:
    """
    Compile a placeholder query under the filters and turn it into a template.

    The builder compiles `SELECT tmp_select ... GROUP BY tmp_group_by`; the
    sentinel select expression becomes the {{select}} slot and the sentinel
    group-by clause becomes the {{groupBy}} slot. The WHERE clause and its
    parameters are kept exactly as compiled.
    """
    select_sentinel = literal_column(SELECT_SENTINEL)
    group_by_sentinel = literal_column(GROUP_BY_SENTINEL)

    compiled = (
        query_builder.create_query(uid)
        .init(select=[select_sentinel], filters=filters, group_by=[group_by_sentinel])
        .compile_sql()
    )

    sql = replace_once(compiled.sql, query_builder.compile_expression(select_sentinel), SELECT_SLOT)
    sql = replace_once(sql, f" GROUP BY {query_builder.compile_expression(group_by_sentinel)}", GROUP_BY_SLOT)

    logger.debug(f"Facet template for {uid}: {sql}")
    return SqlTemplate(sql=sql, parameters=compiled.parameters, paramstyle=compiled.paramstyle)
