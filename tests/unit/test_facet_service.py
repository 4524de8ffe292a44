"""
Unit tests for the facet service with a mocked SQL backend.
Tests the entry points' orchestration: configuration, publication filtering,
statement routing and result shaping.
"""

from unittest.mock import AsyncMock

import pytest

from entity_facets.core.config import Settings
from entity_facets.core.exceptions import UnknownEntityError
from entity_facets.facets.service import FacetContext, FacetService
from tests.conftest import PRODUCT_UID


def route_product_rows(sql, parameters):
    """Answer the ranges statement and the name facet statement of the product batch"""
    if "count(*) AS total" in sql:
        return [{"total": 10, "count_price": 10, "min_price": 5, "max_price": 99}]
    if "GROUP BY t0.name" in sql:
        return [{"value": "A", "count": 6}, {"value": "B", "count": 4}]
    return []


class TestRunFilters:
    """Test filter facet computation"""

    async def test_derived_facets(self, mock_facet_service, mock_sql_executor):
        mock_sql_executor.execute.side_effect = route_product_rows

        results = await mock_facet_service.run_filters(PRODUCT_UID)

        assert [r.model_dump() for r in results] == [
            {
                "key": "name",
                "type": "list",
                "title": "Name",
                "full_set": True,
                "items": [
                    {"value": "A", "label": "A", "count": 6},
                    {"value": "B", "label": "B", "count": 4},
                ],
            },
            {"key": "price", "type": "range", "title": "Price", "full_set": True, "min": 5, "max": 99, "count": 10},
        ]
        assert mock_sql_executor.execute.await_count == 2

    async def test_live_state_filters_every_statement(self, mock_facet_service, mock_sql_executor):
        mock_sql_executor.execute.side_effect = route_product_rows

        await mock_facet_service.run_filters(PRODUCT_UID, filters={"name": {"$ne": "C"}})

        for call in mock_sql_executor.execute.await_args_list:
            sql, parameters = call.args
            assert "t0.published_at IS NOT NULL" in sql
            assert parameters == ["C"]

    async def test_preview_state(self, mock_facet_service, mock_sql_executor):
        mock_sql_executor.execute.side_effect = route_product_rows

        await mock_facet_service.run_filters(PRODUCT_UID, publication_state="preview")

        for call in mock_sql_executor.execute.await_args_list:
            assert "published_at" not in call.args[0]

    async def test_explicit_config(self, mock_facet_service, mock_sql_executor):
        mock_sql_executor.execute.side_effect = route_product_rows

        results = await mock_facet_service.run_filters(
            PRODUCT_UID,
            [{"key": "price", "title": "Cost", "values_config": {"max": {"suffix": "$"}}}],
        )

        assert len(results) == 1
        assert results[0].title == "Cost"
        assert results[0].max == {"suffix": "$", "value": 99}
        assert mock_sql_executor.execute.await_count == 1

    async def test_empty_config_runs_nothing(self, mock_facet_service, mock_sql_executor):
        results = await mock_facet_service.run_filters(PRODUCT_UID, [])

        assert results == []
        mock_sql_executor.execute.assert_not_awaited()

    async def test_max_values_from_settings(self, catalog, query_builder, mock_sql_executor):
        mock_sql_executor.execute.side_effect = route_product_rows
        service = FacetService(
            FacetContext(
                catalog=catalog,
                query_builder=query_builder,
                sql_executor=mock_sql_executor,
                settings=Settings(max_facet_values=1),
            )
        )

        results = await service.run_filters(PRODUCT_UID)

        assert [r.key for r in results] == ["price"]
        assert [r.key for r in await service.run_filters(PRODUCT_UID, max_values=2)] == ["name", "price"]

    async def test_unknown_entity(self, mock_facet_service):
        with pytest.raises(UnknownEntityError):
            await mock_facet_service.run_filters("api::missing.missing")


class TestRunGroupBy:
    """Test group counts and representative rows"""

    async def test_group_by_count(self, mock_facet_service, mock_sql_executor):
        mock_sql_executor.execute.return_value = [{"count": 6}, {"count": 4}]

        count = await mock_facet_service.run_group_by_count(PRODUCT_UID, "name")

        assert count == 2
        sql, _ = mock_sql_executor.execute.await_args.args
        assert sql.startswith("SELECT count(*)")
        assert "t0.published_at IS NOT NULL" in sql
        assert sql.endswith("GROUP BY t0.name")

    async def test_group_by_count_without_result(self, mock_facet_service, mock_sql_executor):
        mock_sql_executor.execute.return_value = None

        assert await mock_facet_service.run_group_by_count(PRODUCT_UID, ["name", "price"]) is None

    async def test_group_by_count_empty_result(self, mock_facet_service, mock_sql_executor):
        mock_sql_executor.execute.return_value = []

        assert await mock_facet_service.run_group_by_count(PRODUCT_UID, "name") == 0

    async def test_group_by_rows_are_remapped(self, mock_facet_service, mock_sql_executor):
        mock_sql_executor.execute.return_value = [{"id": 1, "name": "A", "published_at": "2024-01-01"}]

        rows = await mock_facet_service.run_group_by(PRODUCT_UID, "name", limit=10, start=5, sort="id")

        assert rows == [{"id": 1, "name": "A", "publishedAt": "2024-01-01"}]
        sql, parameters = mock_sql_executor.execute.await_args.args
        assert "FROM product AS t1" in sql
        assert "t1.id IN (SELECT min(t0.id) AS id" in sql
        assert "t0.published_at IS NOT NULL" in sql
        assert parameters == [10, 5]

    async def test_group_by_without_rows(self, mock_facet_service, mock_sql_executor):
        mock_sql_executor.execute.return_value = None

        assert await mock_facet_service.run_group_by(PRODUCT_UID, "name") == []


class TestFacetContext:
    def test_query_builder_gets_context_executor(self, catalog, query_builder, settings):
        sql_executor = AsyncMock()

        context = FacetContext(catalog=catalog, query_builder=query_builder, sql_executor=sql_executor, settings=settings)

        assert context.query_builder.sql_executor is sql_executor
