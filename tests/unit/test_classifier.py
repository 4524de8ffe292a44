"""
Unit tests for facet classification and configuration building.
"""

import pytest

from entity_facets.facets.classifier import build_config, classify, classify_attribute
from entity_facets.facets.schemas import FacetConfig
from entity_facets.metadata.catalog import AttributeMeta


class TestClassify:
    """Test declared type -> facet kind"""

    @pytest.mark.parametrize("declared_type", ["string", "boolean", "enumeration"])
    def test_list_types(self, declared_type):
        assert classify(declared_type) == "list"

    @pytest.mark.parametrize("declared_type", ["integer", "biginteger", "decimal", "float"])
    def test_range_types(self, declared_type):
        assert classify(declared_type) == "range"

    @pytest.mark.parametrize("declared_type", ["datetime", "date", "json", "text", "unknown"])
    def test_other_types_have_no_facet(self, declared_type):
        assert classify(declared_type) is None

    def test_identity_attribute_is_excluded(self):
        assert classify_attribute(AttributeMeta(name="id", column_name="id", type="integer")) is None
        assert classify_attribute(
            AttributeMeta(name="code", column_name="code", type="string", primary_key=True)
        ) is None


class TestBuildConfig:
    """Test effective facet configuration"""

    def test_derived_from_attributes(self, article_meta):
        """Test every eligible attribute is used in declaration order"""
        configs = build_config(article_meta)

        assert [(c.key, c.type) for c in configs] == [
            ("title", "list"),
            ("category", "list"),
            ("featured", "list"),
            ("views", "range"),
            ("rating", "range"),
            ("wordCount", "range"),
        ]

    def test_derived_restricted_to_fields(self, article_meta):
        configs = build_config(article_meta, fields=["views", "category", "createdAt"])

        assert [c.key for c in configs] == ["category", "views"]

    def test_explicit_config_keeps_order_and_derives_types(self, product_meta):
        configs = build_config(product_meta, [{"key": "price"}, {"key": "name", "title": "Product"}])

        assert [(c.key, c.type, c.title) for c in configs] == [("price", "range", None), ("name", "list", "Product")]

    def test_explicit_config_drops_invalid_entries(self, product_meta):
        """Test entries without a key, with unknown keys, or with no derivable type are dropped"""
        configs = build_config(
            product_meta,
            [{"title": "No key"}, {"key": "missing"}, {"key": "publishedAt"}, {"key": "name"}],
        )

        assert [c.key for c in configs] == ["name"]

    def test_explicit_type_is_kept(self, product_meta):
        configs = build_config(product_meta, [{"key": "price", "type": "list"}])

        assert configs[0].type == "list"

    def test_explicit_config_is_not_mutated(self, product_meta):
        entry = {"key": "name", "values_config": [{"value": "A"}], "icon": "tag"}
        config = FacetConfig(key="price")

        configs = build_config(product_meta, [entry, config])

        assert "type" not in entry
        assert config.type is None
        assert configs[0].extra_fields() == {"icon": "tag"}
        configs[0].values_config.append({"value": "B"})
        assert entry["values_config"] == [{"value": "A"}]

    def test_empty_explicit_config(self, product_meta):
        assert build_config(product_meta, []) == []
