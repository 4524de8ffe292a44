# entity_facets/facets/classifier.py
"""Classify entity attributes into facet kinds and build facet configurations."""

import copy
import logging
from typing import Any, Iterable, List, Optional, Union

from entity_facets.facets.schemas import FACET_TYPE_LIST, FACET_TYPE_RANGE, FacetConfig
from entity_facets.metadata.catalog import AttributeMeta, EntityMetadata

logger = logging.getLogger(__name__)

LIST_TYPES = ("string", "boolean", "enumeration")
RANGE_TYPES = ("integer", "biginteger", "decimal", "float")


def classify(declared_type: str) -> Optional[str]:
    """Map a declared scalar type to a facet kind, or None when it has none."""
    if declared_type in LIST_TYPES:
        return FACET_TYPE_LIST
    if declared_type in RANGE_TYPES:
        return FACET_TYPE_RANGE
    return None


def classify_attribute(attribute: AttributeMeta) -> Optional[str]:
    """Classify an attribute; the identity attribute never becomes a facet."""
    if attribute.primary_key or attribute.name == "id":
        return None
    return classify(attribute.type)


def build_config(
    metadata: EntityMetadata,
    explicit_config: Optional[Iterable[Union[FacetConfig, dict]]] = None,
    fields: Optional[List[str]] = None,
) -> List[FacetConfig]:
    """
    Build the effective facet configuration for an entity type.

    Explicit entries are copied, entries with no key or an unknown key are dropped,
    and missing types are derived from the attribute. Without an explicit config
    every eligible attribute is used in declaration order, restricted to `fields`
    when given.
    """
    configs: List[FacetConfig] = []

    if explicit_config is not None:
        for entry in explicit_config:
            config = _copy_config(entry)
            if not config.key:
                continue
            attribute = metadata.get_attribute(config.key)
            if attribute is None:
                logger.debug(f"Dropping facet '{config.key}': not an attribute of {metadata.uid}")
                continue
            if not config.type:
                facet_type = classify_attribute(attribute)
                if facet_type is None:
                    continue
                config.type = facet_type
            configs.append(config)
        return configs

    for name, attribute in metadata.attributes.items():
        if fields and name not in fields:
            continue
        facet_type = classify_attribute(attribute)
        if facet_type is None:
            continue
        configs.append(FacetConfig(key=name, type=facet_type))

    return configs


def _copy_config(entry: Any) -> FacetConfig:
    if isinstance(entry, FacetConfig):
        return entry.model_copy(deep=True)
    return FacetConfig.model_validate(copy.deepcopy(entry))
