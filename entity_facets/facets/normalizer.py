# entity_facets/facets/normalizer.py
"""Turn parsed aggregate rows into the public facet result list."""

import re
from typing import Any, Dict, List, Optional

from entity_facets.core.config import DEFAULT_MAX_VALUES
from entity_facets.facets.schemas import (
    FACET_TYPE_LIST,
    FACET_TYPE_RANGE,
    FacetAggregates,
    FacetConfig,
    FacetItem,
    FacetResult,
    ListAggregateRow,
    ListFacetResult,
    RangeAggregate,
    RangeFacetResult,
)

_CAMEL_BOUNDARY = re.compile(r"([a-z\d])([A-Z])")
_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_SEPARATORS = re.compile(r"[\W_]+")


def title_label(value: Any) -> str:
    """
    Humanize a raw value or key for display.

    All-uppercase values are treated as acronyms and returned unchanged; anything
    else is split on camelCase, snake_case and punctuation boundaries and
    capitalized word by word ("publishedAt" -> "Published At").
    """
    if value is None or value == "":
        return ""
    text = str(value)
    if text.upper() == text:
        return text

    text = _CAMEL_BOUNDARY.sub(r"\1 \2", text)
    text = _ACRONYM_BOUNDARY.sub(r"\1 \2", text)
    words = [word for word in _SEPARATORS.split(text) if word]
    return " ".join(word[:1].upper() + word[1:].lower() for word in words)


def normalize(
    aggregates: FacetAggregates,
    facet_configs: List[FacetConfig],
    max_values: int = DEFAULT_MAX_VALUES,
) -> List[FacetResult]:
    """
    Build facet results in configuration order.

    Range facets without a positive numeric count or with non-numeric bounds are
    dropped, as are list facets with no values or more than `max_values` distinct
    values. `full_set` marks facets whose counts cover the whole filtered total.
    """
    total = aggregates.ranges.total
    results: List[FacetResult] = []

    for config in facet_configs:
        base = {
            **config.extra_fields(),
            "key": config.key,
            "type": config.type,
            "title": config.title or title_label(config.key),
        }

        if config.type == FACET_TYPE_RANGE:
            result = _normalize_range(base, aggregates.ranges.get(config.key), config.values_config, total)
        elif config.type == FACET_TYPE_LIST:
            result = _normalize_list(base, aggregates.lists.get(config.key), config.values_config, total, max_values)
        else:
            result = None

        if result is not None:
            results.append(result)

    return results


def _normalize_range(
    base: Dict[str, Any],
    aggregate: RangeAggregate,
    values_config: Any,
    total: int,
) -> Optional[RangeFacetResult]:
    if not aggregate.count:
        return None
    if aggregate.min is None or aggregate.max is None:
        return None

    hints = values_config if isinstance(values_config, dict) else {}
    return RangeFacetResult.model_validate(
        {
            **base,
            "min": _with_hint(hints.get("min"), aggregate.min),
            "max": _with_hint(hints.get("max"), aggregate.max),
            "count": aggregate.count,
            "full_set": aggregate.count == total,
        }
    )


def _with_hint(hint: Any, value: Any) -> Any:
    if isinstance(hint, dict):
        return {**hint, "value": value}
    return value


def _normalize_list(
    base: Dict[str, Any],
    rows: Optional[List[ListAggregateRow]],
    values_config: Any,
    total: int,
    max_values: int,
) -> Optional[ListFacetResult]:
    if not rows or len(rows) > max_values:
        return None

    items: List[FacetItem] = []
    if values_config:
        for value_prop in values_config:
            if not isinstance(value_prop, dict):
                value_prop = {"value": value_prop}
            row = _find_row(rows, value_prop.get("value"))
            if row is None:
                continue
            items.append(
                FacetItem.model_validate(
                    {
                        **value_prop,
                        "label": value_prop.get("label") or title_label(value_prop.get("value")),
                        "count": row.count,
                    }
                )
            )
    else:
        for row in rows:
            items.append(FacetItem(value=row.value, label=title_label(row.value), count=row.count))

    matched = sum(item.count for item in items)
    return ListFacetResult.model_validate({**base, "items": items, "full_set": matched == total})


def _find_row(rows: List[ListAggregateRow], value: Any) -> Optional[ListAggregateRow]:
    for row in rows:
        if row.value == value:
            return row
    # Drivers may hand back 1/0 for booleans or numbers for numeric strings
    for row in rows:
        if row.value is not None and value is not None and str(row.value) == str(value):
            return row
    return None
