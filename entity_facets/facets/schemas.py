"""Schemas for facet configuration, raw aggregate rows and facet results."""

import math
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict

Number = Union[int, float]

FACET_TYPE_LIST = "list"
FACET_TYPE_RANGE = "range"
RANGES_KEY = "ranges"


def parse_number(value: Any) -> Optional[Number]:
    """Parse an aggregate value into an int or float; None when it is not a number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return None if math.isnan(value) or math.isinf(value) else value
    if isinstance(value, Decimal):
        if not value.is_finite():
            return None
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, (str, bytes)):
        text = value.decode() if isinstance(value, bytes) else value
        try:
            return parse_number(Decimal(text.strip()))
        except (InvalidOperation, ValueError):
            return None
    return None


# ===== FACET CONFIGURATION =====


class FacetConfig(BaseModel):
    """Configuration of one facet; unknown keys are carried into the result."""

    key: Optional[str] = None
    type: Optional[str] = None
    title: Optional[str] = None
    # Ordered [{value, label?, ...}] for list facets, {min?, max?} hints for range facets
    values_config: Optional[Any] = None

    model_config = ConfigDict(extra="allow")

    def extra_fields(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})


# ===== QUERY BATCH =====


@dataclass
class QueryBatchEntry:
    """One aggregate statement of a facet batch; `key` is a facet key or RANGES_KEY."""

    key: str
    sql: str
    parameters: List[Any] = field(default_factory=list)


# ===== RAW AGGREGATE ROWS =====


@dataclass(frozen=True)
class ListAggregateRow:
    """One distinct value of a list facet with its occurrence count."""

    value: Any
    count: int

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ListAggregateRow":
        return cls(value=row.get("value"), count=int(parse_number(row.get("count")) or 0))


@dataclass(frozen=True)
class RangeAggregate:
    """min/max/count of one range facet; fields are None when not numeric."""

    min: Optional[Number] = None
    max: Optional[Number] = None
    count: Optional[Number] = None


@dataclass(frozen=True)
class RangeAggregateRow:
    """The combined ranges row: the filtered total plus per-facet aggregates."""

    total: int
    aggregates: Dict[str, RangeAggregate] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: Optional[Dict[str, Any]]) -> "RangeAggregateRow":
        row = row or {}
        aggregates = {}
        for column in row:
            if not column.startswith("count_"):
                continue
            key = column[len("count_"):]
            aggregates[key] = RangeAggregate(
                min=parse_number(row.get(f"min_{key}")),
                max=parse_number(row.get(f"max_{key}")),
                count=parse_number(row.get(column)),
            )
        return cls(total=int(parse_number(row.get("total")) or 0), aggregates=aggregates)

    def get(self, key: str) -> RangeAggregate:
        return self.aggregates.get(key, RangeAggregate())


@dataclass
class FacetAggregates:
    """Parsed results of one facet query batch."""

    ranges: RangeAggregateRow
    lists: Dict[str, List[ListAggregateRow]] = field(default_factory=dict)


# ===== FACET RESULTS =====


class FacetItem(BaseModel):
    value: Any = None
    label: str = ""
    count: int = 0

    model_config = ConfigDict(extra="allow")


class RangeFacetResult(BaseModel):
    key: str
    type: Literal["range"] = "range"
    title: str
    full_set: bool
    # Bare numbers, or the configured hint objects with a `value` field
    min: Any
    max: Any
    count: Number

    model_config = ConfigDict(extra="allow")


class ListFacetResult(BaseModel):
    key: str
    type: Literal["list"] = "list"
    title: str
    full_set: bool
    items: List[FacetItem] = []

    model_config = ConfigDict(extra="allow")


FacetResult = Union[RangeFacetResult, ListFacetResult]


# ===== REQUESTS =====


class FacetRequest(BaseModel):
    filters: Optional[Dict[str, Any]] = None
    fields: Optional[List[str]] = None
    publication_state: Optional[str] = None
    facets: Optional[List[FacetConfig]] = None
    max_values: Optional[int] = None

    model_config = ConfigDict(extra="forbid")


class GroupByCountRequest(BaseModel):
    group_by: Union[str, List[str]]
    filters: Optional[Dict[str, Any]] = None
    publication_state: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class GroupByRequest(GroupByCountRequest):
    fields: Optional[List[str]] = None
    populate: Optional[List[str]] = None
    sort: Optional[Union[str, List[Any], Dict[str, str]]] = None
    start: Optional[int] = None
    limit: Optional[int] = None


class GroupByCountResponse(BaseModel):
    count: Optional[int] = None
