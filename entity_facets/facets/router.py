# entity_facets/facets/router.py
"""API router for facet and group-by queries."""

from typing import Any, Dict, List, Union

from fastapi import APIRouter

from entity_facets.core.dependencies import FacetServiceDep
from entity_facets.facets.schemas import (
    FacetRequest,
    GroupByCountRequest,
    GroupByCountResponse,
    GroupByRequest,
    ListFacetResult,
    RangeFacetResult,
)

router = APIRouter(prefix="/entities", tags=["Facets"])


@router.post("/{uid}/facets", response_model=List[Union[RangeFacetResult, ListFacetResult]])
async def get_facets(uid: str, request: FacetRequest, service: FacetServiceDep) -> List[Union[RangeFacetResult, ListFacetResult]]:
    """Get filter facets for the filtered entity set."""
    return await service.run_filters(
        uid,
        request.facets,
        filters=request.filters,
        fields=request.fields,
        publication_state=request.publication_state,
        max_values=request.max_values,
    )


@router.post("/{uid}/group-by", response_model=List[Dict[str, Any]])
async def get_grouped_items(uid: str, request: GroupByRequest, service: FacetServiceDep) -> List[Dict[str, Any]]:
    """Get one representative record per distinct group."""
    return await service.run_group_by(
        uid,
        request.group_by,
        filters=request.filters,
        fields=request.fields,
        populate=request.populate,
        publication_state=request.publication_state,
        limit=request.limit,
        sort=request.sort,
        start=request.start,
    )


@router.post("/{uid}/group-by/count", response_model=GroupByCountResponse)
async def count_groups(uid: str, request: GroupByCountRequest, service: FacetServiceDep) -> GroupByCountResponse:
    """Count distinct groups under the filters."""
    count = await service.run_group_by_count(
        uid, request.group_by, filters=request.filters, publication_state=request.publication_state
    )
    return GroupByCountResponse(count=count)
