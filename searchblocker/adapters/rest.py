"""REST search adapter.

  GET  /rest/V1/search?searchCriteria[filter_groups][0][filters][0][field]=search_term
                      &searchCriteria[filter_groups][0][filters][0][value]=<term>
  POST /rest/V1/search  {"searchCriteria": {"filter_groups": [{"filters": [...]}]}}

The search term is the value of the first filter whose ``field`` is
``search_term``. A request without such a filter carries the empty term.
Blocked terms fail with HTTP 400 and the verdict message.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ConfigDict, Field

from searchblocker.adapters.deps import (
    get_search_backend,
    get_validator,
    record_verdict,
    require_ready,
)
from searchblocker.constants import REST_SEARCH_FIELD
from searchblocker.models.block import build_rest_block_response
from searchblocker.models.verdict import Channel

router = APIRouter(prefix="/rest/V1", tags=["rest"])

_CRITERIA_PREFIX = "searchCriteria["


# ─── Request models ───────────────────────────────────────────────────────────


class SearchFilter(BaseModel):
    field: str
    value: Any = None
    condition_type: Optional[str] = None


class FilterGroup(BaseModel):
    filters: list[SearchFilter] = Field(default_factory=list)


class SearchCriteria(BaseModel):
    filter_groups: list[FilterGroup] = Field(default_factory=list)


class SearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    search_criteria: SearchCriteria = Field(default_factory=SearchCriteria, alias="searchCriteria")


# ─── Term extraction ─────────────────────────────────────────────────────────


def extract_search_term(criteria: SearchCriteria) -> str:
    """Return the value of the first ``search_term`` filter, or ``""``."""
    for group in criteria.filter_groups:
        for search_filter in group.filters:
            if search_filter.field == REST_SEARCH_FIELD:
                return "" if search_filter.value is None else str(search_filter.value)
    return ""


def parse_search_criteria_params(params: Iterable[tuple[str, str]]) -> SearchCriteria:
    """Build SearchCriteria from bracketed query parameters.

    Only ``searchCriteria[filter_groups][<g>][filters][<f>][<attr>]`` keys are
    read; groups and filters are ordered by their numeric index. Other keys
    (page size, sort orders, ...) are ignored.
    """
    groups: dict[int, dict[int, dict[str, str]]] = {}
    for key, value in params:
        path = _bracket_path(key)
        if path is None or len(path) != 5:
            continue
        if path[0] != "filter_groups" or path[2] != "filters":
            continue
        try:
            group_index, filter_index = int(path[1]), int(path[3])
        except ValueError:
            continue
        groups.setdefault(group_index, {}).setdefault(filter_index, {})[path[4]] = value

    filter_groups = []
    for group_index in sorted(groups):
        filters = [
            SearchFilter(
                field=attrs.get("field", ""),
                value=attrs.get("value"),
                condition_type=attrs.get("condition_type"),
            )
            for _, attrs in sorted(groups[group_index].items())
        ]
        filter_groups.append(FilterGroup(filters=filters))
    return SearchCriteria(filter_groups=filter_groups)


def _bracket_path(key: str) -> Optional[list[str]]:
    if not key.startswith(_CRITERIA_PREFIX) or not key.endswith("]"):
        return None
    return key[len(_CRITERIA_PREFIX):-1].split("][")


# ─── Routes ───────────────────────────────────────────────────────────────────


@router.get("/search", dependencies=[Depends(require_ready)])
async def search_get(request: Request) -> Any:
    criteria = parse_search_criteria_params(request.query_params.multi_items())
    return await _search(request, criteria)


@router.post("/search", dependencies=[Depends(require_ready)])
async def search_post(request: Request, body: SearchRequest) -> Any:
    return await _search(request, body.search_criteria)


async def _search(request: Request, criteria: SearchCriteria) -> Any:
    term = extract_search_term(criteria)
    decision = get_validator(request).decide(Channel.REST, term)
    record_verdict(request, decision)

    if decision.verdict.is_blocked:
        return build_rest_block_response(decision.verdict)

    products = await get_search_backend(request).search(term)
    return {
        "items": [{"sku": p.sku, "name": p.name} for p in products],
        "total_count": len(products),
        "search_criteria": criteria.model_dump(),
    }
