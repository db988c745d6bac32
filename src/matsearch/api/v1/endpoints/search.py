"""Search endpoint — Aggregated, ranked and paginated materials search."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from matsearch.api.deps import get_engine
from matsearch.core.engine import MaterialsSearchEngine
from matsearch.models.query import SearchQuery
from matsearch.models.response import SearchResult

router = APIRouter()


@router.get(
    "/search",
    response_model=SearchResult,
    summary="Materials Search",
    description=(
        "Search the local dataset and the remote property service in one call.\n\n"
        "**Query parameters:** `q`, `dataset` (`all` | `local` | `remote`), `page`, "
        "`pageSize` (clamped to 1–100), and the inclusive ranges `bandGapMin`/`bandGapMax`, "
        "`toughMin`/`toughMax`, `densMin`/`densMax`.\n\n"
        "A record missing a property is excluded whenever a range on that property is set. "
        "A provider that fails contributes no results; the response is still `200`."
    ),
    responses={
        422: {"description": "Invalid query: non-numeric bound, non-integer page, or unknown dataset"},
    },
)
async def search(
    request: Request,
    engine: MaterialsSearchEngine = Depends(get_engine),
) -> SearchResult:
    """Parse the query string and run one aggregated search.

    An ``InvalidQueryError`` from parsing is turned into a 422 by the
    application's exception handler.
    """
    query = SearchQuery.from_params(request.query_params)
    return await engine.search(query)
