from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from livetrack.adapters.api.dependencies import get_route_catalog_service
from livetrack.adapters.api.schemas.routes import (
    RouteSchema,
    RouteSuggestionSchema,
    StopUsageSchema,
    SuggestRequestSchema,
)
from livetrack.adapters.api.serializers import (
    route_to_schema,
    stop_usage_to_schema,
    suggestion_to_schema,
)
from livetrack.app.services.route_catalog_service import RouteCatalogService

router = APIRouter(tags=["routes"])


@router.get("/routes", response_model=list[RouteSchema])
async def list_routes(
    service: RouteCatalogService = Depends(get_route_catalog_service),
) -> list[RouteSchema]:
    return [route_to_schema(r) for r in service.list_routes()]


@router.post("/routes/suggest", response_model=RouteSuggestionSchema)
@router.post("/optimize-route", response_model=RouteSuggestionSchema)
async def suggest_route(
    req: SuggestRequestSchema,
    service: RouteCatalogService = Depends(get_route_catalog_service),
) -> RouteSuggestionSchema:
    """Direct routes first, else two-leg transfers via a shared stop.

    `/optimize-route` is the path older clients post to; both take the same
    body and return the same suggestion.
    """

    if req.start_stop_id == req.end_stop_id:
        raise HTTPException(
            status_code=400, detail="Start and end stops must be different"
        )
    suggestion = service.suggest(
        start_stop_id=req.start_stop_id, end_stop_id=req.end_stop_id
    )
    return suggestion_to_schema(suggestion)


@router.get("/routes/{route_id}", response_model=RouteSchema)
async def get_route(
    route_id: str,
    service: RouteCatalogService = Depends(get_route_catalog_service),
) -> RouteSchema:
    # RouteNotFound is mapped to 404 by the app.
    return route_to_schema(service.get_route(route_id))


@router.get("/stops", response_model=list[StopUsageSchema])
async def list_stops(
    service: RouteCatalogService = Depends(get_route_catalog_service),
) -> list[StopUsageSchema]:
    return [stop_usage_to_schema(u) for u in service.list_stops()]
