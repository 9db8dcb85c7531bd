from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import pydantic
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from config import settings
from schemas import (
    ErrorResponse,
    EventsResponse,
    IdSearchParameters,
    SearchParameters,
)
from services.aggregator import EventSearch
from services.errors import SearchError, ValidationError
from utils.http_client import AsyncHttpClient

router = APIRouter(tags=["events"])

_log = logging.getLogger(__name__)

_ERROR_RESPONSES: Dict[int | str, Dict[str, Any]] = {500: {"model": ErrorResponse}}


def get_http_client(request: Request) -> Optional[AsyncHttpClient]:
    """
    Upstream client opened by the app lifespan. Without a running lifespan
    this is None and each search opens and closes its own.
    """
    return getattr(request.app.state, "http", None)


def _options(**kw: Any) -> Dict[str, Any]:
    opts = {k: v for k, v in kw.items() if v not in (None, "")}
    # env fallback happens here, once, at the boundary
    opts.setdefault("accessToken", settings.access_token)
    opts.setdefault("version", settings.graph_api_version)
    opts.setdefault("distance", settings.default_distance)
    opts.setdefault("limit", settings.default_limit)
    return opts


def _error(err: SearchError) -> JSONResponse:
    return JSONResponse(status_code=500, content=err.to_dict())


def _build(model: type[SearchParameters], opts: Dict[str, Any]) -> SearchParameters:
    try:
        return model.model_validate(opts)
    except pydantic.ValidationError as ve:
        _log.warning("rejected search options: %s errors", ve.error_count())
        raise ValidationError(
            "; ".join(
                f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in ve.errors()
            )
        ) from ve


def _event_search(
    params: SearchParameters, http: Optional[AsyncHttpClient]
) -> EventSearch:
    return EventSearch(
        params,
        http=http,
        base_url=settings.graph_base_url,
        timeout=settings.http_timeout_seconds,
        deadline=settings.request_deadline_seconds,
    )


# ---------- Routes ----------


@router.get("/events", response_model=EventsResponse, responses=_ERROR_RESPONSES)
async def search_events(
    lat_lan_array: Optional[str] = Query(
        None, alias="latLanArray", description="lat,lng[,lat,lng...]"
    ),
    lat: Optional[str] = Query(None),
    lng: Optional[str] = Query(None),
    distance: Optional[str] = Query(None, description="Radius in meters"),
    limit: Optional[str] = Query(None, description="Max places per point"),
    access_token: Optional[str] = Query(None, alias="accessToken"),
    query: Optional[str] = Query(None, description="Free-text place query"),
    sort: Optional[str] = Query(None, description="time|distance|venue|popularity"),
    version: Optional[str] = Query(None, description="Graph API version"),
    since: Optional[str] = Query(None, description="Epoch seconds"),
    until: Optional[str] = Query(None, description="Epoch seconds"),
    http: Optional[AsyncHttpClient] = Depends(get_http_client),
):
    """
    Events at venues around one or more points.

    Failures come back as HTTP 500 with ``{message, code}``; code 1 and 2
    are input errors, -1 is an upstream failure.
    """
    try:
        params = _build(SearchParameters, _options(
            latLanArray=lat_lan_array, lat=lat, lng=lng, distance=distance,
            limit=limit, accessToken=access_token, query=query, sort=sort,
            version=version, since=since, until=until,
        ))
        result = await _event_search(params, http).search()
    except SearchError as err:
        return _error(err)
    return EventsResponse(events=result["events"])


@router.get("/eventsbyids", response_model=EventsResponse, responses=_ERROR_RESPONSES)
async def search_events_by_ids(
    venue_id_array: Optional[str] = Query(None, alias="venueIdArray"),
    event_id_array: Optional[str] = Query(None, alias="eventIdArray"),
    lat_lan_array: Optional[str] = Query(None, alias="latLanArray"),
    lat: Optional[str] = Query(None),
    lng: Optional[str] = Query(None),
    access_token: Optional[str] = Query(None, alias="accessToken"),
    sort: Optional[str] = Query(None),
    version: Optional[str] = Query(None),
    http: Optional[AsyncHttpClient] = Depends(get_http_client),
):
    """Events for explicit venue/event id pairs, matched by position."""
    try:
        params = _build(IdSearchParameters, _options(
            venueIdArray=venue_id_array, eventIdArray=event_id_array,
            latLanArray=lat_lan_array, lat=lat, lng=lng,
            accessToken=access_token, sort=sort, version=version,
        ))
        result = await _event_search(params, http).search_by_id()
    except SearchError as err:
        return _error(err)
    return EventsResponse(events=result["events"])


@router.get("/events/schema")
def get_schema() -> Dict[str, Any]:
    """JSON Schema of the /events and /eventsbyids payload."""
    return EventsResponse.model_json_schema(by_alias=True)
