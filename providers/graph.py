from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from utils.http_client import AsyncHttpClient

KEY = "graph"
NAME = "Facebook Graph API"
GRAPH_URL = "https://graph.facebook.com"

# Graph only accepts 50 ids per /?ids= call
ID_LIMIT = 50

EVENT_FIELDS = [
    "id",
    "type",
    "name",
    "cover.fields(id,source)",
    "picture.type(large)",
    "description",
    "start_time",
    "end_time",
    "category",
    "place",
    "attending_count",
    "declined_count",
    "maybe_count",
    "noreply_count",
]

VENUE_FIELDS = [
    "id",
    "name",
    "about",
    "emails",
    "cover.fields(id,source)",
    "picture.type(large)",
    "location",
    "events.fields(" + ",".join(EVENT_FIELDS) + ")",
]

VENUE_DETAIL_FIELDS = ["id", "cover", "about", "name"]


# --------- helpers ---------


def chunk_ids(ids: Iterable[str], size: int = ID_LIMIT) -> List[List[str]]:
    """Split place ids into batches of at most ``size``."""
    batches: List[List[str]] = []
    current: List[str] = []
    for venue_id in ids:
        current.append(venue_id)
        if len(current) >= size:
            batches.append(current)
            current = []
    if current:
        batches.append(current)
    return batches


def _time_window(since: Any, until: Any = None) -> str:
    window = f".since({since})"
    if until:
        window += f".until({until})"
    return window


# --------- provider (ASYNC) ---------


class GraphClient:
    name = KEY

    def __init__(
        self,
        http: AsyncHttpClient,
        *,
        access_token: Optional[str],
        version: str = "v2.8",
        base_url: str = GRAPH_URL,
    ) -> None:
        self.http = http
        self.access_token = access_token
        self.version = version
        self.base_url = base_url.rstrip("/")

    def _url(self, path: str = "") -> str:
        return f"{self.base_url}/{self.version}/{path}"

    async def search_places(
        self,
        *,
        lat: float,
        lng: float,
        distance: int,
        limit: int,
        query: str = "",
    ) -> List[str]:
        """Place ids within ``distance`` of the point, capped at ``limit``."""
        params = {
            "type": "place",
            "q": query or "",
            "center": f"{lat},{lng}",
            "distance": distance,
            "limit": limit,
            "fields": "id",
            "access_token": self.access_token,
        }
        data = await self.http.get_json(self._url("search"), params=params)
        return [str(p["id"]) for p in (data or {}).get("data") or [] if p.get("id")]

    async def get_venues_with_events(
        self,
        ids: List[str],
        *,
        since: Any,
        until: Any = None,
    ) -> Dict[str, Dict[str, Any]]:
        """One combined lookup for up to ID_LIMIT venues and their events."""
        params = {
            "ids": ",".join(ids),
            "access_token": self.access_token,
            "fields": ",".join(VENUE_FIELDS) + _time_window(since, until),
        }
        return await self.http.get_json(self._url(), params=params) or {}

    async def get_venue(self, venue_id: str) -> Dict[str, Any]:
        params = {
            "fields": ",".join(VENUE_DETAIL_FIELDS),
            "access_token": self.access_token,
        }
        return await self.http.get_json(self._url(venue_id), params=params) or {}

    async def get_event(self, event_id: str) -> Dict[str, Any]:
        params = {
            "fields": ",".join(EVENT_FIELDS),
            "access_token": self.access_token,
        }
        return await self.http.get_json(self._url(event_id), params=params) or {}
