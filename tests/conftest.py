from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from utils.http_client import AsyncHttpClient

FUTURE_START = "2099-03-04T20:00:00+0100"
PAST_START = "2001-03-04T20:00:00+0000"


def graph_event(
    event_id: str,
    *,
    start_time: Optional[str] = FUTURE_START,
    attending: int = 10,
    maybe: int = 4,
    place: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    ev: Dict[str, Any] = {
        "id": event_id,
        "name": f"Event {event_id}",
        "type": "public",
        "cover": {"id": "c" + event_id, "source": f"https://img.test/{event_id}.jpg"},
        "picture": {"data": {"url": f"https://img.test/{event_id}_p.jpg"}},
        "description": "Live music",
        "start_time": start_time,
        "end_time": "2099-03-04T23:00:00+0100",
        "category": "MUSIC_EVENT",
        "attending_count": attending,
        "declined_count": 1,
        "maybe_count": maybe,
        "noreply_count": 7,
    }
    if place is not None:
        ev["place"] = place
    return ev


def graph_venue(
    venue_id: str,
    events: List[Dict[str, Any]],
    *,
    location: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    venue: Dict[str, Any] = {
        "id": venue_id,
        "name": f"Venue {venue_id}",
        "about": "A club",
        "emails": [f"info@{venue_id}.test"],
        "cover": {"id": "vc", "source": f"https://img.test/{venue_id}.jpg"},
        "picture": {"data": {"url": f"https://img.test/{venue_id}_p.jpg"}},
    }
    if location is not None:
        venue["location"] = location
    if events:
        venue["events"] = {"data": events}
    return venue


class GraphStub:
    """Records every request and dispatches on the Graph path."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.places: Dict[str, Any] = {"data": []}
        self.venues: Dict[str, Dict[str, Any]] = {}
        self.objects: Dict[str, Dict[str, Any]] = {}
        self.fail_path: Optional[str] = None
        self.fail_response: Optional[httpx.Response] = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if self.fail_path is not None and path == self.fail_path:
            return self.fail_response or httpx.Response(500, text="boom")
        if path.endswith("/search"):
            return httpx.Response(200, json=self.places)
        if path.endswith("/"):
            ids = request.url.params["ids"].split(",")
            return httpx.Response(200, json={i: self.venues[i] for i in ids if i in self.venues})
        obj_id = path.rsplit("/", 1)[-1]
        if obj_id in self.objects:
            return httpx.Response(200, json=self.objects[obj_id])
        return httpx.Response(404, json={"error": {"message": "Unsupported get request", "code": 100}})


@pytest.fixture
def graph() -> GraphStub:
    return GraphStub()


@pytest.fixture
def make_http() -> Callable[[Callable[[httpx.Request], Any]], AsyncHttpClient]:
    def _make(handler: Callable[[httpx.Request], Any]) -> AsyncHttpClient:
        return AsyncHttpClient(transport=httpx.MockTransport(handler))

    return _make
