from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from schemas import EventStats, NormalizedEvent, VenueSummary
from utils.geo import haversine_distance

# Graph returns offsets without a colon, e.g. 2017-03-04T20:00:00+0100
GRAPH_TIME_FMT = "%Y-%m-%dT%H:%M:%S%z"

# output distance unit is km * 100000
DISTANCE_SCALE = 100000


def parse_start_time(value: Any) -> Optional[datetime]:
    """
    Best-effort parser for Graph start_time values.
    Returns an aware datetime (UTC when no offset is given) or None.
    """
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value, GRAPH_TIME_FMT)
    except ValueError:
        pass
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def time_from_now(now: int, start_time: Any) -> Optional[float]:
    """Seconds from ``now`` (epoch seconds) until ``start_time``."""
    dt = parse_start_time(start_time)
    if dt is None:
        return None
    start_ms = round(dt.timestamp() * 1000)
    return (start_ms - now * 1000) / 1000


def venue_distance(
    location: Optional[Dict[str, Any]],
    origin: Optional[Tuple[float, float]],
) -> Optional[int]:
    if not location or origin is None:
        return None
    lat, lng = location.get("latitude"), location.get("longitude")
    if lat is None or lng is None:
        return None
    km = haversine_distance([lat, lng], origin, False)
    return int(math.floor(km * DISTANCE_SCALE + 0.5))


def _source(obj: Optional[Dict[str, Any]]) -> Optional[str]:
    return (obj or {}).get("source") or None


def _picture_url(obj: Optional[Dict[str, Any]]) -> Optional[str]:
    return ((obj or {}).get("data") or {}).get("url") or None


def build_venue(
    venue: Dict[str, Any],
    *,
    venue_id: Optional[str] = None,
    location: Optional[Dict[str, Any]] = None,
) -> VenueSummary:
    return VenueSummary(
        id=str(venue_id or venue.get("id") or "") or None,
        name=venue.get("name"),
        about=venue.get("about") or None,
        emails=venue.get("emails") or None,
        cover_picture=_source(venue.get("cover")),
        profile_picture=_picture_url(venue.get("picture")),
        location=location if location is not None else (venue.get("location") or None),
    )


def build_event(
    event: Dict[str, Any],
    venue: VenueSummary,
    *,
    origin: Optional[Tuple[float, float]],
    now: int,
) -> NormalizedEvent:
    """
    Map a raw Graph event into the flat output shape.

    ``venue.location`` is the point distance is measured from; ``origin`` is
    the query point. Missing optional fields become None, missing counters 0.
    """
    return NormalizedEvent(
        id=event.get("id"),
        name=event.get("name"),
        type=event.get("type"),
        cover_picture=_source(event.get("cover")),
        profile_picture=_picture_url(event.get("picture")),
        description=event.get("description") or None,
        distance=venue_distance(venue.location, origin),
        start_time=event.get("start_time") or None,
        end_time=event.get("end_time") or None,
        time_from_now=time_from_now(now, event.get("start_time")),
        category=event.get("category") or None,
        stats=EventStats(
            attending=event.get("attending_count") or 0,
            declined=event.get("declined_count") or 0,
            maybe=event.get("maybe_count") or 0,
            noreply=event.get("noreply_count") or 0,
        ),
        venue=venue,
    )
