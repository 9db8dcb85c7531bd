from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any, Awaitable, Dict, Iterable, List, Optional, Tuple

from providers.graph import GRAPH_URL, GraphClient, chunk_ids
from schemas import IdSearchParameters, NormalizedEvent, SearchParameters
from services.errors import (
    MismatchedInputError,
    SearchError,
    UpstreamError,
    ValidationError,
)
from services.normalize import build_event, build_venue
from services.sorting import sort_events
from utils.http_client import AsyncHttpClient

logger = logging.getLogger(__name__)

MISSING_COORDINATES = "Please specify the lat and lng parameters!"
MISSING_VENUES = "Please specify the venue details!"
MISSING_TOKEN = (
    "Please specify an Access Token, either as environment variable "
    "or as accessToken parameter!"
)

Point = Tuple[float, float]


def _now() -> int:
    return int(round(time.time()))


# ---------- Fan-out utilities ----------


async def gather_or_cancel(aws: Iterable[Awaitable[Any]]) -> List[Any]:
    """
    Run every awaitable concurrently and return results in input order.
    The first failure cancels the siblings still running and is re-raised.
    """
    tasks = [asyncio.ensure_future(a) for a in aws]
    if not tasks:
        return []
    try:
        done, pending = await asyncio.wait(
            tasks, return_when=asyncio.FIRST_EXCEPTION
        )
        for t in tasks:
            if t in done and not t.cancelled() and t.exception() is not None:
                raise t.exception()  # type: ignore[misc]
        return [t.result() for t in tasks]
    finally:
        stragglers = [t for t in tasks if not t.done()]
        for t in stragglers:
            t.cancel()
        if stragglers:
            await asyncio.gather(*stragglers, return_exceptions=True)


# ---------- Orchestrator ----------


class EventSearch:
    """
    Stateless search over the Graph API for one request.

    ``search()`` looks venues up around every coordinate pair and collects
    their upcoming events; ``search_by_id()`` fetches explicit venue/event
    pairs. Both resolve with ``{"events": [NormalizedEvent, ...]}`` or raise
    a SearchError.
    """

    def __init__(
        self,
        params: SearchParameters,
        *,
        http: Optional[AsyncHttpClient] = None,
        base_url: str = GRAPH_URL,
        timeout: float = 8.0,
        deadline: Optional[float] = 30.0,
    ) -> None:
        self.params = params
        self.base_url = base_url
        self.timeout = timeout
        self.deadline = deadline
        self._http = http

    # ---------- public ----------

    async def search(self) -> Dict[str, List[NormalizedEvent]]:
        p = self.params
        coords = p.coordinates
        if not coords:
            raise self._log(ValidationError(MISSING_COORDINATES))
        self._require_token()

        async def run(graph: GraphClient) -> List[NormalizedEvent]:
            chunks = await gather_or_cancel(
                self._search_point(graph, point) for point in coords
            )
            return [e for chunk in chunks for e in chunk]

        events = await self._run(run)
        sort_events(events, p.sort)
        logger.info(
            "search points=%s events=%s sort=%s", len(coords), len(events), p.sort
        )
        return {"events": events}

    async def search_by_id(self) -> Dict[str, List[NormalizedEvent]]:
        p = self.params
        if not isinstance(p, IdSearchParameters) or not p.venue_id_array:
            raise self._log(ValidationError(MISSING_VENUES))
        if len(p.venue_id_array) != len(p.event_id_array):
            raise self._log(MismatchedInputError(
                f"venueIdArray has {len(p.venue_id_array)} ids but "
                f"eventIdArray has {len(p.event_id_array)}"
            ))
        self._require_token()

        coords = p.coordinates
        origin = coords[0] if coords else None

        async def run(graph: GraphClient) -> List[NormalizedEvent]:
            return await gather_or_cancel(
                self._fetch_pair(graph, venue_id, event_id, origin)
                for venue_id, event_id in zip(p.venue_id_array, p.event_id_array)
            )

        events = await self._run(run)
        sort_events(events, p.sort)
        logger.info("search_by_id pairs=%s sort=%s", len(events), p.sort)
        return {"events": events}

    # ---------- pipelines ----------

    async def _search_point(
        self, graph: GraphClient, point: Point
    ) -> List[NormalizedEvent]:
        p = self.params
        now = _now()
        lat, lng = point

        ids = await graph.search_places(
            lat=lat, lng=lng, distance=p.distance, limit=p.limit, query=p.query
        )
        batches = chunk_ids(ids)
        logger.debug(
            "point=%s,%s venues=%s batches=%s", lat, lng, len(ids), len(batches)
        )

        results = await gather_or_cancel(
            graph.get_venues_with_events(batch, since=p.since, until=p.until)
            for batch in batches
        )

        events: List[NormalizedEvent] = []
        for result in results:
            for venue_id, venue in result.items():
                data = ((venue or {}).get("events") or {}).get("data") or []
                if not data:
                    continue
                summary = build_venue(venue, venue_id=venue_id)
                for ev in data:
                    events.append(build_event(ev, summary, origin=point, now=now))
        return events

    async def _fetch_pair(
        self,
        graph: GraphClient,
        venue_id: str,
        event_id: str,
        origin: Optional[Point],
    ) -> NormalizedEvent:
        now = _now()
        venue, event = await gather_or_cancel(
            [graph.get_venue(venue_id), graph.get_event(event_id)]
        )
        # distance comes from the event's place, not the venue lookup
        location = ((event.get("place") or {}).get("location")) or None
        summary = build_venue(venue, venue_id=venue.get("id"), location=location)
        return build_event(event, summary, origin=origin, now=now)

    # ---------- plumbing ----------

    def _require_token(self) -> None:
        if not self.params.access_token:
            raise self._log(ValidationError(MISSING_TOKEN, code=2))

    def _graph(self, http: AsyncHttpClient) -> GraphClient:
        return GraphClient(
            http,
            access_token=self.params.access_token,
            version=self.params.version,
            base_url=self.base_url,
        )

    async def _run(self, pipeline) -> List[NormalizedEvent]:
        http = self._http or AsyncHttpClient(timeout=self.timeout)
        try:
            return await asyncio.wait_for(pipeline(self._graph(http)), self.deadline)
        except SearchError as e:
            raise self._log(e)
        except asyncio.TimeoutError as e:
            raise self._log(UpstreamError(
                f"Search did not finish within {self.deadline}s"
            )) from e
        except Exception as e:
            raise self._log(UpstreamError(f"{type(e).__name__}: {e}")) from e
        finally:
            if self._http is None:
                await http.aclose()

    @staticmethod
    def _log(err: SearchError) -> SearchError:
        logger.error(json.dumps(err.to_dict(), default=str))
        return err
