from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional
import json
import logging
import os

import httpx

from services.errors import UpstreamError


logger = logging.getLogger(__name__)


def _redact(url: httpx.URL) -> str:
    if "access_token" in url.params:
        url = url.copy_set_param("access_token", "***")
    return str(url)


class AsyncHttpClient:
    """
    Small wrapper around httpx.AsyncClient with sane defaults:
    - Per-request timeout
    - JSON helper that turns every failure into UpstreamError
    - No retries; the caller decides what a failure means
    """

    def __init__(
        self,
        timeout: float = 8.0,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout = timeout

        ua = user_agent or os.getenv(
            "HTTP_USER_AGENT",
            "EventsByLocation/1.0 (+https://example.com)",
        )
        self._default_headers: dict[str, str] = {
            "User-Agent": ua,
            "Accept": "application/json",
        }
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers=self._default_headers,
            transport=transport,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHttpClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def get(
        self,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        merged: MutableMapping[str, str] = {}
        if headers:
            merged.update(headers)
        t = timeout or self._timeout
        return await self._client.get(
            url, params=params, headers=merged, timeout=t
        )

    async def get_json(
        self,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        try:
            resp = await self.get(
                url, params=params, headers=headers, timeout=timeout
            )
        except httpx.TimeoutException as e:
            logger.warning("Timeout calling %s: %s", url, e)
            raise UpstreamError(f"Upstream request timed out: {url}") from e
        except httpx.HTTPError as e:
            logger.warning("Transport error calling %s: %s", url, e)
            raise UpstreamError(f"{type(e).__name__}: {e}") from e

        logger.debug("GET %s -> %s", _redact(resp.request.url), resp.status_code)

        if resp.is_error:
            # Graph API errors come back as {"error": {...}}
            try:
                payload = resp.json()
            except json.JSONDecodeError:
                payload = None
            message: Any = (
                payload.get("error") if isinstance(payload, dict) and payload.get("error")
                else f"HTTP {resp.status_code}: {resp.text[:200]}"
            )
            logger.warning(
                "HTTP error %s for %s", resp.status_code, _redact(resp.request.url)
            )
            raise UpstreamError(message)

        try:
            return resp.json()
        except json.JSONDecodeError as e:
            logger.warning(
                "Non-JSON response from %s", _redact(resp.request.url)
            )
            raise UpstreamError(f"Malformed JSON from upstream: {e}") from e
