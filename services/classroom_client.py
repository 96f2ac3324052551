"""HTTP client for the Google Classroom REST API.

Wraps ``httpx.AsyncClient`` with:
- base URL + API version prefix construction
- per-call Bearer token (the caller's OAuth access token is never stored)
- ``nextPageToken`` pagination
- request timing logs
- connection-pool lifecycle tied to FastAPI lifespan

Failures are reported, never retried: callers decide whether a failed
call is fatal (course list) or replaced with an empty result (everything
below the course level).
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from config.settings import get_settings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------
_client: ClassroomClient | None = None

# Hard stop for runaway pagination (a misbehaving token loop).
MAX_PAGES = 200


class ClassroomClientError(Exception):
    """Raised when a Classroom API call fails.

    ``status_code`` is ``0`` when no HTTP response was received.
    """

    def __init__(self, status_code: int, detail: str, url: str = ""):
        self.status_code = status_code
        self.detail = detail
        self.url = url
        super().__init__(f"Classroom API {status_code}: {detail} ({url})")


class ClassroomClient:
    """Async HTTP client for Google Classroom, shared across requests."""

    def __init__(self) -> None:
        settings = get_settings()
        self._base_url = f"{settings.classroom_base_url.rstrip('/')}{settings.classroom_api_prefix}"
        self._timeout = settings.classroom_timeout
        self._page_size = settings.classroom_page_size
        self._http: httpx.AsyncClient | None = None

    # -- lifecycle -----------------------------------------------------------

    async def start(self) -> None:
        """Create the underlying ``httpx.AsyncClient`` connection pool."""
        if self._http is not None:
            return
        self._http = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(self._timeout),
            limits=httpx.Limits(
                max_connections=30,
                max_keepalive_connections=15,
                keepalive_expiry=30,
            ),
        )
        logger.info("ClassroomClient started, base_url=%s", self._base_url)

    async def close(self) -> None:
        """Gracefully close the connection pool."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None
            logger.info("ClassroomClient closed")

    # -- public API ----------------------------------------------------------

    async def get(
        self,
        path: str,
        token: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send a single authenticated GET request.

        Raises :class:`ClassroomClientError` on any non-2xx response or
        transport failure.
        """
        client = self._ensure_started()
        t0 = time.monotonic()
        try:
            response = await client.get(path, params=params, headers=_auth_headers(token))
        except httpx.TransportError as exc:
            elapsed_ms = (time.monotonic() - t0) * 1000
            logger.warning("GET %s → network error (%.0fms): %s", path, elapsed_ms, exc)
            raise ClassroomClientError(status_code=0, detail=str(exc), url=path) from exc

        elapsed_ms = (time.monotonic() - t0) * 1000
        logger.info("GET %s → %d (%.0fms)", path, response.status_code, elapsed_ms)

        if response.status_code >= 400:
            detail = response.text[:500] if response.text else f"HTTP {response.status_code}"
            raise ClassroomClientError(
                status_code=response.status_code,
                detail=detail,
                url=str(response.url),
            )
        if not response.text:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            logger.warning("GET %s → invalid JSON body", path)
            raise ClassroomClientError(
                status_code=response.status_code,
                detail="invalid JSON body",
                url=str(response.url),
            ) from exc

    async def get_paginated(
        self,
        path: str,
        token: str,
        items_key: str,
        params: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Collect ``items_key`` from every page of a list endpoint."""
        items: list[dict[str, Any]] = []
        page_params: dict[str, Any] = {"pageSize": self._page_size, **(params or {})}

        for _ in range(MAX_PAGES):
            body = await self.get(path, token, params=page_params)
            page_items = body.get(items_key) or []
            if isinstance(page_items, list):
                items.extend(page_items)
            else:
                logger.warning("%s: expected list under %r, got %s", path, items_key, type(page_items))

            next_token = body.get("nextPageToken")
            if not next_token:
                return items
            page_params = {**page_params, "pageToken": next_token}

        logger.warning("%s: stopped after %d pages", path, MAX_PAGES)
        return items

    # -- internals -----------------------------------------------------------

    def _ensure_started(self) -> httpx.AsyncClient:
        if self._http is None:
            raise RuntimeError("ClassroomClient not started; call await client.start() first")
        return self._http


def _auth_headers(token: str) -> dict[str, str]:
    headers: dict[str, str] = {"Accept": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


# ---------------------------------------------------------------------------
# Singleton accessor
# ---------------------------------------------------------------------------

def get_classroom_client() -> ClassroomClient:
    """Return the module-level ClassroomClient singleton (create if needed)."""
    global _client
    if _client is None:
        _client = ClassroomClient()
    return _client
