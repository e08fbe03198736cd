"""
HTTP client for the pins API.

Used by map sessions (and scripts) to talk to a running server.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-20
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import aiohttp

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 15


class ApiError(Exception):
    """Raised when the API answers with an error or cannot be reached.

    Attributes:
        status: HTTP status code, or None for connection failures.
        message: Error detail returned by the server, if any.
    """

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


class PinsClient:
    """Async client for the pin and comment endpoints.

    Args:
        base_url: Server root, e.g. ``http://localhost:8000``.
        session: Existing aiohttp session to reuse. When omitted, one is
            created on first use and closed by :meth:`close`.
    """

    def __init__(self, base_url: str, session: Optional[aiohttp.ClientSession] = None):
        self.base_url = base_url.rstrip("/")
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=DEFAULT_TIMEOUT_S)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    async def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            async with self._get_session().request(method, url, json=json) as response:
                try:
                    data = await response.json(content_type=None)
                except ValueError:
                    data = None
                if response.status >= 400:
                    detail = data.get("detail") if isinstance(data, dict) else None
                    raise ApiError(detail or f"Request failed: {method} {path}", response.status)
                return data
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("Request %s %s failed: %s", method, url, e)
            raise ApiError(f"Network error: {e}") from e

    async def fetch_pins(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/api/pins")

    async def fetch_pin(self, pin_id: str) -> Dict[str, Any]:
        """Pin detail including its comments, newest first."""
        return await self._request("GET", f"/api/pins/{pin_id}")

    async def create_pin(
        self, lat: float, lng: float, title: str, description: str, author_name: str
    ) -> Dict[str, Any]:
        payload = {
            "lat": lat,
            "lng": lng,
            "title": title,
            "description": description,
            "authorName": author_name,
        }
        return await self._request("POST", "/api/pins", json=payload)

    async def create_comment(self, pin_id: str, author_name: str, content: str) -> Dict[str, Any]:
        payload = {"authorName": author_name, "content": content}
        return await self._request("POST", f"/api/pins/{pin_id}/comments", json=payload)
