"""HTTP client for the Dynamic Data Rate decision service."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import aiohttp

from ..config import DDRConfig
from ..core.errors import DDRLookupError
from ..core.models import Coordinates, DDRResponse

LOGGER = logging.getLogger(__name__)


def build_lookup_url(base_url: str, coordinates: Coordinates) -> str:
    """Append ``lat``/``lon`` (6 decimals) to the configured service URL.

    Query parameters already present on ``base_url`` are kept; the resulting
    query is ordered by key.
    """

    try:
        parts = urlsplit(base_url.strip())
    except ValueError as exc:
        raise DDRLookupError(f"could not parse ddr url {base_url!r}") from exc

    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise DDRLookupError(f"could not parse ddr url {base_url!r}")

    query = parse_qsl(parts.query, keep_blank_values=True)
    query.append(("lat", f"{coordinates.latitude:.6f}"))
    query.append(("lon", f"{coordinates.longitude:.6f}"))
    query.sort(key=lambda item: item[0])

    return urlunsplit(
        (parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment)
    )


def _parse_response(document: Any) -> DDRResponse:
    if not isinstance(document, dict):
        raise DDRLookupError("could not decode ddr response: expected a JSON object")

    datarate = document.get("datarate")
    if not isinstance(datarate, str):
        raise DDRLookupError(
            f"could not decode ddr response: datarate missing or not a string ({datarate!r})"
        )
    return DDRResponse(datarate=datarate)


class DDRServiceClient:
    """Resolves coordinates to a datarate through the DDR HTTP API."""

    def __init__(
        self,
        config: DDRConfig,
        *,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.config = config
        self._session: Optional[aiohttp.ClientSession] = session
        self._owns_session = session is None
        if config.timeout_seconds > 0:
            self._timeout = aiohttp.ClientTimeout(total=config.timeout_seconds)
        else:
            self._timeout = aiohttp.ClientTimeout(total=None)

    async def lookup(self, coordinates: Coordinates) -> DDRResponse:
        """Query the DDR service for ``coordinates``.

        Raises:
            DDRLookupError: If the URL is unusable, the request fails or the
                body is not ``{"datarate": "<string>"}``.
        """

        url = build_lookup_url(self.config.url, coordinates)
        session = await self._ensure_session()

        LOGGER.debug("Querying DDR service: %s", url)

        try:
            async with session.get(url, timeout=self._timeout) as response:
                response.raise_for_status()
                try:
                    document = await response.json(content_type=None)
                except ValueError as exc:
                    raise DDRLookupError(
                        f"could not decode ddr response: {exc}"
                    ) from exc
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise DDRLookupError(f"could not call ddr api: {exc}") from exc

        return _parse_response(document)

    async def aclose(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
        self._session = None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session
