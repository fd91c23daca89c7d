import asyncio
import json
import time
from typing import Any, Mapping, Optional
from urllib.parse import quote

import aiohttp
from yarl import URL

from .config import Settings, load_settings
from .utils import logger, new_request_id

# characters left alone by JavaScript's encodeURIComponent (besides alnum)
_COMPONENT_SAFE = "-_.!~*'()"


class InfoPluApiError(RuntimeError):
    """Base class for upstream failures surfaced by InfoPluClient.get()."""


class ApiResponseError(InfoPluApiError):
    """Upstream answered with a non-2xx status."""

    def __init__(self, status: int, message: str = ""):
        self.status = status
        self.message = message
        super().__init__(f"HTTP {status}" + (f": {message}" if message else ""))


class ApiTransportError(InfoPluApiError):
    """
    No usable response at all.
    kind: "timeout" | "connection" (refused / DNS) | "network" (anything else)
    """

    def __init__(self, kind: str, detail: str = ""):
        self.kind = kind
        self.detail = detail
        super().__init__(detail or kind)


# ---------- query serializer ----------
def encode_component(value: Any) -> str:
    if isinstance(value, bool):
        value = "true" if value else "false"
    return quote(str(value), safe=_COMPONENT_SAFE)


def serialize_params(params: Optional[Mapping[str, Any]]) -> str:
    """
    Serialize query params, bracket notation for arrays:
      {"type": ["epci", "scot"], "rnu": True} -> "type[]=epci&type[]=scot&rnu=true"
    None values are skipped; an empty array produces nothing.
    """
    if not params:
        return ""
    parts = []
    for key, val in params.items():
        if val is None:
            continue
        k = encode_component(key)
        if isinstance(val, (list, tuple)):
            for item in val:
                parts.append(f"{k}[]={encode_component(item)}")
        else:
            parts.append(f"{k}={encode_component(val)}")
    return "&".join(parts)


def path_segment(value: str) -> str:
    """Percent-encode a caller supplied value used as one URL path segment."""
    return quote(value, safe=_COMPONENT_SAFE)


class InfoPluClient:
    """
    Read-only REST client for the Géoportail de l'Urbanisme API.
    - GET only, Accept: application/json
    - query strings always go through serialize_params()
    - one session per client, created lazily
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.s = settings or load_settings()
        self._session: Optional[aiohttp.ClientSession] = None

    async def _ensure(self):
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.s.timeout_s)
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                headers={"Accept": "application/json"},
            )

    async def close(self):
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        await self._ensure()
        return self

    async def __aexit__(self, *_):
        await self.close()

    def build_url(self, path: str, params: Optional[Mapping[str, Any]] = None) -> str:
        if not path.startswith("/"):
            path = "/" + path
        url = self.s.api_root + path
        qs = serialize_params(params)
        if qs:
            url = f"{url}?{qs}"
        return url

    async def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """
        GET path (relative to base_url) and return the decoded JSON body.
        Raises ApiResponseError / ApiTransportError.
        """
        await self._ensure()
        assert self._session is not None

        rid = new_request_id()
        url = self.build_url(path, params)
        t0 = time.perf_counter()

        try:
            # encoded=True: the query is already serialized, do not requote it
            async with self._session.get(URL(url, encoded=True)) as resp:
                elapsed_ms = (time.perf_counter() - t0) * 1000.0

                if resp.status >= 400:
                    message = await self._error_message(resp)
                    logger.warning(
                        "api_error",
                        extra={
                            "rid": rid,
                            "path": path,
                            "status": resp.status,
                            "elapsed_ms": round(elapsed_ms, 2),
                            "error": message,
                        },
                    )
                    raise ApiResponseError(resp.status, message)

                data = await resp.json(content_type=None)
                logger.info(
                    "api_get",
                    extra={
                        "rid": rid,
                        "path": path,
                        "status": resp.status,
                        "elapsed_ms": round(elapsed_ms, 2),
                    },
                )
                return data

        except asyncio.TimeoutError as e:
            logger.warning("api_timeout", extra={"rid": rid, "path": path})
            raise ApiTransportError("timeout", "request timed out") from e
        except aiohttp.ClientConnectorError as e:
            logger.warning("api_unreachable", extra={"rid": rid, "path": path, "error": str(e)})
            raise ApiTransportError("connection", str(e)) from e
        except aiohttp.ClientError as e:
            logger.warning("api_network_error", extra={"rid": rid, "path": path, "error": str(e)})
            raise ApiTransportError("network", str(e)) from e

    @staticmethod
    async def _error_message(resp: aiohttp.ClientResponse) -> str:
        """message from a JSON error body, else the reason phrase"""
        text = await resp.text()
        try:
            body = json.loads(text) if text else None
        except json.JSONDecodeError:
            body = None
        if isinstance(body, dict) and body.get("message") is not None:
            return str(body["message"])
        return resp.reason or ""
