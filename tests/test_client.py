"""Tests for the query serializer and the HTTP client wrapper."""

import asyncio
import socket
from urllib.parse import parse_qsl

import pytest
from aiohttp import web
from aiohttp import test_utils

from infoplu_mcp.client import (
    ApiResponseError,
    ApiTransportError,
    InfoPluClient,
    path_segment,
    serialize_params,
)
from infoplu_mcp.config import Settings


class TestSerializeParams:
    """Tests for serialize_params."""

    def test_arrays_use_bracket_notation(self) -> None:
        """Test that each array element becomes one key[]= pair, in order."""
        qs = serialize_params({"type": ["scot", "epci", "region"]})
        assert qs == "type[]=scot&type[]=epci&type[]=region"

    def test_scalars_and_booleans(self) -> None:
        """Test scalar rendering, booleans spelled true/false."""
        qs = serialize_params({"_limit": 20, "rnu": True, "approved": False, "title": "Lyon"})
        assert qs == "_limit=20&rnu=true&approved=false&title=Lyon"

    def test_none_and_empty_array_are_omitted(self) -> None:
        """Test that absent values and empty arrays produce no pair."""
        qs = serialize_params({"name": None, "type": [], "page": 0})
        assert qs == "page=0"

    def test_empty_mapping(self) -> None:
        """Test empty and missing params."""
        assert serialize_params({}) == ""
        assert serialize_params(None) == ""

    def test_mixed_order_is_preserved(self) -> None:
        """Test that pairs follow mapping iteration order."""
        qs = serialize_params({"b": 1, "a": ["x", "y"], "c": "z"})
        assert qs == "b=1&a[]=x&a[]=y&c=z"

    def test_tuple_is_an_array(self) -> None:
        """Test that tuples are treated like lists."""
        assert serialize_params({"documentType": ("PLU", "PLUi")}) == "documentType[]=PLU&documentType[]=PLUi"

    def test_reserved_characters_round_trip(self) -> None:
        """Test percent-encoding of reserved characters in keys and values."""
        value = "Saint-Étienne & co/1=2?#"
        qs = serialize_params({"title": value, "a b": "c"})
        assert "&co" not in qs
        assert "a%20b=c" in qs
        assert parse_qsl(qs) == [("title", value), ("a b", "c")]

    def test_array_values_are_encoded(self) -> None:
        """Test that array elements are percent-encoded too."""
        qs = serialize_params({"partition": ["a&b", "c d"]})
        assert qs == "partition[]=a%26b&partition[]=c%20d"

    def test_component_safe_characters(self) -> None:
        """Test that encodeURIComponent's unreserved marks are kept."""
        assert serialize_params({"q": "a-b_c.d!e~f*g'h(i)"}) == "q=a-b_c.d!e~f*g'h(i)"


def test_path_segment_escapes_slash() -> None:
    """Test that caller values cannot add path segments."""
    assert path_segment("69123") == "69123"
    assert path_segment("a/b c") == "a%2Fb%20c"


class TestBuildUrl:
    """Tests for InfoPluClient.build_url."""

    def test_trailing_slash_in_base_url(self) -> None:
        """Test that the base URL trailing slash is not doubled."""
        c = InfoPluClient(Settings(base_url="https://example.test/api/"))
        assert c.build_url("/grid/", {"_limit": 20}) == "https://example.test/api/grid/?_limit=20"

    def test_no_query(self) -> None:
        """Test that no '?' is added without params."""
        c = InfoPluClient(Settings(base_url="https://example.test/api"))
        assert c.build_url("/standard") == "https://example.test/api/standard"
        assert c.build_url("standard", {"type": None}) == "https://example.test/api/standard"


def _free_port() -> int:
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.mark.anyio
class TestInfoPluClientGet:
    """Tests for InfoPluClient.get against a local aiohttp server."""

    @staticmethod
    def _app() -> web.Application:
        async def grids(request: web.Request) -> web.Response:
            return web.json_response(
                {
                    "raw_query": request.rel_url.raw_query_string,
                    "types": request.query.getall("type[]", []),
                    "title": request.query.get("title"),
                    "accept": request.headers.get("Accept"),
                }
            )

        async def missing(_request: web.Request) -> web.Response:
            return web.json_response({"message": "Unknown grid"}, status=404)

        async def bad(_request: web.Request) -> web.Response:
            return web.json_response({"message": "limit must be <= 100"}, status=400)

        async def broken(_request: web.Request) -> web.Response:
            return web.Response(status=503, text="<html>down</html>")

        async def slow(_request: web.Request) -> web.Response:
            await asyncio.sleep(1.0)
            return web.json_response([])

        app = web.Application()
        app.router.add_get("/api/grid/", grids)
        app.router.add_get("/api/grid/unknown", missing)
        app.router.add_get("/api/document", bad)
        app.router.add_get("/api/standard", broken)
        app.router.add_get("/api/slow", slow)
        return app

    async def test_get_decodes_json_and_sends_bracket_query(self) -> None:
        """Test JSON decoding, Accept header and raw bracket query."""
        async with test_utils.TestServer(self._app()) as srv:
            async with InfoPluClient(Settings(base_url=str(srv.make_url("/api")))) as c:
                data = await c.get("/grid/", {"type": ["epci", "scot"], "title": "Saint-Étienne"})

        assert data["raw_query"].startswith("type[]=epci&type[]=scot&title=")
        assert data["types"] == ["epci", "scot"]
        assert data["title"] == "Saint-Étienne"
        assert data["accept"] == "application/json"

    async def test_404_carries_status_and_message(self) -> None:
        """Test that a non-2xx response raises ApiResponseError with body message."""
        async with test_utils.TestServer(self._app()) as srv:
            async with InfoPluClient(Settings(base_url=str(srv.make_url("/api")))) as c:
                with pytest.raises(ApiResponseError) as exc:
                    await c.get("/grid/unknown")

        assert exc.value.status == 404
        assert exc.value.message == "Unknown grid"

    async def test_400_message(self) -> None:
        """Test message extraction for a bad request."""
        async with test_utils.TestServer(self._app()) as srv:
            async with InfoPluClient(Settings(base_url=str(srv.make_url("/api")))) as c:
                with pytest.raises(ApiResponseError) as exc:
                    await c.get("/document", {"limit": 500})

        assert exc.value.status == 400
        assert exc.value.message == "limit must be <= 100"

    async def test_non_json_error_body_uses_reason(self) -> None:
        """Test that a non-JSON error body falls back to the reason phrase."""
        async with test_utils.TestServer(self._app()) as srv:
            async with InfoPluClient(Settings(base_url=str(srv.make_url("/api")))) as c:
                with pytest.raises(ApiResponseError) as exc:
                    await c.get("/standard")

        assert exc.value.status == 503
        assert exc.value.message == "Service Unavailable"

    async def test_timeout(self) -> None:
        """Test that a slow upstream surfaces as a timeout transport error."""
        async with test_utils.TestServer(self._app()) as srv:
            settings = Settings(base_url=str(srv.make_url("/api")), timeout_s=0.2)
            async with InfoPluClient(settings) as c:
                with pytest.raises(ApiTransportError) as exc:
                    await c.get("/slow")

        assert exc.value.kind == "timeout"

    async def test_connection_refused(self) -> None:
        """Test that an unreachable host surfaces as a connection transport error."""
        settings = Settings(base_url=f"http://127.0.0.1:{_free_port()}/api")
        async with InfoPluClient(settings) as c:
            with pytest.raises(ApiTransportError) as exc:
                await c.get("/grid/")

        assert exc.value.kind == "connection"

    async def test_close_is_idempotent(self) -> None:
        """Test closing a client twice, or before use."""
        c = InfoPluClient(Settings())
        await c.close()
        await c._ensure()
        await c.close()
        await c.close()
