"""Tests for the security header analyzer."""

import httpx
import pytest
import respx
from httpx import Response

from autosecscan.analyzers import HeaderAnalyzer
from autosecscan.errors import TargetConnectionError
from autosecscan.tools.http import HTTPClient


class TestHeaderAnalyzer:
    """HEAD-then-GET fetch and classification."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_uses_head_response(self, http_target):
        head = respx.head("http://example.com/").mock(
            return_value=Response(
                200,
                headers={
                    "X-Frame-Options": "DENY",
                    "X-Content-Type-Options": "nosniff",
                },
            )
        )
        get = respx.get("http://example.com/").mock(return_value=Response(200))

        scan = await HeaderAnalyzer().run(http_target)

        assert head.called
        assert not get.called
        assert scan.security_score == 28
        assert {h.name for h in scan.present_headers} == {
            "X-Frame-Options",
            "X-Content-Type-Options",
        }

    @respx.mock
    @pytest.mark.asyncio
    async def test_falls_back_to_get_on_error_status(self, http_target):
        respx.head("http://example.com/").mock(return_value=Response(405))
        respx.get("http://example.com/").mock(
            return_value=Response(200, headers={"Referrer-Policy": "no-referrer"})
        )

        scan = await HeaderAnalyzer().run(http_target)

        assert [h.name for h in scan.present_headers] == ["Referrer-Policy"]
        assert len(scan.missing_headers) == 6

    @respx.mock
    @pytest.mark.asyncio
    async def test_falls_back_to_get_when_head_fails(self, http_target):
        respx.head("http://example.com/").mock(side_effect=httpx.ConnectError("refused"))
        respx.get("http://example.com/").mock(
            return_value=Response(200, headers={"X-XSS-Protection": "0"})
        )

        scan = await HeaderAnalyzer().run(http_target)

        assert [h.name for h in scan.weak_headers] == ["X-XSS-Protection"]
        assert scan.security_score == 0

    @respx.mock
    @pytest.mark.asyncio
    async def test_raises_when_nothing_answers(self, http_target):
        respx.head("http://example.com/").mock(side_effect=httpx.ConnectError("refused"))
        respx.get("http://example.com/").mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(TargetConnectionError):
            await HeaderAnalyzer().run(http_target)

    @respx.mock
    @pytest.mark.asyncio
    async def test_redirects_are_not_followed(self, http_target):
        respx.head("http://example.com/").mock(
            return_value=Response(
                301,
                headers={"Location": "https://example.com/", "X-Frame-Options": "DENY"},
            )
        )

        scan = await HeaderAnalyzer().run(http_target)

        assert [h.name for h in scan.present_headers] == ["X-Frame-Options"]


class TestHTTPClient:
    """Header folding in the shared client."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_repeated_headers_are_joined(self):
        respx.get("https://example.com").mock(
            return_value=Response(
                200,
                headers=[("Set-Cookie", "a=1"), ("Set-Cookie", "b=2"), ("Server", "nginx")],
            )
        )

        async with HTTPClient() as client:
            response = await client.get("https://example.com")

        assert response.headers["set-cookie"] == "a=1; b=2"
        assert response.headers["server"] == "nginx"
        assert "Server" not in response.headers
