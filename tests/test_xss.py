"""Tests for the cross-site scripting analyzer."""

import html
from dataclasses import replace

import httpx
import pytest
import respx
from httpx import Response

from autosecscan.analyzers import XSSAnalyzer
from autosecscan.analyzers.xss import (
    DOM_LOCATION,
    XSS_PAYLOADS,
    check_partial_reflection,
    find_dom_sink,
)
from autosecscan.models import TargetInfo
from autosecscan.tools.http import HTTPResponse


def _target(url: str) -> TargetInfo:
    return TargetInfo(url=url, domain="example.com", ip="127.0.0.1", protocol="https", port=443)


def _echo(transform=lambda value: value):
    """Respond with the q parameter embedded in the page."""

    def handler(request: httpx.Request) -> Response:
        value = request.url.params.get("q", "")
        return Response(200, text=f"<html><body>Results for {transform(value)}</body></html>")

    return handler


class TestReflectionHelpers:
    """Pure reflection and sink checks."""

    def test_partial_reflection_matches_keywords(self):
        assert check_partial_reflection("alert(1)", "<script>alert('XSS')</script>") is True
        assert check_partial_reflection("nothing here", "<svg/onload=alert('XSS')>") is False

    def test_dom_sink(self):
        assert find_dom_sink("el.innerHTML = location.hash") == "location.hash"
        assert find_dom_sink("console.log(1)") is None


class TestXSSAnalyzer:
    """Reflection checks against mocked pages."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_verbatim_reflection_is_high(self):
        respx.get(url__startswith="https://example.com/").mock(side_effect=_echo())

        findings = await XSSAnalyzer().run(_target("https://example.com/search?q=hello"))

        assert len(findings) == 1
        assert findings[0].severity == "high"
        assert findings[0].payload == XSS_PAYLOADS[0].value
        assert findings[0].location == "Parameter: q"

    @respx.mock
    @pytest.mark.asyncio
    async def test_entity_encoded_reflection_is_medium(self):
        respx.get(url__startswith="https://example.com/").mock(side_effect=_echo(html.escape))

        findings = await XSSAnalyzer().run(_target("https://example.com/search?q=hello"))

        assert len(findings) == 1
        finding = findings[0]
        assert finding.severity == "medium"
        assert finding.location == "Parameter: q"
        assert finding.evidence == "Payload partially reflected, may be bypassable"

    @respx.mock
    @pytest.mark.asyncio
    async def test_stripped_brackets_is_medium(self):
        def strip(value: str) -> str:
            return value.replace("<", "").replace(">", "")

        respx.get(url__startswith="https://example.com/").mock(side_effect=_echo(strip))

        findings = await XSSAnalyzer().run(_target("https://example.com/search?q=hello"))

        assert len(findings) == 1
        assert findings[0].severity == "medium"
        assert findings[0].payload == XSS_PAYLOADS[0].value
        assert "partial encoding" in findings[0].description

    def test_evaluate_partial_reflection(self):
        payload = XSS_PAYLOADS[0]
        body = f"<p>{html.escape(payload.value)}</p>"
        response = HTTPResponse(
            url="https://example.com/?q=x",
            status_code=200,
            headers={},
            body=body,
            size=len(body.encode()),
            elapsed=0.0,
        )

        finding = XSSAnalyzer().evaluate("q", payload, response, None)

        assert finding is not None
        assert finding.severity == "medium"
        assert finding.evidence == "Payload partially reflected, may be bypassable"
        assert XSSAnalyzer().evaluate("q", payload, replace(response, body="static"), None) is None

    @respx.mock
    @pytest.mark.asyncio
    async def test_no_reflection_no_findings(self):
        route = respx.get(url__startswith="https://example.com/").mock(
            return_value=Response(200, text="<html><body>static</body></html>")
        )

        findings = await XSSAnalyzer().run(_target("https://example.com/search?q=hello"))

        assert findings == []
        # Every payload plus the DOM probe.
        assert route.call_count == len(XSS_PAYLOADS) + 1

    @respx.mock
    @pytest.mark.asyncio
    async def test_dom_sink_reported(self):
        respx.get(url__startswith="https://example.com/").mock(
            return_value=Response(
                200, text="<script>document.getElementById('o').innerHTML = 1;</script>"
            )
        )

        findings = await XSSAnalyzer().run(_target("https://example.com/app?q=hello"))

        assert len(findings) == 1
        assert findings[0].location == DOM_LOCATION
        assert findings[0].evidence == "Found dangerous pattern: innerhtml"

    @respx.mock
    @pytest.mark.asyncio
    async def test_failed_requests_are_skipped(self):
        respx.get(url__startswith="https://example.com/").mock(
            side_effect=httpx.ConnectError("refused")
        )

        findings = await XSSAnalyzer().run(_target("https://example.com/search?q=hello"))

        assert findings == []
