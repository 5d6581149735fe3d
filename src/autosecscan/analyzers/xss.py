"""Reflected and DOM-heuristic cross-site scripting analyzer."""

from typing import Any
from urllib.parse import ParseResult

import httpx

from autosecscan.models import Vulnerability
from autosecscan.tools.http import HTTPClient, HTTPResponse

from .injection import InjectionAnalyzer, Payload, location_for

XSS_PAYLOADS: tuple[Payload, ...] = (
    Payload("<script>alert('XSS')</script>", "Basic script injection"),
    Payload("<img src=x onerror=alert('XSS')>", "Image tag with onerror handler"),
    Payload("<svg/onload=alert('XSS')>", "SVG with onload handler"),
    Payload("\"><script>alert('XSS')</script>", "Breaking out of attribute"),
    Payload("javascript:alert('XSS')", "JavaScript protocol handler"),
    Payload("<iframe src=javascript:alert('XSS')>", "Iframe with JavaScript URL"),
    Payload("<body onload=alert('XSS')>", "Body tag with onload"),
    Payload("<input onfocus=alert('XSS') autofocus>", "Input with autofocus"),
    Payload("<marquee onstart=alert('XSS')>", "Marquee tag exploitation"),
    Payload("<details open ontoggle=alert('XSS')>", "Details tag with ontoggle"),
)

XSS_FALLBACK_PARAMS: dict[str, str] = {
    name: "test"
    for name in ("q", "search", "query", "keyword", "name", "comment", "message", "input")
}

DOM_PROBE_FRAGMENT = "#<script>alert('XSS')</script>"

# Client-side sinks, matched against the lower-cased body.
DOM_SINK_PATTERNS: tuple[str, ...] = (
    "location.hash",
    "window.location.hash",
    "document.location.hash",
    "location.href",
    "document.write(",
    "eval(",
    "innerhtml",
    "outerhtml",
)

DOM_LOCATION = "DOM (client-side JavaScript)"


def check_partial_reflection(body: str, payload: str) -> bool:
    """Payload keywords survive in the body even though the markup did not."""
    clean_payload = payload.lower()
    for char in "<>'\"":
        clean_payload = clean_payload.replace(char, "")
    lower_body = body.lower()
    for keyword in ("alert", "xss"):
        if keyword in clean_payload and keyword in lower_body:
            return True
    return False


def find_dom_sink(body: str) -> str | None:
    """Return the first dangerous client-side sink referenced by the page."""
    lower_body = body.lower()
    for pattern in DOM_SINK_PATTERNS:
        if pattern in lower_body:
            return pattern
    return None


class XSSAnalyzer(InjectionAnalyzer):
    """Reflection-based XSS detection plus a textual DOM sink heuristic."""

    name = "xss"
    label = "XSS"
    status = "Testing for Cross-Site Scripting (XSS)..."
    result_field = "xss"
    vuln_type = "xss"
    fallback_params = XSS_FALLBACK_PARAMS
    payloads = XSS_PAYLOADS

    def evaluate(
        self,
        param: str,
        payload: Payload,
        response: HTTPResponse,
        baseline: Any,
    ) -> Vulnerability | None:
        if payload.value.lower() in response.body.lower():
            return Vulnerability(
                type="xss",
                severity="high",
                location=location_for(param),
                payload=payload.value,
                evidence="Payload reflected unescaped in response",
                description=(
                    f"{payload.description} - Payload found in response without proper encoding"
                ),
            )

        if check_partial_reflection(response.body, payload.value):
            return Vulnerability(
                type="xss",
                severity="medium",
                location=location_for(param),
                payload=payload.value,
                evidence="Payload partially reflected, may be bypassable",
                description=f"{payload.description} - Input reflected with partial encoding",
            )
        return None

    async def extra_checks(self, client: HTTPClient, parsed: ParseResult) -> list[Vulnerability]:
        """Look for dangerous sinks in the page served for a hash payload URL."""
        test_url = f"{parsed.scheme}://{parsed.netloc}{parsed.path}{DOM_PROBE_FRAGMENT}"
        try:
            response = await client.get(test_url)
        except httpx.HTTPError as exc:
            self.log.debug("DOM probe failed: %s", exc)
            return []

        sink = find_dom_sink(response.body)
        if not sink:
            return []

        self.log.warning("Potential DOM-based XSS vulnerability detected")
        return [
            Vulnerability(
                type="xss",
                severity="medium",
                location=DOM_LOCATION,
                payload="DOM manipulation pattern detected",
                evidence=f"Found dangerous pattern: {sink}",
                description=(
                    "Page uses potentially unsafe DOM manipulation that could lead to XSS"
                ),
            )
        ]
