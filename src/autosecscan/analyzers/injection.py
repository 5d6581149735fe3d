"""Shared parameter-fuzzing loop for the reflected injection analyzers."""

import asyncio
from abc import abstractmethod
from dataclasses import dataclass
from typing import Any
from urllib.parse import ParseResult, parse_qsl, urlencode, urlparse

import httpx

from autosecscan.errors import TargetParseError
from autosecscan.models import TargetInfo, Vulnerability
from autosecscan.tools.http import HTTPClient, HTTPResponse

from .base import Analyzer, ScanLogger

# Pause between payload attempts. Rate limit against the target, not a tunable.
REQUEST_DELAY = 0.1


@dataclass(frozen=True)
class Payload:
    """A test value and what it is meant to provoke."""

    value: str
    description: str


def parse_target_url(url: str) -> ParseResult:
    """Parse the target URL, rejecting anything without a scheme and host."""
    try:
        parsed = urlparse(url)
    except ValueError as exc:
        raise TargetParseError(f"failed to parse URL {url!r}: {exc}") from exc
    if not parsed.scheme or not parsed.netloc:
        raise TargetParseError(f"failed to parse URL {url!r}: missing scheme or host")
    return parsed


def query_parameters(parsed: ParseResult, fallback: dict[str, str]) -> dict[str, str]:
    """First value of every query parameter, or the fallback set when there are none."""
    params: dict[str, str] = {}
    for key, value in parse_qsl(parsed.query, keep_blank_values=True):
        params.setdefault(key, value)
    return params or dict(fallback)


def build_test_url(parsed: ParseResult, params: dict[str, str]) -> str:
    """Rebuild scheme://host/path with an encoded query string."""
    return f"{parsed.scheme}://{parsed.netloc}{parsed.path}?{urlencode(params)}"


def location_for(param: str) -> str:
    return f"Parameter: {param}"


async def pause() -> None:
    await asyncio.sleep(REQUEST_DELAY)


class InjectionAnalyzer(Analyzer):
    """Replace each parameter with each payload and inspect the response.

    A parameter yields at most one finding: the first payload that triggers
    a detection ends testing for that parameter.
    """

    result_field: str
    vuln_type: str
    fallback_params: dict[str, str]
    payloads: tuple[Payload, ...]

    def __init__(self, request_timeout: float = 15.0, logger: ScanLogger | None = None):
        super().__init__(logger)
        self.request_timeout = request_timeout

    async def run(self, target: TargetInfo) -> list[Vulnerability]:
        self.log.debug("Starting %s scan for %s", self.vuln_type, target.url)
        parsed = parse_target_url(target.url)
        params = query_parameters(parsed, self.fallback_params)
        if not parsed.query:
            self.log.debug("No query parameters found, testing common parameter names")

        findings: list[Vulnerability] = []
        async with HTTPClient(timeout=self.request_timeout, follow_redirects=False) as client:
            baseline = await self.prepare(client, target)
            for param in params:
                self.log.debug("Testing parameter: %s", param)
                finding = await self._test_parameter(client, parsed, params, param, baseline)
                if finding:
                    self.log.warning(
                        "%s vulnerability detected in parameter '%s'", self.vuln_type, param
                    )
                    findings.append(finding)
            findings.extend(await self.extra_checks(client, parsed))

        self.log.info(
            "%s scan completed: found %d potential vulnerabilities",
            self.vuln_type,
            len(findings),
        )
        return findings

    async def _test_parameter(
        self,
        client: HTTPClient,
        parsed: ParseResult,
        params: dict[str, str],
        param: str,
        baseline: Any,
    ) -> Vulnerability | None:
        for payload in self.payloads:
            test_url = build_test_url(parsed, {**params, param: payload.value})
            try:
                response = await client.get(test_url)
            except httpx.HTTPError as exc:
                self.log.debug("Request failed for payload %r: %s", payload.value, exc)
            else:
                finding = self.evaluate(param, payload, response, baseline)
                if finding:
                    return finding
            await pause()
        return None

    async def prepare(self, client: HTTPClient, target: TargetInfo) -> Any:
        """Fetch whatever reference data evaluate() needs."""
        return None

    async def extra_checks(self, client: HTTPClient, parsed: ParseResult) -> list[Vulnerability]:
        """Probes that do not depend on query parameters."""
        return []

    @abstractmethod
    def evaluate(
        self,
        param: str,
        payload: Payload,
        response: HTTPResponse,
        baseline: Any,
    ) -> Vulnerability | None:
        """Return a finding when the response shows the payload took effect."""
