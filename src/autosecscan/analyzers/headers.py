"""HTTP security header analyzer."""

import httpx

from autosecscan.errors import TargetConnectionError
from autosecscan.models import HeaderScan, TargetInfo
from autosecscan.scoring import classify_headers
from autosecscan.tools.http import HTTPClient, HTTPResponse

from .base import Analyzer, ScanLogger


class HeaderAnalyzer(Analyzer):
    """Grade the browser security headers returned by the target."""

    name = "headers"
    label = "Security Headers"
    status = "Scanning HTTP security headers..."
    result_field = "headers"

    def __init__(self, request_timeout: float = 15.0, logger: ScanLogger | None = None):
        super().__init__(logger)
        self.request_timeout = request_timeout

    async def run(self, target: TargetInfo) -> HeaderScan:
        self.log.debug("Starting security headers scan for %s", target.url)
        async with HTTPClient(timeout=self.request_timeout, follow_redirects=False) as client:
            response = await self._fetch(client, target.url)

        self.log.debug("Response status: %d", response.status_code)
        scan = classify_headers(response.headers)
        self.log.info(
            "Security headers scan completed: Score %d/100, %d missing, %d weak, %d present",
            scan.security_score,
            len(scan.missing_headers),
            len(scan.weak_headers),
            len(scan.present_headers),
        )
        return scan

    async def _fetch(self, client: HTTPClient, url: str) -> HTTPResponse:
        """HEAD first; fall back to GET when HEAD fails or returns an error status."""
        try:
            response = await client.head(url)
            if response.status_code < 400:
                return response
            self.log.debug("HEAD returned %d, trying GET", response.status_code)
        except httpx.HTTPError as exc:
            self.log.debug("HEAD request failed, trying GET: %s", exc)

        try:
            return await client.get(url)
        except httpx.HTTPError as exc:
            raise TargetConnectionError(f"failed to connect to {url}: {exc}") from exc
