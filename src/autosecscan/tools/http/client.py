"""Async HTTP client shared by the probes."""

import time
from dataclasses import dataclass

import httpx

USER_AGENT = "AutoSecScan/1.0 (Security Research Tool)"


@dataclass
class HTTPResponse:
    """A fully read probe response with folded headers."""

    url: str
    status_code: int
    headers: dict[str, str]
    body: str
    # Raw body size in bytes, before decoding.
    size: int
    elapsed: float


def _collect_headers(headers: httpx.Headers) -> dict[str, str]:
    """Fold repeated headers into one value per lower-cased name."""
    collected: dict[str, list[str]] = {}
    for key, value in headers.multi_items():
        collected.setdefault(key.lower(), []).append(value)
    return {key: "; ".join(values) for key, values in collected.items()}


class HTTPClient:
    """Context-managed wrapper around ``httpx.AsyncClient``.

    Certificates are never verified and redirects are not followed unless
    asked for: the probes inspect whatever the target itself answers.
    """

    def __init__(self, timeout: float = 15.0, follow_redirects: bool = False):
        self.timeout = timeout
        self.follow_redirects = follow_redirects
        self.client: httpx.AsyncClient | None = None

    async def __aenter__(self):
        self.client = httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=self.follow_redirects,
            verify=False,
            headers={"User-Agent": USER_AGENT},
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.client:
            await self.client.aclose()

    async def send(self, method: str, url: str) -> HTTPResponse:
        """Issue one request and read the whole body."""
        if not self.client:
            raise RuntimeError("Client not initialized. Use async context manager.")

        started = time.perf_counter()
        response = await self.client.request(method, url)
        return HTTPResponse(
            url=str(response.url),
            status_code=response.status_code,
            headers=_collect_headers(response.headers),
            body=response.text,
            size=len(response.content),
            elapsed=time.perf_counter() - started,
        )

    async def get(self, url: str) -> HTTPResponse:
        return await self.send("GET", url)

    async def head(self, url: str) -> HTTPResponse:
        return await self.send("HEAD", url)
