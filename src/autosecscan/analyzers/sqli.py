"""Reflected SQL injection analyzer."""

from dataclasses import dataclass
from urllib.parse import ParseResult, quote

import httpx

from autosecscan.errors import TargetConnectionError
from autosecscan.models import TargetInfo, Vulnerability
from autosecscan.tools.http import HTTPClient, HTTPResponse

from .injection import InjectionAnalyzer, Payload, location_for, pause

SQLI_PAYLOADS: tuple[Payload, ...] = (
    Payload("'", "Single quote test"),
    Payload("' OR '1'='1", "Classic OR bypass"),
    Payload("' OR '1'='1' --", "OR bypass with comment"),
    Payload("' OR 1=1 --", "Numeric OR bypass"),
    Payload("admin' --", "Comment injection"),
    Payload("' UNION SELECT NULL--", "UNION injection test"),
    Payload("1' AND '1'='2", "False condition test"),
    Payload("'; DROP TABLE users--", "Destructive command test"),
    Payload("' OR 'x'='x", "Alternative OR bypass"),
    Payload("1' ORDER BY 1--", "ORDER BY enumeration"),
)

PATH_PAYLOADS: tuple[str, ...] = ("'", "' OR '1'='1")

# Matched against the lower-cased response body.
SQL_ERROR_PATTERNS: tuple[str, ...] = (
    "sql syntax",
    "mysql_fetch",
    "mysql_num_rows",
    "mysqli",
    "sqlexception",
    "postgresql",
    "sqlite",
    "oracle",
    "odbc",
    "mssql",
    "jdbc",
    "ora-",
    "pg_query",
    "pg_exec",
    "syntax error",
    "unterminated quoted string",
    "unclosed quotation mark",
    "error in your sql syntax",
    "you have an error in your sql",
)

# Relative body length change treated as a behavior change. Noisy on pages
# with ads or timestamps.
LENGTH_CHANGE_THRESHOLD = 0.1

SQLI_FALLBACK_PARAMS: dict[str, str] = {
    "id": "1",
    "user": "admin",
    "page": "1",
    "search": "test",
    "q": "test",
    "username": "admin",
}


@dataclass(frozen=True)
class Baseline:
    """The unmodified reference response."""

    status_code: int
    length: int


def detect_sql_error(body: str) -> str | None:
    """Return the first database error signature found in the body."""
    lower_body = body.lower()
    for pattern in SQL_ERROR_PATTERNS:
        if pattern in lower_body:
            return pattern
    return None


def detect_behavior_change(baseline: Baseline, status_code: int, length: int) -> bool:
    """Status code changed, or body length moved more than the threshold."""
    if baseline.status_code != status_code:
        return True
    if baseline.length == 0:
        return length > 0
    change = (length - baseline.length) / baseline.length
    return abs(change) > LENGTH_CHANGE_THRESHOLD


class SQLiAnalyzer(InjectionAnalyzer):
    """Error-based and behavior-change SQL injection detection."""

    name = "sqli"
    label = "SQL Injection"
    status = "Testing for SQL injection vulnerabilities..."
    result_field = "sqli"
    vuln_type = "sqli"
    fallback_params = SQLI_FALLBACK_PARAMS
    payloads = SQLI_PAYLOADS

    async def prepare(self, client: HTTPClient, target: TargetInfo) -> Baseline:
        try:
            response = await client.get(target.url)
        except httpx.HTTPError as exc:
            raise TargetConnectionError(f"failed to get baseline response: {exc}") from exc
        baseline = Baseline(status_code=response.status_code, length=response.size)
        self.log.debug(
            "Baseline response: status=%d, length=%d", baseline.status_code, baseline.length
        )
        return baseline

    def evaluate(
        self,
        param: str,
        payload: Payload,
        response: HTTPResponse,
        baseline: Baseline,
    ) -> Vulnerability | None:
        sql_error = detect_sql_error(response.body)
        if sql_error:
            return Vulnerability(
                type="sqli",
                severity="critical",
                location=location_for(param),
                payload=payload.value,
                evidence=f"SQL error detected: {sql_error}",
                description=f"{payload.description} - SQL error exposed",
            )

        length = response.size
        if detect_behavior_change(baseline, response.status_code, length):
            return Vulnerability(
                type="sqli",
                severity="high",
                location=location_for(param),
                payload=payload.value,
                evidence=(
                    f"Response behavior changed: baseline={baseline.length} bytes "
                    f"(status {baseline.status_code}), test={length} bytes "
                    f"(status {response.status_code})"
                ),
                description=f"{payload.description} - Response indicates potential SQL injection",
            )
        return None

    async def extra_checks(self, client: HTTPClient, parsed: ParseResult) -> list[Vulnerability]:
        """Append payloads as a path segment and look for database errors."""
        if len(parsed.path) <= 1:
            return []

        base = f"{parsed.scheme}://{parsed.netloc}{parsed.path.rstrip('/')}"
        for payload in PATH_PAYLOADS:
            try:
                response = await client.get(f"{base}/{quote(payload, safe='')}")
            except httpx.HTTPError as exc:
                self.log.debug("Path probe failed for payload %r: %s", payload, exc)
            else:
                sql_error = detect_sql_error(response.body)
                if sql_error:
                    self.log.warning("SQL injection detected in URL path")
                    return [
                        Vulnerability(
                            type="sqli",
                            severity="critical",
                            location="URL Path",
                            payload=payload,
                            evidence=f"SQL error detected: {sql_error}",
                            description="SQL injection in URL path",
                        )
                    ]
            await pause()
        return []
