"""Scoring and severity classification for analyzer observations.

Everything here is a pure function of its inputs so it can be exercised
without any network access.
"""

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from .models import (
    CertificateInfo,
    HeaderScan,
    RiskLevel,
    ScanResult,
    SecurityHeader,
    TLSScan,
    Vulnerability,
)


@dataclass(frozen=True)
class HeaderDefinition:
    """An expected security header and the severity of its absence."""

    name: str
    description: str
    severity: str


SECURITY_HEADERS: tuple[HeaderDefinition, ...] = (
    HeaderDefinition("Strict-Transport-Security", "Enforces secure HTTPS connections", "high"),
    HeaderDefinition(
        "Content-Security-Policy", "Prevents XSS and data injection attacks", "high"
    ),
    HeaderDefinition("X-Frame-Options", "Prevents clickjacking attacks", "medium"),
    HeaderDefinition("X-Content-Type-Options", "Prevents MIME-type sniffing", "medium"),
    HeaderDefinition("Referrer-Policy", "Controls referrer information", "low"),
    HeaderDefinition("Permissions-Policy", "Controls browser features and APIs", "medium"),
    HeaderDefinition(
        "X-XSS-Protection", "Legacy XSS filter (deprecated but still useful)", "low"
    ),
)

# Six months, in seconds.
HSTS_MIN_MAX_AGE = 15_552_000

_MAX_AGE_RE = re.compile(r"max-age\s*=\s*\"?(\d+)")


def extract_max_age(value: str) -> int:
    """Return the HSTS max-age directive, or 0 when absent or malformed."""
    match = _MAX_AGE_RE.search(value.lower())
    return int(match.group(1)) if match else 0


def is_weak_header(name: str, value: str) -> bool:
    """Apply the per-header weakness rule to a present header value."""
    lower_value = value.lower()
    match name.lower():
        case "strict-transport-security":
            if "max-age=" not in lower_value.replace(" ", ""):
                return True
            return extract_max_age(lower_value) < HSTS_MIN_MAX_AGE
        case "content-security-policy":
            if "unsafe-inline" in lower_value or "unsafe-eval" in lower_value:
                return True
            return "*" in lower_value and "'*'" not in lower_value
        case "x-frame-options":
            return "allow" in lower_value
        case "x-xss-protection":
            return "0" in lower_value
    return False


def header_score(strong_count: int, total: int = len(SECURITY_HEADERS)) -> int:
    """Percentage of definitions present with a strong value, rounded down."""
    if total <= 0:
        return 0
    return (min(strong_count, total) * 100) // total


def classify_headers(headers: Mapping[str, str]) -> HeaderScan:
    """Partition the header definitions into missing, weak and present lists."""
    lowered = {key.lower(): value for key, value in headers.items()}
    scan = HeaderScan(headers=dict(lowered))

    for definition in SECURITY_HEADERS:
        value = lowered.get(definition.name.lower())
        if value is None:
            scan.missing_headers.append(
                SecurityHeader(
                    name=definition.name,
                    value="",
                    status="missing",
                    severity=definition.severity,
                    description=definition.description,
                )
            )
        elif is_weak_header(definition.name, value):
            scan.weak_headers.append(
                SecurityHeader(
                    name=definition.name,
                    value=value,
                    status="weak",
                    severity=definition.severity,
                    description=f"{definition.description} (weak configuration)",
                )
            )
        else:
            scan.present_headers.append(
                SecurityHeader(
                    name=definition.name,
                    value=value,
                    status="present",
                    severity="info",
                    description=definition.description,
                )
            )

    scan.security_score = header_score(len(scan.present_headers))
    return scan


# Display names keyed by what ssl.SSLObject.version() reports.
PROTOCOL_NAMES: dict[str, str] = {
    "SSLv2": "SSL 2.0",
    "SSLv3": "SSL 3.0",
    "TLSv1": "TLS 1.0",
    "TLSv1.1": "TLS 1.1",
    "TLSv1.2": "TLS 1.2",
    "TLSv1.3": "TLS 1.3",
}

_PROTOCOL_RANK: dict[str, int] = {
    "SSL 2.0": 0,
    "SSL 3.0": 1,
    "TLS 1.0": 2,
    "TLS 1.1": 3,
    "TLS 1.2": 4,
    "TLS 1.3": 5,
}

TLS_BASELINE = "TLS 1.2"

# RC4, 3DES and CBC-mode RSA key exchange, in OpenSSL and IANA spelling.
WEAK_CIPHERS: frozenset[str] = frozenset(
    {
        "RC4-SHA",
        "RC4-MD5",
        "DES-CBC3-SHA",
        "AES128-SHA",
        "AES256-SHA",
        "ECDHE-RSA-DES-CBC3-SHA",
        "ECDHE-RSA-RC4-SHA",
        "TLS_RSA_WITH_RC4_128_SHA",
        "TLS_RSA_WITH_RC4_128_MD5",
        "TLS_RSA_WITH_3DES_EDE_CBC_SHA",
        "TLS_RSA_WITH_AES_128_CBC_SHA",
        "TLS_RSA_WITH_AES_256_CBC_SHA",
        "TLS_ECDHE_RSA_WITH_3DES_EDE_CBC_SHA",
        "TLS_ECDHE_RSA_WITH_RC4_128_SHA",
    }
)


def protocol_name(version: str | None) -> str:
    """Normalize an ssl module protocol string to its display name."""
    if not version:
        return "Unknown"
    return PROTOCOL_NAMES.get(version, version)


def is_weak_cipher(cipher: str) -> bool:
    return cipher.upper() in WEAK_CIPHERS


def score_tls(
    protocol: str,
    cipher_suite: str,
    certificate: CertificateInfo | None,
    probe_findings: Iterable[str] = (),
) -> TLSScan:
    """Score a negotiated handshake plus the results of the downgrade probes."""
    scan = TLSScan(
        protocol=protocol,
        cipher_suite=cipher_suite,
        certificate=certificate,
        score=100,
        is_secure=True,
    )

    if certificate is not None:
        if certificate.is_expired:
            scan.vulnerabilities.append("Certificate has expired")
            scan.is_secure = False
            scan.score -= 50
        elif certificate.days_to_expiry < 30:
            scan.vulnerabilities.append(
                f"Certificate expires soon ({certificate.days_to_expiry} days)"
            )
            scan.score -= 10

    rank = _PROTOCOL_RANK.get(protocol)
    baseline = _PROTOCOL_RANK[TLS_BASELINE]
    if rank is not None and rank < baseline:
        scan.vulnerabilities.append(
            f"Outdated TLS version: {protocol} (TLS 1.2+ recommended)"
        )
        scan.is_secure = False
        scan.score -= 30
    elif rank == baseline:
        scan.vulnerabilities.append("TLS 1.2 is acceptable but TLS 1.3 is recommended")
        scan.score -= 5

    if is_weak_cipher(cipher_suite):
        scan.vulnerabilities.append(f"Weak cipher suite: {cipher_suite}")
        scan.is_secure = False
        scan.score -= 20

    findings = list(probe_findings)
    if findings:
        scan.vulnerabilities.extend(findings)
        scan.is_secure = False
        scan.score -= 10 * len(findings)

    scan.score = max(0, min(100, scan.score))
    return scan


def count_severities(vulnerabilities: Iterable[Vulnerability]) -> dict[str, int]:
    """Count findings per severity level."""
    counts = {"critical": 0, "high": 0, "medium": 0, "low": 0}
    for vuln in vulnerabilities:
        severity = vuln.severity.lower()
        if severity in counts:
            counts[severity] += 1
    return counts


def calculate_risk_level(result: ScanResult) -> RiskLevel:
    """Worst-severity verdict; an insecure TLS result counts as one high
    finding and a header score below 50 as one medium finding."""
    counts = count_severities(result.vulnerabilities)

    if result.tls is not None and not result.tls.is_secure:
        counts["high"] += 1
    if result.headers is not None and result.headers.security_score < 50:
        counts["medium"] += 1

    if counts["critical"]:
        return RiskLevel.CRITICAL
    if counts["high"]:
        return RiskLevel.HIGH
    if counts["medium"]:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW
