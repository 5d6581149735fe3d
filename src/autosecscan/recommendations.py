"""Remediation advice derived from scan results."""

from collections.abc import Sequence

from .models import HeaderScan, ScanResult, TLSScan, Vulnerability

HEADER_FIXES: dict[str, str] = {
    "Strict-Transport-Security": (
        "Add HSTS header: Strict-Transport-Security: max-age=31536000; includeSubDomains; preload"
    ),
    "Content-Security-Policy": (
        "Add CSP header: Content-Security-Policy: default-src 'self'; script-src 'self'; "
        "object-src 'none'"
    ),
    "X-Frame-Options": "Add X-Frame-Options: DENY or SAMEORIGIN to prevent clickjacking",
    "X-Content-Type-Options": "Add X-Content-Type-Options: nosniff to prevent MIME sniffing",
    "Referrer-Policy": "Add Referrer-Policy: strict-origin-when-cross-origin or no-referrer",
    "Permissions-Policy": "Add Permissions-Policy to control browser features",
}

SQLI_ADVICE: tuple[str, ...] = (
    "Use parameterized queries (prepared statements) for all database operations",
    "Implement input validation and sanitization",
    "Use ORM frameworks that handle SQL escaping automatically",
    "Apply principle of least privilege to database accounts",
    "Enable WAF (Web Application Firewall) with SQL injection rules",
    "Never concatenate user input directly into SQL queries",
    "Implement proper error handling (don't expose SQL errors to users)",
    "Regular security audits and penetration testing",
)

XSS_ADVICE: tuple[str, ...] = (
    "Implement proper output encoding based on context (HTML, JavaScript, URL, CSS)",
    "Use Content-Security-Policy (CSP) headers to mitigate XSS impact",
    "Validate and sanitize all user input on the server side",
    "Use security-focused template engines with auto-escaping",
    "Avoid using dangerous functions like eval(), innerHTML, document.write()",
    "Set HttpOnly flag on cookies to prevent JavaScript access",
    "Use DOM-based APIs like textContent instead of innerHTML when possible",
    "Implement input validation with whitelist approach",
    "Regular security testing and code reviews",
)

DOM_XSS_ADVICE: tuple[str, ...] = (
    "Review all client-side JavaScript for unsafe DOM manipulation",
    "Avoid using location.hash, location.search directly without sanitization",
)

CERT_RENEWAL_WINDOW_DAYS = 30


def header_recommendations(scan: HeaderScan) -> list[str]:
    """One fix per missing header, plus a notice per weak one."""
    recommendations = [
        HEADER_FIXES[header.name]
        for header in scan.missing_headers
        if header.name in HEADER_FIXES
    ]
    recommendations.extend(
        f"Strengthen {header.name}: Current value is weak" for header in scan.weak_headers
    )
    return recommendations


def tls_recommendations(scan: TLSScan) -> list[str]:
    recommendations: list[str] = []
    if not scan.is_secure:
        recommendations.append("Upgrade to TLS 1.3 for best security")
    if scan.protocol in ("TLS 1.0", "TLS 1.1"):
        recommendations.append("Disable TLS 1.0 and 1.1 (known vulnerabilities)")

    certificate = scan.certificate
    if certificate is not None:
        if certificate.is_expired:
            recommendations.append("Renew SSL certificate immediately")
        elif certificate.days_to_expiry < CERT_RENEWAL_WINDOW_DAYS:
            recommendations.append("Plan certificate renewal soon")

    if scan.vulnerabilities:
        recommendations.append("Address identified TLS vulnerabilities")
        recommendations.append("Consider using Mozilla SSL Configuration Generator")
    return recommendations


def sqli_recommendations(vulnerabilities: Sequence[Vulnerability]) -> list[str]:
    return list(SQLI_ADVICE) if vulnerabilities else []


def xss_recommendations(vulnerabilities: Sequence[Vulnerability]) -> list[str]:
    """Generic XSS advice, with client-side extras when a DOM sink was reported."""
    if not vulnerabilities:
        return []
    recommendations = list(XSS_ADVICE)
    if any("DOM" in vuln.location for vuln in vulnerabilities):
        recommendations.extend(DOM_XSS_ADVICE)
    return recommendations


def collect_recommendations(result: ScanResult) -> dict[str, list[str]]:
    """Recommendations grouped by analyzer, omitting analyzers with nothing to say."""
    grouped = {
        "headers": header_recommendations(result.headers) if result.headers else [],
        "tls": tls_recommendations(result.tls) if result.tls else [],
        "sqli": sqli_recommendations(result.sqli),
        "xss": xss_recommendations(result.xss),
    }
    return {section: items for section, items in grouped.items() if items}
