"""Counts shared by the report renderers."""

from typing import Any

from autosecscan.models import ScanResult
from autosecscan.scoring import count_severities


def build_summary(result: ScanResult) -> dict[str, Any]:
    """Headline numbers for a finished scan."""
    severities = count_severities(result.vulnerabilities)
    return {
        "risk_level": result.risk_level.value,
        "total_vulnerabilities": len(result.vulnerabilities),
        "sqli": len(result.sqli),
        "xss": len(result.xss),
        "critical": severities["critical"],
        "high": severities["high"],
        "medium": severities["medium"],
        "low": severities["low"],
        "header_score": result.headers.security_score if result.headers else None,
        "tls_score": result.tls.score if result.tls else None,
        "open_ports": len(result.ports.open_ports) if result.ports else None,
        "errors": len(result.errors),
    }


def report_stem(result: ScanResult) -> str:
    """File name stem, unique per target and scan start time."""
    safe_domain = "".join(c if c.isalnum() or c in "-." else "_" for c in result.target.domain)
    return f"security_report_{safe_domain}_{result.start_time.strftime('%Y%m%d_%H%M%S')}"


def priority_actions(result: ScanResult) -> list[str]:
    """Ordered remediation headlines, most urgent first."""
    actions: list[str] = []
    critical = count_severities(result.vulnerabilities)["critical"]
    if critical:
        actions.append(f"CRITICAL: Fix {critical} critical vulnerabilities immediately")
    if result.sqli:
        actions.append("Implement parameterized queries to prevent SQL injection")
    if result.xss:
        actions.append("Implement output encoding and CSP to prevent XSS")
    if result.tls is not None and not result.tls.is_secure:
        actions.append("Upgrade TLS configuration to modern standards")
    if result.headers is not None and result.headers.security_score < 50:
        actions.append("Implement missing security headers")
    if not actions:
        actions.append("Continue monitoring and regular security assessments")
    return actions
