"""Markdown report rendering."""

from datetime import datetime
from pathlib import Path

from autosecscan import __version__
from autosecscan.models import HeaderScan, PortScan, RiskLevel, ScanResult, TLSScan, Vulnerability
from autosecscan.recommendations import (
    header_recommendations,
    sqli_recommendations,
    tls_recommendations,
    xss_recommendations,
)

from .summary import priority_actions, report_stem

RISK_EMOJI = {
    RiskLevel.CRITICAL: "🔴",
    RiskLevel.HIGH: "🟠",
    RiskLevel.MEDIUM: "🟡",
    RiskLevel.LOW: "🟢",
}


def truncate(value: str, limit: int) -> str:
    if len(value) <= limit:
        return value
    return value[: limit - 3] + "..."


def _cell(value: str, limit: int | None = None) -> str:
    """Make a value safe to place inside a markdown table cell."""
    text = value if limit is None else truncate(value, limit)
    return text.replace("|", "\\|").replace("\n", " ")


def _bullets(items: list[str], numbered: bool = False) -> list[str]:
    if numbered:
        return [f"{index}. {item}" for index, item in enumerate(items, 1)] + [""]
    return [f"- {item}" for item in items] + [""]


def _executive_summary(result: ScanResult) -> list[str]:
    total = len(result.vulnerabilities)
    good = (
        total == 0
        and result.headers is not None
        and result.headers.security_score > 70
        and result.tls is not None
        and result.tls.is_secure
    )
    lines = ["## Executive Summary", ""]
    if good:
        lines.append(
            "**Good Security Posture**: No critical vulnerabilities detected. "
            "The target demonstrates good security practices."
        )
    else:
        lines.append(
            f"**Security Issues Detected**: Found {total} vulnerabilities requiring attention."
        )
    lines += ["", "### Quick Stats", ""]
    if result.headers is not None:
        lines.append(f"- **Security Headers**: {result.headers.security_score}/100 score")
    if result.tls is not None:
        lines.append(f"- **TLS/SSL**: {result.tls.score}/100 score")
    lines.append(f"- **SQL Injection**: {len(result.sqli)} vulnerabilities")
    lines.append(f"- **XSS**: {len(result.xss)} vulnerabilities")
    if result.ports is not None:
        lines.append(f"- **Open Ports**: {len(result.ports.open_ports)}")
    lines.append("")
    return lines


def _header_section(scan: HeaderScan) -> list[str]:
    lines = [
        "## Security Headers Analysis",
        "",
        f"**Overall Score**: {scan.security_score}/100",
        "",
    ]
    if scan.missing_headers:
        lines += ["### Missing Headers", "", "| Header | Severity | Description |"]
        lines.append("|--------|----------|-------------|")
        for header in scan.missing_headers:
            lines.append(
                f"| `{header.name}` | {header.severity.upper()} | {_cell(header.description)} |"
            )
        lines.append("")
    if scan.weak_headers:
        lines += ["### Weak Headers", "", "| Header | Value | Issue |"]
        lines.append("|--------|-------|-------|")
        for header in scan.weak_headers:
            lines.append(
                f"| `{header.name}` | `{_cell(header.value, 50)}` | {_cell(header.description)} |"
            )
        lines.append("")
    if scan.present_headers:
        lines += ["### Present Headers", ""]
        lines += [
            f"- **{header.name}**: `{truncate(header.value, 80)}`"
            for header in scan.present_headers
        ]
        lines.append("")
    recommendations = header_recommendations(scan)
    if recommendations:
        lines += ["#### Recommendations", ""] + _bullets(recommendations)
    return lines


def _tls_section(scan: TLSScan) -> list[str]:
    status = "Secure" if scan.is_secure else "Insecure"
    lines = [
        "## TLS/SSL Configuration",
        "",
        f"**Security Score**: {scan.score}/100",
        "",
        f"**Status**: {status}",
        "",
        "### Configuration Details",
        "",
        f"- **Protocol Version**: {scan.protocol or 'unknown'}",
        f"- **Cipher Suite**: {scan.cipher_suite or 'unknown'}",
        "",
    ]
    cert = scan.certificate
    if cert is not None:
        lines += [
            "### Certificate Information",
            "",
            f"- **Subject**: {cert.subject}",
            f"- **Issuer**: {cert.issuer}",
            f"- **Valid From**: {cert.valid_from:%Y-%m-%d}",
            f"- **Valid To**: {cert.valid_to:%Y-%m-%d}",
        ]
        if cert.is_expired:
            lines.append("- **Status**: **EXPIRED**")
        else:
            lines.append(f"- **Days Until Expiry**: {cert.days_to_expiry}")
        lines.append("")
    if scan.vulnerabilities:
        lines += ["### Detected Vulnerabilities", ""] + _bullets(scan.vulnerabilities)
    recommendations = tls_recommendations(scan)
    if recommendations:
        lines += ["#### Recommendations", ""] + _bullets(recommendations)
    return lines


def _vulnerability_section(
    title: str, vulnerabilities: list[Vulnerability], recommendations: list[str]
) -> list[str]:
    lines = [
        f"## {title}",
        "",
        f"**Found**: {len(vulnerabilities)} vulnerabilities",
        "",
        "| Severity | Location | Payload | Evidence |",
        "|----------|----------|---------|----------|",
    ]
    for vuln in vulnerabilities:
        lines.append(
            f"| {vuln.severity.upper()} | {_cell(vuln.location)} | "
            f"`{_cell(vuln.payload, 30)}` | {_cell(vuln.evidence, 40)} |"
        )
    lines.append("")
    if recommendations:
        lines += ["### Remediation Steps", ""] + _bullets(recommendations, numbered=True)
    return lines


def _ports_section(scan: PortScan) -> list[str]:
    lines = [
        "## Open Ports",
        "",
        f"**Scan Duration**: {scan.duration:.0f}s",
        "",
        "| Port | Protocol | State | Service | Version |",
        "|------|----------|-------|---------|---------|",
    ]
    for port in scan.open_ports:
        lines.append(
            f"| {port.number} | {port.protocol} | {port.state} | {_cell(port.service)} | "
            f"{_cell(port.version, 30)} |"
        )
    lines.append("")
    return lines


def render_markdown(result: ScanResult) -> str:
    """Render the full report for *result*."""
    target = result.target
    emoji = RISK_EMOJI[result.risk_level]
    lines = [
        "# Security Audit Report",
        "",
        "## Scan Information",
        "",
        f"- **Target URL**: {target.url}",
        f"- **Domain**: {target.domain}",
        f"- **IP Address**: {target.ip}",
        f"- **Scan Date**: {result.start_time:%Y-%m-%d %H:%M:%S}",
        f"- **Duration**: {result.duration:.0f}s",
        f"- **Risk Level**: **{result.risk_level.value}** {emoji}",
        "",
    ]
    lines += _executive_summary(result)

    if result.headers is not None:
        lines += _header_section(result.headers)
    if result.tls is not None:
        lines += _tls_section(result.tls)
    if result.sqli:
        lines += _vulnerability_section(
            "SQL Injection Vulnerabilities", result.sqli, sqli_recommendations(result.sqli)
        )
    if result.xss:
        lines += _vulnerability_section(
            "Cross-Site Scripting (XSS) Vulnerabilities",
            result.xss,
            xss_recommendations(result.xss),
        )
    if result.ports is not None and result.ports.open_ports:
        lines += _ports_section(result.ports)
    if result.errors:
        lines += ["## Scan Errors", ""]
        lines += _bullets(
            [f"**{error.source}** ({error.kind}): {error.message}" for error in result.errors]
        )

    lines += ["## Priority Actions", ""] + _bullets(priority_actions(result), numbered=True)
    lines += [
        "---",
        "",
        f"*Report generated by AutoSecScan v{__version__}*",
        f"*Generated on {datetime.now():%Y-%m-%d %H:%M:%S}*",
        "",
    ]
    return "\n".join(lines)


def generate_markdown_report(result: ScanResult, output_dir: Path) -> Path:
    """Generate a markdown report file."""
    output_dir.mkdir(parents=True, exist_ok=True)
    report_file = output_dir / f"{report_stem(result)}.md"
    report_file.write_text(render_markdown(result), encoding="utf-8")
    return report_file
