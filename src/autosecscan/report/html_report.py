"""Standalone HTML report rendering."""

from datetime import datetime
from html import escape
from pathlib import Path

from autosecscan import __version__
from autosecscan.models import HeaderScan, PortScan, RiskLevel, ScanResult, TLSScan, Vulnerability
from autosecscan.recommendations import collect_recommendations

from .markdown_report import RISK_EMOJI, truncate
from .summary import build_summary, priority_actions, report_stem

RISK_COLORS = {
    RiskLevel.CRITICAL: "#dc3545",
    RiskLevel.HIGH: "#fd7e14",
    RiskLevel.MEDIUM: "#ffc107",
    RiskLevel.LOW: "#28a745",
}

SEVERITY_COLORS = {
    "critical": "#dc3545",
    "high": "#fd7e14",
    "medium": "#ffc107",
    "low": "#28a745",
}
DEFAULT_COLOR = "#6c757d"

STYLE = """
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            line-height: 1.6;
            max-width: 1200px;
            margin: 0 auto;
            padding: 20px;
            color: #333;
            background: #f5f7fa;
        }
        .header {
            background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
            color: white;
            padding: 40px;
            border-radius: 10px;
            margin-bottom: 30px;
        }
        .section {
            background: white;
            padding: 30px;
            border-radius: 10px;
            box-shadow: 0 2px 10px rgba(0,0,0,0.1);
            margin-bottom: 30px;
        }
        h2 {
            color: #2c3e50;
            border-bottom: 3px solid #667eea;
            padding-bottom: 10px;
        }
        .info-grid, .stats-grid {
            display: grid;
            grid-template-columns: repeat(auto-fit, minmax(200px, 1fr));
            gap: 20px;
        }
        .info-card, .stat-box {
            background: #f8f9fa;
            padding: 15px;
            border-radius: 8px;
            border-left: 4px solid #667eea;
        }
        .stat-number { font-size: 2em; font-weight: bold; }
        .stat-label { color: #6c757d; font-size: 0.9em; }
        .risk-badge, .badge {
            display: inline-block;
            padding: 4px 12px;
            border-radius: 20px;
            color: white;
            font-weight: bold;
        }
        .priority-actions {
            background: #fff3cd;
            border: 2px solid #ffc107;
            border-radius: 8px;
            padding: 15px 25px;
            margin-top: 20px;
        }
        table { width: 100%; border-collapse: collapse; margin: 15px 0; }
        th, td { padding: 10px; text-align: left; border-bottom: 1px solid #e9ecef; }
        th { background: #f8f9fa; color: #495057; }
        code { background: #f8f9fa; padding: 2px 6px; border-radius: 4px; }
        .footer { text-align: center; color: #6c757d; font-size: 0.9em; }
"""


def severity_badge(severity: str) -> str:
    color = SEVERITY_COLORS.get(severity.lower(), DEFAULT_COLOR)
    return (
        f'<span class="badge" style="background-color: {color};">'
        f"{escape(severity.upper())}</span>"
    )


def _list(items: list[str], tag: str = "ul") -> str:
    entries = "".join(f"<li>{escape(item)}</li>" for item in items)
    return f"<{tag}>{entries}</{tag}>"


def _recommendations(items: list[str], title: str = "Recommendations") -> str:
    if not items:
        return ""
    return f"<h3>{title}</h3>{_list(items)}"


def _info_card(label: str, value: str) -> str:
    return f'<div class="info-card"><h3>{label}</h3><p>{value}</p></div>'


def _stat_box(value: object, label: str, color: str | None = None) -> str:
    style = f' style="color: {color};"' if color else ""
    return (
        f'<div class="stat-box"><div class="stat-number"{style}>{value}</div>'
        f'<div class="stat-label">{label}</div></div>'
    )


def _header_section(scan: HeaderScan, recommendations: list[str]) -> str:
    rows = "".join(
        f"<tr><td><code>{escape(header.name)}</code></td>"
        f"<td>{severity_badge(header.severity)}</td>"
        f"<td>{escape(header.description)}</td></tr>"
        for header in scan.missing_headers + scan.weak_headers
    )
    table = (
        "<table><thead><tr><th>Header</th><th>Severity</th><th>Description</th></tr></thead>"
        f"<tbody>{rows}</tbody></table>"
        if rows
        else ""
    )
    return (
        '<div class="section"><h2>Security Headers Analysis</h2>'
        f"<p><strong>Overall Score</strong>: {scan.security_score}/100</p>"
        f"{table}{_recommendations(recommendations)}</div>"
    )


def _tls_section(scan: TLSScan, recommendations: list[str]) -> str:
    status = "Secure" if scan.is_secure else "Insecure"
    cards = [
        _info_card("Protocol Version", escape(scan.protocol or "unknown")),
        _info_card("Status", status),
        _info_card("Cipher Suite", escape(truncate(scan.cipher_suite or "unknown", 30))),
    ]
    cert = scan.certificate
    if cert is not None:
        expiry = "EXPIRED" if cert.is_expired else f"{cert.days_to_expiry} days left"
        cards.append(_info_card("Certificate", f"{escape(cert.subject)} ({expiry})"))
    vulnerabilities = (
        f"<h3>Detected Vulnerabilities</h3>{_list(scan.vulnerabilities)}"
        if scan.vulnerabilities
        else ""
    )
    return (
        '<div class="section"><h2>TLS/SSL Configuration</h2>'
        f"<p><strong>Security Score</strong>: {scan.score}/100</p>"
        f'<div class="info-grid">{"".join(cards)}</div>'
        f"{vulnerabilities}{_recommendations(recommendations)}</div>"
    )


def _vulnerability_section(
    title: str, vulnerabilities: list[Vulnerability], recommendations: list[str]
) -> str:
    rows = "".join(
        f"<tr><td>{severity_badge(vuln.severity)}</td><td>{escape(vuln.location)}</td>"
        f"<td><code>{escape(truncate(vuln.payload, 40))}</code></td>"
        f"<td>{escape(truncate(vuln.evidence, 50))}</td></tr>"
        for vuln in vulnerabilities
    )
    return (
        f'<div class="section"><h2>{title}</h2>'
        f"<p><strong>Found</strong>: {len(vulnerabilities)} vulnerabilities</p>"
        "<table><thead><tr><th>Severity</th><th>Location</th><th>Payload</th>"
        f"<th>Evidence</th></tr></thead><tbody>{rows}</tbody></table>"
        f"{_recommendations(recommendations, 'Remediation Steps')}</div>"
    )


def _ports_section(scan: PortScan) -> str:
    rows = "".join(
        f"<tr><td>{port.number}</td><td>{escape(port.protocol)}</td><td>{escape(port.state)}</td>"
        f"<td>{escape(port.service)}</td><td>{escape(truncate(port.version, 30))}</td></tr>"
        for port in scan.open_ports
    )
    return (
        '<div class="section"><h2>Open Ports</h2>'
        "<table><thead><tr><th>Port</th><th>Protocol</th><th>State</th><th>Service</th>"
        f"<th>Version</th></tr></thead><tbody>{rows}</tbody></table></div>"
    )


def render_html(result: ScanResult) -> str:
    """Render a self-contained HTML page for *result*."""
    target = result.target
    summary = build_summary(result)
    recommendations = collect_recommendations(result)
    risk = result.risk_level

    info = "".join(
        [
            _info_card("Target URL", escape(target.url)),
            _info_card("Domain", escape(target.domain)),
            _info_card("IP Address", escape(target.ip)),
            _info_card("Scan Date", f"{result.start_time:%Y-%m-%d %H:%M}"),
            _info_card("Duration", f"{result.duration:.0f}s"),
            _info_card(
                "Risk Level",
                f'<span class="risk-badge" style="background-color: {RISK_COLORS[risk]};">'
                f"{RISK_EMOJI[risk]} {risk.value}</span>",
            ),
        ]
    )

    stats = []
    if result.headers is not None:
        stats.append(_stat_box(summary["header_score"], "Security Headers Score"))
    if result.tls is not None:
        stats.append(_stat_box(summary["tls_score"], "TLS/SSL Score"))
    stats.append(_stat_box(summary["sqli"], "SQL Injection Vulns", SEVERITY_COLORS["critical"]))
    stats.append(_stat_box(summary["xss"], "XSS Vulnerabilities", SEVERITY_COLORS["high"]))
    if result.ports is not None:
        stats.append(_stat_box(summary["open_ports"], "Open Ports"))

    sections = []
    if result.headers is not None:
        sections.append(_header_section(result.headers, recommendations.get("headers", [])))
    if result.tls is not None:
        sections.append(_tls_section(result.tls, recommendations.get("tls", [])))
    if result.sqli:
        sections.append(
            _vulnerability_section(
                "SQL Injection Vulnerabilities", result.sqli, recommendations.get("sqli", [])
            )
        )
    if result.xss:
        sections.append(
            _vulnerability_section(
                "Cross-Site Scripting (XSS) Vulnerabilities",
                result.xss,
                recommendations.get("xss", []),
            )
        )
    if result.ports is not None and result.ports.open_ports:
        sections.append(_ports_section(result.ports))
    if result.errors:
        errors = [f"{error.source} ({error.kind}): {error.message}" for error in result.errors]
        sections.append(f'<div class="section"><h2>Scan Errors</h2>{_list(errors)}</div>')

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Security Audit Report - {escape(target.domain)}</title>
    <style>{STYLE}    </style>
</head>
<body>
    <div class="header">
        <h1>Security Audit Report</h1>
        <p>Comprehensive Security Assessment</p>
    </div>
    <div class="section">
        <h2>Scan Information</h2>
        <div class="info-grid">{info}</div>
    </div>
    <div class="section">
        <h2>Executive Summary</h2>
        <div class="stats-grid">{"".join(stats)}</div>
        <div class="priority-actions">
            <h3>Priority Actions</h3>
            {_list(priority_actions(result), tag="ol")}
        </div>
    </div>
    {"".join(sections)}
    <div class="footer">
        <p>Report generated by AutoSecScan v{__version__}</p>
        <p>Generated on {datetime.now():%Y-%m-%d %H:%M:%S}</p>
    </div>
</body>
</html>
"""


def generate_html_report(result: ScanResult, output_dir: Path) -> Path:
    """Generate an HTML report file."""
    output_dir.mkdir(parents=True, exist_ok=True)
    report_file = output_dir / f"{report_stem(result)}.html"
    report_file.write_text(render_html(result), encoding="utf-8")
    return report_file
