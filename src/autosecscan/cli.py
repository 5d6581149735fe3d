"""AutoSecScan CLI - concurrent web security scanner."""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from autosecscan import __version__
from autosecscan.config import (
    get_log_file,
    get_output_dir,
    get_request_timeout,
    get_scan_timeout,
    get_verbose,
)
from autosecscan.errors import TargetValidationError
from autosecscan.logging_setup import configure_logging
from autosecscan.models import RiskLevel, ScanResult
from autosecscan.orchestrator import ConsoleProgress, ScanOptions, run_security_scan
from autosecscan.report import (
    generate_html_report,
    generate_json_report,
    generate_markdown_report,
)
from autosecscan.target import sanitize_url, validate_target
from autosecscan.utils.async_utils import safe_async_run

app = typer.Typer(
    name="autosecscan",
    help="Concurrent web application security scanner",
    no_args_is_help=True,
)
console = Console()

REPORT_FORMATS = ("json", "markdown", "html", "both", "none")

RISK_STYLES = {
    RiskLevel.CRITICAL: "bold red",
    RiskLevel.HIGH: "red",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.LOW: "green",
}


@app.command()
def version() -> None:
    """Show the installed AutoSecScan version."""
    console.print(f"AutoSecScan {__version__}")


def _normalize_format(value: str) -> str:
    fmt = value.strip().lower()
    if fmt == "md":
        fmt = "markdown"
    if fmt not in REPORT_FORMATS:
        console.print(
            f"[red]Unsupported report format: {value} "
            f"(choose from {', '.join(REPORT_FORMATS)})[/red]"
        )
        raise typer.Exit(2)
    return fmt


def print_summary(result: ScanResult) -> None:
    """Render a one-screen summary of the scan."""
    table = Table(title=f"Scan summary for {result.target.domain}", show_lines=False)
    table.add_column("Check", style="bold")
    table.add_column("Result")

    if result.headers is not None:
        table.add_row(
            "Security headers",
            f"{result.headers.security_score}/100 "
            f"({len(result.headers.missing_headers)} missing, "
            f"{len(result.headers.weak_headers)} weak)",
        )
    if result.tls is not None:
        state = "secure" if result.tls.is_secure else "[red]insecure[/red]"
        protocol = result.tls.protocol or "n/a"
        table.add_row("TLS/SSL", f"{result.tls.score}/100, {protocol}, {state}")
    table.add_row("SQL injection", str(len(result.sqli)))
    table.add_row("XSS", str(len(result.xss)))
    if result.ports is not None:
        ports = ", ".join(str(port.number) for port in result.ports.open_ports) or "none"
        table.add_row("Open ports", ports)
    table.add_row("Duration", f"{result.duration:.1f}s")
    style = RISK_STYLES[result.risk_level]
    table.add_row("Risk level", f"[{style}]{result.risk_level.value}[/{style}]")
    console.print(table)

    for error in result.errors:
        console.print(f"[yellow]! {error.source}: {error.message}[/yellow]")


@app.command()
def scan(
    url: str = typer.Argument(..., help="Target URL, e.g. https://example.com/page?id=1"),
    skip_nmap: bool = typer.Option(False, "--skip-nmap", help="Skip the nmap port scan"),
    skip_headers: bool = typer.Option(
        False, "--skip-headers", help="Skip the security header analysis"
    ),
    skip_tls: bool = typer.Option(False, "--skip-tls", help="Skip the TLS/SSL analysis"),
    skip_sqli: bool = typer.Option(False, "--skip-sqli", help="Skip SQL injection tests"),
    skip_xss: bool = typer.Option(False, "--skip-xss", help="Skip XSS tests"),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        "-t",
        help="Global scan timeout in seconds (default: AUTOSECSCAN_TIMEOUT or 300)",
    ),
    report_format: str = typer.Option(
        "both",
        "--format",
        "-f",
        help="Report format: json, markdown, html, both (json + markdown), none",
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Report directory (default: AUTOSECSCAN_OUTPUT_DIR)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
    log_file: Path | None = typer.Option(None, "--log-file", help="Also write logs to a file"),
) -> None:
    """Scan a web target for common security issues."""
    fmt = _normalize_format(report_format)
    configure_logging(verbose=verbose or get_verbose(), log_file=log_file or get_log_file())

    effective_timeout = timeout if timeout and timeout > 0 else get_scan_timeout()

    console.print(f"[blue]Validating target {sanitize_url(url)}...[/blue]")
    try:
        target = safe_async_run(validate_target(url))
    except TargetValidationError as exc:
        console.print(f"[red]Invalid target: {exc}[/red]")
        raise typer.Exit(1) from exc

    console.print(
        f"[*] Scanning {target.domain} ({target.ip}) with a {effective_timeout:.0f}s timeout"
    )
    options = ScanOptions(
        skip_nmap=skip_nmap,
        skip_headers=skip_headers,
        skip_tls=skip_tls,
        skip_sqli=skip_sqli,
        skip_xss=skip_xss,
        timeout=effective_timeout,
        request_timeout=get_request_timeout(),
        progress=ConsoleProgress(console),
    )
    result = run_security_scan(target, options)
    print_summary(result)

    if fmt == "none":
        return
    output_dir = output or get_output_dir()
    written: list[Path] = []
    if fmt in ("json", "both"):
        written.append(generate_json_report(result, output_dir))
    if fmt in ("markdown", "both"):
        written.append(generate_markdown_report(result, output_dir))
    if fmt == "html":
        written.append(generate_html_report(result, output_dir))
    for path in written:
        console.print(f"[green]Report written to {path}[/green]")


def main():
    """Entry point for the CLI."""
    app()
