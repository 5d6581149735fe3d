"""Default analyzer set for a scan."""

from autosecscan.analyzers import (
    HeaderAnalyzer,
    PortAnalyzer,
    SQLiAnalyzer,
    TLSAnalyzer,
    XSSAnalyzer,
)
from autosecscan.logging_setup import ScanLoggerAdapter, scan_logger
from autosecscan.models import TargetInfo
from autosecscan.tools.nmap import is_nmap_installed

from .models import AnalyzerSlot, ScanOptions


def create_default_slots(
    target: TargetInfo,
    options: ScanOptions,
    nmap_available: bool | None = None,
) -> list[AnalyzerSlot]:
    """Return the five standard analyzers, each with a logger bound to *target*."""
    if nmap_available is None:
        nmap_available = is_nmap_installed()

    def bound(module: str) -> ScanLoggerAdapter:
        return scan_logger(f"autosecscan.analyzers.{module}", target.domain)

    request_timeout = options.request_timeout
    return [
        AnalyzerSlot(
            "nmap",
            not options.skip_nmap and nmap_available,
            PortAnalyzer(timeout=options.timeout / 2, logger=bound("ports")),
        ),
        AnalyzerSlot(
            "headers",
            not options.skip_headers,
            HeaderAnalyzer(request_timeout=request_timeout, logger=bound("headers")),
        ),
        AnalyzerSlot("tls", not options.skip_tls, TLSAnalyzer(logger=bound("tls"))),
        AnalyzerSlot(
            "sqli",
            not options.skip_sqli,
            SQLiAnalyzer(request_timeout=request_timeout, logger=bound("sqli")),
        ),
        AnalyzerSlot(
            "xss",
            not options.skip_xss,
            XSSAnalyzer(request_timeout=request_timeout, logger=bound("xss")),
        ),
    ]
