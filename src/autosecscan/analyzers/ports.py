"""Port probe adapter around the nmap wrapper."""

from autosecscan.models import PortScan, TargetInfo
from autosecscan.tools.nmap import NmapScanner

from .base import Analyzer, ScanLogger


class PortAnalyzer(Analyzer):
    """Run nmap against the target domain with its own sub-timeout."""

    name = "nmap"
    label = "Nmap"
    status = "Running Nmap port scan..."
    result_field = "ports"

    def __init__(
        self,
        timeout: float | None = None,
        scanner: NmapScanner | None = None,
        logger: ScanLogger | None = None,
    ):
        super().__init__(logger)
        self.timeout = timeout
        self.scanner = scanner or NmapScanner()

    async def run(self, target: TargetInfo) -> PortScan:
        self.log.debug("Starting Nmap scan for %s", target.domain)
        scan = await self.scanner.scan_ports(target.domain, timeout=self.timeout)
        self.log.info("Nmap scan complete - Found %d open ports", len(scan.open_ports))
        return scan
