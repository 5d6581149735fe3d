"""Nmap scanner class and core functionality."""

import logging
import time
from collections.abc import Awaitable, Callable

from autosecscan.errors import ToolUnavailable
from autosecscan.models import PortScan
from autosecscan.tools.runtime import CommandResult, resolve_binary, run_command

from .xml_parser import parse_nmap_xml

logger = logging.getLogger(__name__)

CommandRunner = Callable[..., Awaitable[CommandResult]]


def is_nmap_installed() -> bool:
    """Return True when an nmap binary is on PATH."""
    return resolve_binary("nmap") is not None


class NmapScanner:
    """Wrapper for nmap subprocess calls."""

    def __init__(self, command_runner: CommandRunner | None = None):
        self._runner = command_runner or run_command

    def build_command(self, target: str) -> list[str]:
        """Top-1000 TCP scan with service detection, XML on stdout."""
        return [
            "nmap",
            "-Pn",
            "-sV",
            "-T4",
            "--top-ports",
            "1000",
            "-oX",
            "-",
            target,
        ]

    async def scan_ports(self, target: str, timeout: float | None = None) -> PortScan:
        """
        Scan a host for open ports.

        Args:
            target: Hostname or IP address
            timeout: Seconds before the nmap process is terminated
        """
        started = time.perf_counter()
        try:
            result = await self._runner(self.build_command(target), timeout=timeout)
        except FileNotFoundError as exc:
            raise ToolUnavailable("nmap is not installed or not in PATH") from exc
        open_ports = parse_nmap_xml(result.stdout)
        duration = time.perf_counter() - started

        logger.info("Nmap scan completed: found %d open ports in %.1fs", len(open_ports), duration)
        return PortScan(open_ports=open_ports, duration=duration)
