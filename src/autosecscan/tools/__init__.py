"""Tools package for AutoSecScan."""

from autosecscan.tools.http import HTTPClient, HTTPResponse
from autosecscan.tools.nmap import NmapScanner, is_nmap_installed
from autosecscan.tools.runtime import CommandResult, resolve_binary, run_command

__all__ = [
    "CommandResult",
    "HTTPClient",
    "HTTPResponse",
    "NmapScanner",
    "is_nmap_installed",
    "resolve_binary",
    "run_command",
]
