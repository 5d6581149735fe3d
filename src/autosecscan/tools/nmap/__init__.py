"""Nmap wrapper for the port probe."""

from .scanner import NmapScanner, is_nmap_installed
from .xml_parser import parse_nmap_xml

__all__ = [
    "NmapScanner",
    "is_nmap_installed",
    "parse_nmap_xml",
]
