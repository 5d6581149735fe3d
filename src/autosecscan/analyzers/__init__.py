"""Detection analyzers for AutoSecScan."""

from .base import Analyzer, ScanLogger
from .headers import HeaderAnalyzer
from .ports import PortAnalyzer
from .sqli import SQLiAnalyzer
from .tls import TLSAnalyzer, TLSConnector
from .xss import XSSAnalyzer

__all__ = [
    "Analyzer",
    "HeaderAnalyzer",
    "PortAnalyzer",
    "SQLiAnalyzer",
    "ScanLogger",
    "TLSAnalyzer",
    "TLSConnector",
    "XSSAnalyzer",
]
