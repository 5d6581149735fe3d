"""Data models for scan orchestration."""

from dataclasses import dataclass
from typing import Any

from autosecscan.analyzers import Analyzer

from .progress import ProgressReporter


@dataclass
class ScanOptions:
    """Runtime settings for one orchestrated scan."""

    skip_nmap: bool = False
    skip_headers: bool = False
    skip_tls: bool = False
    skip_sqli: bool = False
    skip_xss: bool = False
    timeout: float = 300.0
    progress: ProgressReporter | None = None
    request_timeout: float = 15.0


@dataclass
class AnalyzerSlot:
    """An analyzer and whether it runs in this scan."""

    name: str
    enabled: bool
    analyzer: Analyzer


@dataclass
class UnitOutcome:
    """The single message a unit sends to the aggregator."""

    slot: AnalyzerSlot
    output: Any = None
    error: BaseException | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None
