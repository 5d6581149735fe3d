"""Concurrent scan orchestration."""

from .factory import create_default_slots
from .models import AnalyzerSlot, ScanOptions, UnitOutcome
from .orchestrator import ScanOrchestrator, run_security_scan
from .progress import ConsoleProgress, NullProgress, ProgressReporter

__all__ = [
    "AnalyzerSlot",
    "ConsoleProgress",
    "NullProgress",
    "ProgressReporter",
    "ScanOptions",
    "ScanOrchestrator",
    "UnitOutcome",
    "create_default_slots",
    "run_security_scan",
]
