"""Base contract for scan analyzers."""

import logging
from abc import ABC, abstractmethod
from typing import Any

from autosecscan.models import TargetInfo

ScanLogger = logging.Logger | logging.LoggerAdapter


class Analyzer(ABC):
    """One self-contained probe category run against a single target."""

    name: str
    # Short display name used in progress updates.
    label: str
    # Human status line shown when the analyzer starts.
    status: str
    # ScanResult attribute the analyzer's output is stored in.
    result_field: str

    def __init__(self, logger: ScanLogger | None = None):
        self.log: ScanLogger = logger or logging.getLogger(type(self).__module__)

    @abstractmethod
    async def run(self, target: TargetInfo) -> Any:
        """Probe the target and return this analyzer's typed result."""
