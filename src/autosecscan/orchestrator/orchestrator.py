"""Coordinator running the analyzers of one scan concurrently."""

import asyncio
import logging
import time
from collections.abc import Sequence
from datetime import datetime

from autosecscan.analyzers import Analyzer
from autosecscan.errors import ScanTimeoutExceeded
from autosecscan.logging_setup import scan_logger
from autosecscan.models import ScanError, ScanResult, TargetInfo
from autosecscan.scoring import calculate_risk_level
from autosecscan.tools.nmap import is_nmap_installed
from autosecscan.utils.async_utils import safe_async_run

from .factory import create_default_slots
from .models import AnalyzerSlot, ScanOptions, UnitOutcome
from .progress import ConsoleProgress, ProgressReporter

ORCHESTRATOR_SOURCE = "orchestrator"


class ScanOrchestrator:
    """Run the enabled analyzers as tasks and aggregate their outcomes.

    Every task sends exactly one ``UnitOutcome`` to a queue. The aggregator in
    ``run`` is the only code that touches the ``ScanResult``; it stops reading
    at the global deadline and cancels whatever is still running.
    """

    def __init__(
        self,
        options: ScanOptions | None = None,
        slots: Sequence[AnalyzerSlot] | None = None,
    ):
        self.options = options or ScanOptions()
        self._slots = list(slots) if slots is not None else None

    async def run(self, target: TargetInfo) -> ScanResult:
        """Scan *target* and return the finalized result. Never raises for analyzer failures."""
        options = self.options
        progress: ProgressReporter = options.progress or ConsoleProgress()
        log = scan_logger(__name__, target.domain)

        result = ScanResult(target=target, start_time=datetime.now())
        slots = self._resolve_slots(target, progress, log)
        enabled = [slot for slot in slots if slot.enabled]
        total = len(enabled)
        log.info("Starting scan with %d analyzers (timeout %.0fs)", total, options.timeout)

        queue: asyncio.Queue[UnitOutcome] = asyncio.Queue()
        tasks = [
            asyncio.create_task(
                self._run_unit(slot, target, queue, progress),
                name=f"autosecscan-{slot.name}",
            )
            for slot in enabled
        ]

        loop = asyncio.get_running_loop()
        deadline = loop.time() + options.timeout
        pending = {slot.name for slot in enabled}
        completed = 0
        try:
            while pending:
                remaining = deadline - loop.time()
                try:
                    if remaining <= 0:
                        raise TimeoutError
                    outcome = await asyncio.wait_for(queue.get(), timeout=remaining)
                except TimeoutError:
                    self._drain(queue, result, pending, log)
                    if pending:
                        log.warning(
                            "Scan timeout reached, incomplete: %s", ", ".join(sorted(pending))
                        )
                        result.errors.append(
                            ScanError.from_exception(
                                ORCHESTRATOR_SOURCE, ScanTimeoutExceeded("scan timeout exceeded")
                            )
                        )
                    break

                pending.discard(outcome.slot.name)
                self._aggregate(result, outcome, log)
                completed += 1
                progress.update_progress(
                    f"Completed {outcome.slot.analyzer.label}", completed * 100 // total
                )
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()

        result.end_time = datetime.now()
        result.risk_level = calculate_risk_level(result)
        log.info(
            "Scan finished in %.1fs: risk=%s, errors=%d",
            result.duration,
            result.risk_level.value,
            len(result.errors),
        )
        progress.update_progress("All scans complete", 100)
        return result

    def _resolve_slots(
        self,
        target: TargetInfo,
        progress: ProgressReporter,
        log: logging.LoggerAdapter,
    ) -> list[AnalyzerSlot]:
        if self._slots is not None:
            return self._slots

        nmap_available = False
        if not self.options.skip_nmap:
            nmap_available = is_nmap_installed()
            if not nmap_available:
                log.warning("nmap not found on PATH, skipping port scan")
                progress.update_status("Nmap not installed, skipping port scan")
        return create_default_slots(target, self.options, nmap_available=nmap_available)

    async def _run_unit(
        self,
        slot: AnalyzerSlot,
        target: TargetInfo,
        queue: asyncio.Queue[UnitOutcome],
        progress: ProgressReporter,
    ) -> None:
        analyzer: Analyzer = slot.analyzer
        progress.update_status(analyzer.status)
        started = time.perf_counter()
        try:
            output = await analyzer.run(target)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            outcome = UnitOutcome(slot=slot, error=exc)
        else:
            outcome = UnitOutcome(slot=slot, output=output)
        analyzer.log.debug("%s finished in %.1fs", slot.name, time.perf_counter() - started)
        queue.put_nowait(outcome)

    def _drain(
        self,
        queue: asyncio.Queue[UnitOutcome],
        result: ScanResult,
        pending: set[str],
        log: logging.LoggerAdapter,
    ) -> None:
        """Aggregate outcomes that were already delivered when the deadline hit."""
        while not queue.empty():
            outcome = queue.get_nowait()
            pending.discard(outcome.slot.name)
            self._aggregate(result, outcome, log)

    def _aggregate(
        self, result: ScanResult, outcome: UnitOutcome, log: logging.LoggerAdapter
    ) -> None:
        slot = outcome.slot
        if outcome.failed:
            level = logging.WARNING if slot.name == "nmap" else logging.ERROR
            log.log(level, "%s scan failed: %s", slot.analyzer.label, outcome.error)
            result.errors.append(ScanError.from_exception(slot.name, outcome.error))
            return
        setattr(result, slot.analyzer.result_field, outcome.output)


def run_security_scan(target: TargetInfo, options: ScanOptions | None = None) -> ScanResult:
    """Blocking wrapper around ``ScanOrchestrator.run``."""
    return safe_async_run(ScanOrchestrator(options).run(target))
