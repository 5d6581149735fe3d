"""Progress reporting for running scans."""

from typing import Protocol

from rich.console import Console


class ProgressReporter(Protocol):
    """Receives progress and status updates from the orchestrator."""

    def update_progress(self, step: str, percent: int) -> None: ...

    def update_status(self, message: str) -> None: ...


class ConsoleProgress:
    """Print progress lines to a rich console."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console(stderr=True)

    def update_progress(self, step: str, percent: int) -> None:
        style = "green" if percent >= 100 else "cyan"
        self.console.print(f"[{style}]✓[/] {step} [dim]({percent}%)[/]")

    def update_status(self, message: str) -> None:
        self.console.print(f"[cyan]●[/] {message}")


class NullProgress:
    """Discard all updates."""

    def update_progress(self, step: str, percent: int) -> None:
        pass

    def update_status(self, message: str) -> None:
        pass
