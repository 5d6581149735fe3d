"""AutoSecScan package."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("autosecscan")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

__all__ = ["__version__", "app", "main"]


def __getattr__(name: str):
    if name in ("app", "main"):
        from autosecscan.cli import app, main

        return {"app": app, "main": main}[name]
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return sorted(__all__)
