"""Exception taxonomy for AutoSecScan."""


class AutoSecScanError(Exception):
    """Base class for all scanner errors."""


class TargetConnectionError(AutoSecScanError):
    """No server answered a probe, or it answered with an error status."""


class TLSConnectionError(AutoSecScanError):
    """The TLS handshake could not be completed."""


class TargetParseError(AutoSecScanError):
    """The target URL could not be parsed."""


class ScanTimeoutExceeded(AutoSecScanError):
    """The global scan deadline elapsed before every analyzer reported."""


class ToolUnavailable(AutoSecScanError):
    """An external binary required by a probe is not installed."""


class TargetValidationError(AutoSecScanError):
    """The raw target could not be turned into a reachable TargetInfo."""
