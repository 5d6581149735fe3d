"""Data models for scan targets, findings and aggregated results."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class RiskLevel(Enum):
    """Overall risk verdict for a scan."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


@dataclass(frozen=True)
class TargetInfo:
    """A validated scan target."""

    url: str
    domain: str
    ip: str
    protocol: str
    port: int


@dataclass
class SecurityHeader:
    """One evaluated security header."""

    name: str
    value: str
    status: str
    severity: str
    description: str


@dataclass
class HeaderScan:
    """Security header analysis for one response."""

    headers: dict[str, str] = field(default_factory=dict)
    missing_headers: list[SecurityHeader] = field(default_factory=list)
    weak_headers: list[SecurityHeader] = field(default_factory=list)
    present_headers: list[SecurityHeader] = field(default_factory=list)
    security_score: int = 0


@dataclass
class CertificateInfo:
    """Leaf certificate details."""

    issuer: str
    subject: str
    valid_from: datetime
    valid_to: datetime
    is_expired: bool
    days_to_expiry: int


@dataclass
class TLSScan:
    """TLS/SSL posture of the target."""

    protocol: str = ""
    cipher_suite: str = ""
    certificate: CertificateInfo | None = None
    vulnerabilities: list[str] = field(default_factory=list)
    score: int = 0
    is_secure: bool = False


@dataclass
class Vulnerability:
    """A reflected injection finding."""

    type: str
    severity: str
    location: str
    payload: str
    evidence: str
    description: str


@dataclass
class Port:
    """An open port reported by the port probe."""

    number: int
    protocol: str
    state: str
    service: str
    version: str = ""


@dataclass
class PortScan:
    """Port probe results."""

    open_ports: list[Port] = field(default_factory=list)
    duration: float = 0.0


@dataclass
class ScanError:
    """An analyzer failure captured during orchestration."""

    source: str
    kind: str
    message: str

    @classmethod
    def from_exception(cls, source: str, exc: BaseException) -> "ScanError":
        """Capture an exception raised by one analyzer."""
        return cls(source=source, kind=type(exc).__name__, message=str(exc) or repr(exc))

    def __str__(self) -> str:
        return f"{self.source}: {self.message}"


@dataclass
class ScanResult:
    """Aggregated output of one orchestrated scan."""

    target: TargetInfo
    start_time: datetime
    end_time: datetime | None = None
    ports: PortScan | None = None
    headers: HeaderScan | None = None
    tls: TLSScan | None = None
    sqli: list[Vulnerability] = field(default_factory=list)
    xss: list[Vulnerability] = field(default_factory=list)
    errors: list[ScanError] = field(default_factory=list)
    risk_level: RiskLevel = RiskLevel.LOW

    @property
    def vulnerabilities(self) -> list[Vulnerability]:
        """All injection findings, SQLi first."""
        return [*self.sqli, *self.xss]

    @property
    def duration(self) -> float:
        """Elapsed seconds, zero until finalized."""
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()
