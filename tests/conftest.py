"""Test configuration and fixtures for AutoSecScan."""

import datetime as dt
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import Encoding
from cryptography.x509.oid import NameOID

from autosecscan.analyzers import injection
from autosecscan.models import (
    HeaderScan,
    Port,
    PortScan,
    ScanResult,
    TargetInfo,
    TLSScan,
    Vulnerability,
)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def no_request_delay(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop the pause between payload requests."""
    monkeypatch.setattr(injection, "REQUEST_DELAY", 0)


@pytest.fixture
def https_target() -> TargetInfo:
    return TargetInfo(
        url="https://example.com/page?id=1",
        domain="example.com",
        ip="93.184.216.34",
        protocol="https",
        port=443,
    )


@pytest.fixture
def http_target() -> TargetInfo:
    return TargetInfo(
        url="http://example.com/",
        domain="example.com",
        ip="93.184.216.34",
        protocol="http",
        port=80,
    )


def make_certificate_der(not_before: dt.datetime, not_after: dt.datetime) -> bytes:
    """Self-signed leaf certificate with the given validity window."""
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "example.com")])
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_before)
        .not_valid_after(not_after)
        .sign(key, hashes.SHA256())
    )
    return cert.public_bytes(Encoding.DER)


@pytest.fixture
def valid_cert_der() -> bytes:
    now = dt.datetime.now(dt.UTC)
    return make_certificate_der(now - dt.timedelta(days=30), now + dt.timedelta(days=200))


@pytest.fixture
def expired_cert_der() -> bytes:
    now = dt.datetime.now(dt.UTC)
    return make_certificate_der(now - dt.timedelta(days=400), now - dt.timedelta(days=5))


@pytest.fixture
def sample_result(https_target: TargetInfo) -> ScanResult:
    """A finished scan with something to report in every section."""
    started = dt.datetime(2024, 5, 1, 12, 0, 0)
    return ScanResult(
        target=https_target,
        start_time=started,
        end_time=started + dt.timedelta(seconds=42),
        ports=PortScan(
            open_ports=[Port(443, "tcp", "open", "https", "nginx 1.25.3")],
            duration=12.5,
        ),
        headers=HeaderScan(security_score=28),
        tls=TLSScan(
            protocol="TLS 1.2",
            cipher_suite="ECDHE-RSA-AES128-GCM-SHA256",
            vulnerabilities=["TLS 1.2 is acceptable but TLS 1.3 is recommended"],
            score=95,
            is_secure=True,
        ),
        sqli=[
            Vulnerability(
                type="sqli",
                severity="critical",
                location="Parameter: id",
                payload="'",
                evidence="SQL error detected: you have an error in your sql",
                description="Single quote test - SQL error exposed",
            )
        ],
        xss=[
            Vulnerability(
                type="xss",
                severity="medium",
                location="DOM (client-side JavaScript)",
                payload="DOM manipulation pattern detected",
                evidence="Found dangerous pattern: innerhtml",
                description="Page uses potentially unsafe DOM manipulation",
            )
        ],
    )
