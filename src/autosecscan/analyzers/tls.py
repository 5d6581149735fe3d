"""TLS/SSL posture analyzer."""

import asyncio
import contextlib
import ssl
from dataclasses import dataclass
from datetime import UTC, datetime

from cryptography import x509

from autosecscan.errors import TLSConnectionError
from autosecscan.models import CertificateInfo, TargetInfo, TLSScan
from autosecscan.scoring import protocol_name, score_tls

from .base import Analyzer, ScanLogger

# Offered alone to see whether the server still negotiates them.
WEAK_CIPHER_PROBE = "RC4-SHA:DES-CBC3-SHA:@SECLEVEL=0"

_VULNERABLE_PROTOCOLS: tuple[tuple[str, str], ...] = (
    ("SSLv3", "SSLv3 supported (POODLE vulnerability)"),
    ("TLSv1", "TLS 1.0 supported (BEAST vulnerability)"),
)


@dataclass
class HandshakeInfo:
    """Parameters negotiated by one completed handshake."""

    protocol: str
    cipher: str
    certificate: bytes | None = None


def client_context(
    version: ssl.TLSVersion | None = None,
    ciphers: str | None = None,
) -> ssl.SSLContext:
    """Client context that inspects certificates without trusting them."""
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    if version is not None:
        context.minimum_version = version
        context.maximum_version = version
    else:
        context.minimum_version = ssl.TLSVersion.MINIMUM_SUPPORTED
    if ciphers is not None:
        if version is None:
            # TLS 1.3 suites ignore set_ciphers().
            context.maximum_version = ssl.TLSVersion.TLSv1_2
        context.set_ciphers(ciphers)
    return context


class TLSConnector:
    """Performs real handshakes against a host."""

    def __init__(self, timeout: float = 10.0, probe_timeout: float = 5.0):
        self.timeout = timeout
        self.probe_timeout = probe_timeout

    async def _connect(
        self, host: str, port: int, context: ssl.SSLContext, timeout: float
    ) -> HandshakeInfo:
        reader, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port, ssl=context, server_hostname=host),
            timeout=timeout,
        )
        try:
            ssl_object = writer.get_extra_info("ssl_object")
            cipher = ssl_object.cipher()
            return HandshakeInfo(
                protocol=ssl_object.version() or "",
                cipher=cipher[0] if cipher else "",
                certificate=ssl_object.getpeercert(binary_form=True),
            )
        finally:
            writer.close()
            with contextlib.suppress(OSError, ssl.SSLError):
                await writer.wait_closed()

    async def handshake(self, host: str, port: int) -> HandshakeInfo:
        """Handshake with the client's default offer."""
        return await self._connect(host, port, client_context(), self.timeout)

    async def supports_protocol(self, host: str, port: int, version: str) -> bool:
        """True when a handshake pinned to *version* completes."""
        try:
            context = client_context(
                version=ssl.TLSVersion[version.replace(".", "_")],
                ciphers="DEFAULT:@SECLEVEL=0",
            )
        except (KeyError, ValueError, ssl.SSLError):
            # The local OpenSSL build cannot even offer this version.
            return False
        return await self._attempt(host, port, context)

    async def supports_ciphers(self, host: str, port: int, ciphers: str) -> bool:
        """True when a handshake offering only *ciphers* completes."""
        try:
            context = client_context(ciphers=ciphers)
        except ssl.SSLError:
            return False
        return await self._attempt(host, port, context)

    async def _attempt(self, host: str, port: int, context: ssl.SSLContext) -> bool:
        try:
            await self._connect(host, port, context, self.probe_timeout)
        except (OSError, TimeoutError):
            return False
        return True


def certificate_info(der: bytes, now: datetime | None = None) -> CertificateInfo:
    """Extract validity details from a DER encoded leaf certificate."""
    cert = x509.load_der_x509_certificate(der)
    now = now or datetime.now(UTC)
    valid_to = cert.not_valid_after_utc
    return CertificateInfo(
        issuer=cert.issuer.rfc4514_string(),
        subject=cert.subject.rfc4514_string(),
        valid_from=cert.not_valid_before_utc,
        valid_to=valid_to,
        is_expired=now > valid_to,
        days_to_expiry=int((valid_to - now).total_seconds() / 86400),
    )


class TLSAnalyzer(Analyzer):
    """Inspect the negotiated TLS parameters and probe for downgrades."""

    name = "tls"
    label = "TLS/SSL"
    status = "Analyzing TLS/SSL configuration..."
    result_field = "tls"

    def __init__(self, connector: TLSConnector | None = None, logger: ScanLogger | None = None):
        super().__init__(logger)
        self.connector = connector or TLSConnector()

    async def run(self, target: TargetInfo) -> TLSScan:
        self.log.debug("Starting TLS/SSL scan for %s", target.domain)
        if target.protocol != "https":
            return TLSScan(
                is_secure=False,
                score=0,
                vulnerabilities=["Target is not using HTTPS"],
            )

        try:
            info = await self.connector.handshake(target.domain, target.port)
        except (OSError, TimeoutError) as exc:
            raise TLSConnectionError(f"TLS connection failed: {exc}") from exc

        certificate = None
        if info.certificate:
            certificate = certificate_info(info.certificate)
            self.log.debug(
                "Certificate: %s, valid until %s", certificate.subject, certificate.valid_to
            )

        findings = await self._probe_vulnerabilities(target)
        scan = score_tls(protocol_name(info.protocol), info.cipher, certificate, findings)

        self.log.info(
            "TLS/SSL scan completed: Protocol=%s, Score=%d/100, Secure=%s",
            scan.protocol,
            scan.score,
            scan.is_secure,
        )
        return scan

    async def _probe_vulnerabilities(self, target: TargetInfo) -> list[str]:
        """Fresh handshakes pinned to known-vulnerable versions and ciphers."""
        findings: list[str] = []
        for version, message in _VULNERABLE_PROTOCOLS:
            if await self.connector.supports_protocol(target.domain, target.port, version):
                self.log.warning("%s", message)
                findings.append(message)
        if await self.connector.supports_ciphers(target.domain, target.port, WEAK_CIPHER_PROBE):
            self.log.warning("Weak cipher suites supported")
            findings.append("Weak cipher suites supported")
        return findings
