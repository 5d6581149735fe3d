"""Tests for header, TLS and risk scoring."""

from datetime import UTC, datetime, timedelta

import pytest

from autosecscan.models import (
    CertificateInfo,
    HeaderScan,
    RiskLevel,
    ScanResult,
    TargetInfo,
    TLSScan,
    Vulnerability,
)
from autosecscan.scoring import (
    SECURITY_HEADERS,
    calculate_risk_level,
    classify_headers,
    extract_max_age,
    header_score,
    is_weak_header,
    protocol_name,
    score_tls,
)

STRONG_HEADERS = {
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "Content-Security-Policy": "default-src 'self'",
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "no-referrer",
    "Permissions-Policy": "geolocation=()",
    "X-XSS-Protection": "1; mode=block",
}


def _certificate(days_left: int) -> CertificateInfo:
    now = datetime.now(UTC)
    return CertificateInfo(
        issuer="CN=Test CA",
        subject="CN=example.com",
        valid_from=now - timedelta(days=90),
        valid_to=now + timedelta(days=days_left),
        is_expired=days_left < 0,
        days_to_expiry=days_left,
    )


def _vuln(severity: str) -> Vulnerability:
    return Vulnerability(
        type="sqli",
        severity=severity,
        location="Parameter: id",
        payload="'",
        evidence="",
        description="",
    )


def _result(**kwargs) -> ScanResult:
    target = TargetInfo("https://example.com", "example.com", "127.0.0.1", "https", 443)
    return ScanResult(target=target, start_time=datetime.now(), **kwargs)


class TestHeaderClassification:
    """Partition of the seven header definitions."""

    def test_all_strong_scores_100(self):
        scan = classify_headers(STRONG_HEADERS)
        assert scan.security_score == 100
        assert len(scan.present_headers) == 7
        assert scan.missing_headers == []
        assert scan.weak_headers == []

    def test_no_headers_scores_0(self):
        scan = classify_headers({})
        assert scan.security_score == 0
        assert [h.name for h in scan.missing_headers] == [d.name for d in SECURITY_HEADERS]

    def test_two_strong_of_seven_rounds_down(self):
        scan = classify_headers(
            {"X-Frame-Options": "DENY", "X-Content-Type-Options": "nosniff"}
        )
        assert scan.security_score == 28

    def test_lists_partition_definitions(self):
        headers = {
            "strict-transport-security": "max-age=100",
            "content-security-policy": "default-src 'self' 'unsafe-inline'",
            "x-frame-options": "SAMEORIGIN",
        }
        scan = classify_headers(headers)
        names = [h.name for h in scan.missing_headers + scan.weak_headers + scan.present_headers]
        assert sorted(names) == sorted(d.name for d in SECURITY_HEADERS)
        assert {h.name for h in scan.weak_headers} == {
            "Strict-Transport-Security",
            "Content-Security-Policy",
        }
        assert scan.security_score == header_score(1)

    def test_header_lookup_is_case_insensitive(self):
        scan = classify_headers({"X-FRAME-OPTIONS": "deny"})
        assert [h.name for h in scan.present_headers] == ["X-Frame-Options"]

    def test_score_is_monotonic(self):
        scores = [header_score(n) for n in range(8)]
        assert scores == sorted(scores)


class TestWeakHeaderRules:
    """Per-header weakness checks."""

    @pytest.mark.parametrize(
        "name,value,weak",
        [
            ("Strict-Transport-Security", "max-age=15552000", False),
            ("Strict-Transport-Security", "max-age=15551999", True),
            ("Strict-Transport-Security", "includeSubDomains", True),
            ("Content-Security-Policy", "script-src 'unsafe-eval'", True),
            ("Content-Security-Policy", "default-src *", True),
            ("X-Frame-Options", "ALLOW-FROM https://a.example", True),
            ("X-XSS-Protection", "0", True),
            ("Referrer-Policy", "unsafe-url", False),
        ],
    )
    def test_rules(self, name, value, weak):
        assert is_weak_header(name, value) is weak

    def test_extract_max_age(self):
        assert extract_max_age("max-age=31536000; preload") == 31536000
        assert extract_max_age("preload") == 0


class TestTLSScoring:
    """Deductions and clamping."""

    def test_tls13_strong_cipher_is_perfect(self):
        scan = score_tls("TLS 1.3", "TLS_AES_256_GCM_SHA384", _certificate(200))
        assert scan.score == 100
        assert scan.is_secure is True
        assert scan.vulnerabilities == []

    def test_tls12_small_deduction(self):
        scan = score_tls("TLS 1.2", "ECDHE-RSA-AES128-GCM-SHA256", _certificate(200))
        assert scan.score == 95
        assert scan.is_secure is True

    def test_old_protocol_weak_cipher_expired_cert_clamps_to_zero(self):
        scan = score_tls("TLS 1.0", "AES128-SHA", _certificate(-3))
        assert scan.score == 0
        assert scan.is_secure is False
        assert "Certificate has expired" in scan.vulnerabilities

    def test_probe_findings_deduct_and_mark_insecure(self):
        scan = score_tls(
            "TLS 1.3",
            "TLS_AES_128_GCM_SHA256",
            None,
            ["SSLv3 supported (POODLE vulnerability)", "Weak cipher suites supported"],
        )
        assert scan.score == 80
        assert scan.is_secure is False

    def test_score_never_negative(self):
        scan = score_tls(
            "SSL 3.0",
            "RC4-SHA",
            _certificate(-1),
            ["a", "b", "c"],
        )
        assert scan.score == 0

    def test_expiring_certificate(self):
        scan = score_tls("TLS 1.3", "TLS_AES_128_GCM_SHA256", _certificate(10))
        assert scan.score == 90
        assert scan.is_secure is True

    def test_protocol_names(self):
        assert protocol_name("TLSv1.3") == "TLS 1.3"
        assert protocol_name("TLSv1") == "TLS 1.0"
        assert protocol_name(None) == "Unknown"


class TestRiskLevel:
    """Worst severity wins regardless of counts."""

    def test_empty_result_is_low(self):
        assert calculate_risk_level(_result()) == RiskLevel.LOW

    def test_critical_beats_everything(self):
        result = _result(sqli=[_vuln("critical")], xss=[_vuln("medium")] * 5)
        assert calculate_risk_level(result) == RiskLevel.CRITICAL

    def test_insecure_tls_counts_as_high(self):
        result = _result(tls=TLSScan(is_secure=False), xss=[_vuln("medium")])
        assert calculate_risk_level(result) == RiskLevel.HIGH

    def test_low_header_score_counts_as_medium(self):
        result = _result(headers=HeaderScan(security_score=49))
        assert calculate_risk_level(result) == RiskLevel.MEDIUM

    def test_header_score_of_50_is_fine(self):
        result = _result(headers=HeaderScan(security_score=50))
        assert calculate_risk_level(result) == RiskLevel.LOW

    def test_many_mediums_do_not_escalate(self):
        result = _result(xss=[_vuln("medium")] * 20)
        assert calculate_risk_level(result) == RiskLevel.MEDIUM
