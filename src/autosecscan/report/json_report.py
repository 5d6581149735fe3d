"""JSON report rendering."""

import json
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any

from autosecscan import __version__
from autosecscan.models import ScanResult
from autosecscan.recommendations import collect_recommendations

from .summary import build_summary, report_stem


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def build_json_report(result: ScanResult) -> dict[str, Any]:
    """Plain-data view of a scan result."""
    tls = asdict(result.tls) if result.tls else None
    if tls and tls["certificate"]:
        tls["certificate"]["valid_from"] = _isoformat(result.tls.certificate.valid_from)
        tls["certificate"]["valid_to"] = _isoformat(result.tls.certificate.valid_to)

    return {
        "report_metadata": {
            "generated_at": datetime.now().isoformat(),
            "tool": "AutoSecScan",
            "version": __version__,
        },
        "target": asdict(result.target),
        "scan": {
            "start_time": _isoformat(result.start_time),
            "end_time": _isoformat(result.end_time),
            "duration_seconds": round(result.duration, 2),
        },
        "summary": build_summary(result),
        "ports": asdict(result.ports) if result.ports else None,
        "headers": asdict(result.headers) if result.headers else None,
        "tls": tls,
        "vulnerabilities": {
            "sqli": [asdict(vuln) for vuln in result.sqli],
            "xss": [asdict(vuln) for vuln in result.xss],
        },
        "errors": [asdict(error) for error in result.errors],
        "recommendations": collect_recommendations(result),
    }


def generate_json_report(result: ScanResult, output_dir: Path) -> Path:
    """Generate a JSON report file."""
    output_dir.mkdir(parents=True, exist_ok=True)
    report_file = output_dir / f"{report_stem(result)}.json"
    report_file.write_text(json.dumps(build_json_report(result), indent=2), encoding="utf-8")
    return report_file
