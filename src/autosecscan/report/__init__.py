"""Reporting module for AutoSecScan."""

from .html_report import generate_html_report, render_html
from .json_report import build_json_report, generate_json_report
from .markdown_report import generate_markdown_report, render_markdown
from .summary import build_summary, priority_actions

__all__ = [
    "build_json_report",
    "build_summary",
    "generate_html_report",
    "generate_json_report",
    "generate_markdown_report",
    "priority_actions",
    "render_html",
    "render_markdown",
]
