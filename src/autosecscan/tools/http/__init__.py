"""HTTP helpers for AutoSecScan."""

from .client import USER_AGENT, HTTPClient, HTTPResponse

__all__ = [
    "HTTPClient",
    "HTTPResponse",
    "USER_AGENT",
]
