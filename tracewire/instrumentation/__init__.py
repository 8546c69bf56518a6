"""HTTP helpers for injecting and extracting propagated context."""

from tracewire.instrumentation.http_client import inject_headers
from tracewire.instrumentation.http_server import extract_context, extract_parent_context
from tracewire.instrumentation.fastapi import install_http_middleware

__all__ = [
    "inject_headers",
    "extract_context",
    "extract_parent_context",
    "install_http_middleware",
]
