"""Clientes HTTP."""

from .api_client import CORRELATION_HEADER, ApiClient, parse_retry_after

__all__ = ["CORRELATION_HEADER", "ApiClient", "parse_retry_after"]
