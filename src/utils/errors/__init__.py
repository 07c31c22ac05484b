"""Exceções utilitárias compartilhadas."""

from .exceptions import (
    ClientLayerError,
    HttpError,
    InfrastructureError,
    RateLimitExceededError,
    RenderError,
    RequestCancelledError,
    RequestTimeoutError,
    ServerError,
    StorageError,
    StorageQuotaExceededError,
    StorageUnavailableError,
    TransportError,
)

__all__ = [
    "ClientLayerError",
    "HttpError",
    "InfrastructureError",
    "RateLimitExceededError",
    "RenderError",
    "RequestCancelledError",
    "RequestTimeoutError",
    "ServerError",
    "StorageError",
    "StorageQuotaExceededError",
    "StorageUnavailableError",
    "TransportError",
]
