"""Resiliência: backoff, retry, rate limiting, cancelamento e error boundary."""

from .backoff import backoff_schedule, compute_backoff_delay
from .cancellation import CancellationToken
from .error_boundary import BoundaryStatus, ProviderErrorBoundary
from .rate_limiter import RateLimitEntry, RateLimiter, rate_limit_key, rate_limited
from .retry_policy import RetryPolicy, is_transport_error

__all__ = [
    "BoundaryStatus",
    "CancellationToken",
    "ProviderErrorBoundary",
    "RateLimitEntry",
    "RateLimiter",
    "RetryPolicy",
    "backoff_schedule",
    "compute_backoff_delay",
    "is_transport_error",
    "rate_limit_key",
    "rate_limited",
]
