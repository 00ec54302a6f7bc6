"""
data_collection/http package marker.
"""

from data_collection.http.client import HttpClient, get_nested_value
from data_collection.http.errors import OAuth2TokenError, RateLimitExceededError, RequestTimeoutError
from data_collection.http.rate_limiter import HostRateLimiter, get_shared_rate_limiter

__all__ = [
    "HostRateLimiter",
    "HttpClient",
    "OAuth2TokenError",
    "RateLimitExceededError",
    "RequestTimeoutError",
    "get_nested_value",
    "get_shared_rate_limiter",
]
