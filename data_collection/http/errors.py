"""
data_collection/http/errors.py

Exceptions raised inside the HTTP client before they are folded into ApiResponse.
"""

from __future__ import annotations


class RateLimitExceededError(RuntimeError):
    """
    Raised when a host has used its request budget for the current window.
    """


class RequestTimeoutError(RuntimeError):
    """
    Raised when one HTTP attempt exceeds its configured timeout.
    """


class OAuth2TokenError(RuntimeError):
    """
    Raised when a client-credentials token cannot be obtained under the ``fail`` policy.
    """
