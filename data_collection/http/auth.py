"""
data_collection/http/auth.py

Applies an AuthConfig to outgoing headers and query parameters.
"""

from __future__ import annotations

import base64
import logging

import requests

from data_collection.http.errors import OAuth2TokenError
from data_collection.logging_utils import log_event
from data_collection.schemas import ApiKeyAuth, AuthConfig, BasicAuth, BearerAuth, OAuth2Auth

logger = logging.getLogger(__name__)


class AuthInjector:
    """
    Mutates request headers/params in place according to the auth scheme.

    OAuth2 uses the client-credentials grant. With ``failure_policy="degrade"``
    a failed token exchange leaves the Authorization header unset; with
    ``"fail"`` it raises OAuth2TokenError.
    """

    def __init__(
        self,
        *,
        session: requests.Session,
        failure_policy: str = "degrade",
        token_timeout_seconds: float = 30.0,
    ) -> None:
        self._session = session
        self._failure_policy = failure_policy
        self._token_timeout_seconds = token_timeout_seconds

    def apply(
        self,
        auth: AuthConfig,
        *,
        headers: dict[str, str],
        params: dict[str, str],
    ) -> None:
        if isinstance(auth, BearerAuth):
            headers["Authorization"] = f"Bearer {auth.token}"
        elif isinstance(auth, ApiKeyAuth):
            if auth.location == "query":
                params[auth.key] = auth.value
            else:
                headers[auth.key] = auth.value
        elif isinstance(auth, BasicAuth):
            raw = f"{auth.username}:{auth.password}".encode("utf-8")
            headers["Authorization"] = f"Basic {base64.b64encode(raw).decode('ascii')}"
        elif isinstance(auth, OAuth2Auth):
            token = self._fetch_oauth2_token(auth)
            if token:
                headers["Authorization"] = f"Bearer {token}"

    def _fetch_oauth2_token(self, auth: OAuth2Auth) -> str | None:
        form = {
            "grant_type": "client_credentials",
            "client_id": auth.client_id,
            "client_secret": auth.client_secret,
        }
        if auth.scopes:
            form["scope"] = " ".join(auth.scopes)

        try:
            response = self._session.post(
                auth.token_url,
                data=form,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=self._token_timeout_seconds,
            )
            if not 200 <= response.status_code < 300:
                return self._token_failure(f"token endpoint returned HTTP {response.status_code}")
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            return self._token_failure(str(exc))

        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            return self._token_failure("token response did not include access_token")
        return str(token)

    def _token_failure(self, reason: str) -> None:
        log_event(
            logger,
            logging.WARNING,
            "oauth2_token_failed",
            policy=self._failure_policy,
            reason=reason,
        )
        if self._failure_policy == "fail":
            raise OAuth2TokenError(f"OAuth2 token request failed: {reason}")
        return None
