"""
data_collection/schemas/api_request.py

Inbound configuration for REST API requests.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import Field, field_validator

from data_collection.schemas.base import BoundaryModel, require_http_url

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]


class NoAuth(BoundaryModel):
    type: Literal["none"] = "none"


class BearerAuth(BoundaryModel):
    type: Literal["bearer"] = "bearer"
    token: str = Field(min_length=1)


class ApiKeyAuth(BoundaryModel):
    type: Literal["api_key"] = "api_key"
    key: str = Field(min_length=1)
    value: str = Field(min_length=1)
    location: Literal["header", "query"] = "header"


class BasicAuth(BoundaryModel):
    type: Literal["basic"] = "basic"
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class OAuth2Auth(BoundaryModel):
    type: Literal["oauth2"] = "oauth2"
    client_id: str = Field(min_length=1)
    client_secret: str = Field(min_length=1)
    token_url: str
    scopes: list[str] | None = None

    @field_validator("token_url")
    @classmethod
    def _validate_token_url(cls, value: str) -> str:
        return require_http_url(value)


AuthConfig = Annotated[
    Union[NoAuth, BearerAuth, ApiKeyAuth, BasicAuth, OAuth2Auth],
    Field(discriminator="type"),
]


class ApiRequestConfig(BoundaryModel):
    """
    One logical HTTP request. Durations are milliseconds.
    """

    url: str
    method: HttpMethod = "GET"
    auth: AuthConfig = Field(default_factory=NoAuth)
    headers: dict[str, str] | None = None
    query_params: dict[str, str] | None = None
    body: Any = None
    timeout: int = Field(default=30_000, ge=1)
    retry_count: int = Field(default=3, ge=0)
    retry_delay: int = Field(default=1_000, ge=0)

    @field_validator("url")
    @classmethod
    def _validate_url(cls, value: str) -> str:
        return require_http_url(value)

    @field_validator("method", mode="before")
    @classmethod
    def _normalize_method(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value
