"""CrowdStrike Falcon datasource settings.

Environment variables use FALCON_ prefix.
Example: FALCON_BASE_URL=https://api.us-2.crowdstrike.com, FALCON_REQUEST_TIMEOUT_SECONDS=10
"""

from __future__ import annotations

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SUPPORTED_API_VERSIONS: frozenset[str] = frozenset({"v1"})


class ConnectorSettings(BaseSettings):
    """Process-wide defaults for talking to the Falcon APIs.

    Per-call values (API version, filters, timeout) travel with each page
    request; these settings only fill the gaps.

    Attributes:
        base_url: Default Falcon API address, used when a request omits one.
        token: Default authorization header value, used when a request omits one.
        api_version: GraphQL API version used when a request omits one.
        request_timeout_seconds: Per-call deadline.
        max_page_size: Largest page size a caller may request.
        default_page_size: Page size used by the CLI when none is given.
        verify_tls: Verify the datasource certificate chain.
        max_connections: Connection pool size for the shared HTTP client.
    """

    base_url: str | None = Field(
        default=None,
        description="Falcon API address (https://api.<cloud>.crowdstrike.com)",
    )
    token: SecretStr | None = Field(
        default=None,
        description="Authorization header value, e.g. 'Bearer <token>'",
    )
    api_version: str = Field(
        default="v1",
        description="Identity Protection GraphQL API version",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=600,
        description="Per-call request deadline in seconds",
    )
    max_page_size: int = Field(
        default=1000,
        ge=1,
        le=1000,
        description="Maximum allowed page size (vendor hard limit is 1000)",
    )
    default_page_size: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Page size when the caller does not specify one",
    )
    verify_tls: bool = Field(default=True, description="Verify TLS certificates")
    max_connections: int = Field(
        default=10,
        ge=1,
        le=200,
        description="Maximum pooled connections to the datasource",
    )

    @field_validator("api_version")
    @classmethod
    def _supported_version(cls, v: str) -> str:
        if v not in SUPPORTED_API_VERSIONS:
            msg = f"apiVersion is not supported: {v}"
            raise ValueError(msg)
        return v

    model_config = SettingsConfigDict(
        env_prefix="FALCON_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )
