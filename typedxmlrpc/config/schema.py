"""Configuration schema using Pydantic.

Persisted to ~/.typedxmlrpc/config.json; every field can also come from a
TYPEDXMLRPC_* environment variable.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from typedxmlrpc.transport import DEFAULT_USER_AGENT


class ClientConfig(BaseSettings):
    """Settings for one XML-RPC endpoint."""
    server_uri: str = "http://localhost:8000"
    timeout_seconds: float = Field(default=10.0, gt=0)
    user_agent: str = DEFAULT_USER_AGENT
    verify_tls: bool = True
    follow_redirects: bool = False
    headers: dict[str, str] = Field(default_factory=dict)  # Extra HTTP headers, e.g. Authorization

    model_config = SettingsConfigDict(
        env_prefix="TYPEDXMLRPC_",
        env_nested_delimiter="__",
    )

    @field_validator("server_uri")
    @classmethod
    def _check_scheme(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"server_uri must be an http(s) URL, got {value!r}")
        return value
