"""Configuration management with pydantic-settings for prometheus-push.

- pydantic-settings v2 for type-safe configuration
- Automatic .env file loading with proper precedence
- Validation with clear error messages
- Frozen config (thread-safe, immutable after load)

References:
- Pydantic Settings: https://docs.pydantic.dev/latest/concepts/pydantic_settings/
- httpx timeouts: https://www.python-httpx.org/advanced/timeouts/
"""

from functools import lru_cache

import httpx
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = [
    "DEFAULT_PUSHGATEWAY_URL",
    "PushConfig",
    "get_config",
    "reset_config",
]

DEFAULT_PUSHGATEWAY_URL = "http://localhost:9091"


class PushConfig(BaseSettings):
    """Configuration for pushing metrics to a Pushgateway.

    Loads from (in order of precedence):
    1. Environment variables (highest priority)
    2. .env file in the working directory
    3. Default values (lowest priority)

    Attributes:
        pushgateway_url: Base URL of the Pushgateway instance
        pushgateway_connect_timeout: Connection establishment timeout (seconds)
        pushgateway_read_timeout: Response read timeout (seconds)
        pushgateway_write_timeout: Request body write timeout (seconds)
        pushgateway_pool_timeout: Connection pool acquisition timeout (seconds)
        pushgateway_max_connections: Total connection limit of the pool
        pushgateway_max_keepalive_connections: Keep-alive pool size
        pushgateway_strict_names: Validate grouping label names, not only values
        pushgateway_verify_tls: Verify the gateway's TLS certificate
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,  # Use defaults instead of empty strings
        case_sensitive=False,  # PUSHGATEWAY_URL = pushgateway_url
        validate_default=True,
        frozen=True,
        extra="ignore",
    )

    pushgateway_url: str = Field(
        default=DEFAULT_PUSHGATEWAY_URL,
        description="Pushgateway base URL. A bare host:port is treated as http.",
    )

    pushgateway_connect_timeout: float = Field(
        default=3.0, gt=0.0, le=60.0, description="Connect timeout in seconds"
    )

    pushgateway_read_timeout: float = Field(
        default=10.0, gt=0.0, le=300.0, description="Read timeout in seconds"
    )

    pushgateway_write_timeout: float = Field(
        default=5.0, gt=0.0, le=300.0, description="Write timeout in seconds"
    )

    pushgateway_pool_timeout: float = Field(
        default=3.0, gt=0.0, le=60.0, description="Pool acquisition timeout in seconds"
    )

    pushgateway_max_connections: int = Field(
        default=10, ge=1, le=1000, description="Total connection limit"
    )

    pushgateway_max_keepalive_connections: int = Field(
        default=5, ge=0, le=1000, description="Keep-alive pool size"
    )

    pushgateway_strict_names: bool = Field(
        default=True,
        description="Reject '/' in grouping label names as well as values",
    )

    pushgateway_verify_tls: bool = Field(
        default=True, description="Verify TLS certificates for https gateways"
    )

    @field_validator("pushgateway_url")
    @classmethod
    def normalize_url(cls, v: str) -> str:
        """Default to http:// when no scheme is given, like push_to_gateway()."""
        v = v.strip()
        if not v:
            raise ValueError("PUSHGATEWAY_URL must not be empty")
        if "://" not in v:
            v = f"http://{v}"
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"PUSHGATEWAY_URL must use http or https, got '{v}'")
        return v

    @model_validator(mode="after")
    def validate_pool_limits(self) -> "PushConfig":
        """Keep-alive pool cannot exceed the connection limit."""
        if (
            self.pushgateway_max_keepalive_connections
            > self.pushgateway_max_connections
        ):
            raise ValueError(
                f"PUSHGATEWAY_MAX_KEEPALIVE_CONNECTIONS "
                f"({self.pushgateway_max_keepalive_connections}) must be <= "
                f"PUSHGATEWAY_MAX_CONNECTIONS ({self.pushgateway_max_connections})"
            )
        return self

    def get_timeout(self) -> httpx.Timeout:
        """Build the granular httpx timeout for push requests."""
        return httpx.Timeout(
            connect=self.pushgateway_connect_timeout,
            read=self.pushgateway_read_timeout,
            write=self.pushgateway_write_timeout,
            pool=self.pushgateway_pool_timeout,
        )

    def get_limits(self) -> httpx.Limits:
        """Build the httpx connection pool limits."""
        return httpx.Limits(
            max_connections=self.pushgateway_max_connections,
            max_keepalive_connections=self.pushgateway_max_keepalive_connections,
        )


# Module-level singleton with lru_cache for thread-safety
@lru_cache(maxsize=1)
def get_config() -> PushConfig:
    """Get global configuration singleton.

    First call loads from environment + .env file, subsequent calls return
    the cached instance.

    Returns:
        PushConfig singleton instance.

    Raises:
        ValidationError: If configuration values are invalid.

    Example:
        >>> config = get_config()
        >>> config.pushgateway_url
        'http://localhost:9091'
        >>> get_config() is config
        True
    """
    return PushConfig()


def reset_config() -> None:
    """Reset configuration singleton for testing.

    Warning:
        Only use in test code. Production code should not reset config.
    """
    get_config.cache_clear()
