"""Gateway configuration, loaded once from the environment.

Required env vars:
- CONSUMER_KEY: consumer key issued by the gateway
- CONSUMER_SECRET: consumer secret issued by the gateway
- AGENT_ID: agent identity registered with the gateway

Optional:
- DGA_BASE_URL: gateway origin (default: https://api.egov.go.th)
- DGA_CZP_ENV: citizen portal environment segment (default: uat)
- DGA_HTTP_TIMEOUT: per-request timeout in seconds (default: 10)
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Mapping

from tangrat.domain.errors import ConfigurationError

DEFAULT_BASE_URL = "https://api.egov.go.th"
DEFAULT_CZP_ENV = "uat"
DEFAULT_HTTP_TIMEOUT = 10.0

_REQUIRED_VARS = ("CONSUMER_KEY", "CONSUMER_SECRET", "AGENT_ID")


@dataclass(frozen=True)
class GatewayConfig:
    """Immutable gateway credentials and endpoints."""

    consumer_key: str = field(repr=False)
    consumer_secret: str = field(repr=False)
    agent_id: str
    base_url: str = DEFAULT_BASE_URL
    czp_environment: str = DEFAULT_CZP_ENV
    timeout: float = DEFAULT_HTTP_TIMEOUT

    @property
    def validate_url(self) -> str:
        return f"{self.base_url}/ws/auth/validate"

    @property
    def deproc_url(self) -> str:
        return f"{self.base_url}/ws/dga/czp/{self.czp_environment}/v1/core/shield/data/deproc"

    @property
    def notification_url(self) -> str:
        return (
            f"{self.base_url}/ws/dga/czp/{self.czp_environment}/v1/core/notification/push"
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "GatewayConfig":
        """Build config from environment variables.

        Raises:
            ConfigurationError: If any required credential is missing or empty,
                or DGA_HTTP_TIMEOUT is not a positive number.
        """
        env = os.environ if environ is None else environ

        missing = [name for name in _REQUIRED_VARS if not env.get(name)]
        if missing:
            raise ConfigurationError(f"Missing {' / '.join(missing)} in environment")

        raw_timeout = env.get("DGA_HTTP_TIMEOUT", "")
        timeout = DEFAULT_HTTP_TIMEOUT
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                raise ConfigurationError("DGA_HTTP_TIMEOUT must be a number") from None
            if timeout <= 0:
                raise ConfigurationError("DGA_HTTP_TIMEOUT must be positive")

        return cls(
            consumer_key=env["CONSUMER_KEY"],
            consumer_secret=env["CONSUMER_SECRET"],
            agent_id=env["AGENT_ID"],
            base_url=(env.get("DGA_BASE_URL") or DEFAULT_BASE_URL).rstrip("/"),
            czp_environment=env.get("DGA_CZP_ENV") or DEFAULT_CZP_ENV,
            timeout=timeout,
        )


@lru_cache(maxsize=1)
def load_gateway_config() -> GatewayConfig:
    """Process-wide config. Failed loads are not cached."""
    return GatewayConfig.from_env()
