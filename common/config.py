"""Connection configuration for services-userclient.

Contains:
- ConnectionConfig: Frozen endpoint and credential settings
"""

import os
from dataclasses import dataclass, field
from typing import Any

from common.errors import ConfigurationError
from common.protocol import DEFAULT_PORT, DEFAULT_SCHEME

ENV_PREFIX = "SERVICES_"


@dataclass(frozen=True)
class ConnectionConfig:
    """Endpoint and credentials for one services server.

    server and host are required. secret and app_id are only needed for
    signed calls and are checked when the first signed call is built.
    """

    server: str  # Path to the endpoint, e.g. services/xmlrpc
    host: str
    port: int = DEFAULT_PORT
    secret: str | None = field(default=None, repr=False)  # API key shared with the service
    app_id: str | None = None  # Domain the API key is scoped to
    scheme: str = DEFAULT_SCHEME

    def __post_init__(self) -> None:
        """Validate invariants."""
        if not self.server or not self.host:
            raise ConfigurationError("server and host are required")
        if not 0 < self.port < 65536:
            raise ConfigurationError(f"Invalid port: {self.port}")

    @property
    def has_credentials(self) -> bool:
        """Return True if both secret and app_id are set."""
        return bool(self.secret) and bool(self.app_id)

    @property
    def url(self) -> str:
        """Full endpoint URL."""
        return f"{self.scheme}://{self.host}:{self.port}/{self.server.lstrip('/')}"

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX, **overrides: Any) -> "ConnectionConfig":
        """Load from SERVICES_SERVER, SERVICES_HOST, SERVICES_PORT,
        SERVICES_SECRET, SERVICES_APP_ID and SERVICES_SCHEME.

        Overrides that are not None win over the environment.
        """
        values: dict[str, Any] = {}
        for name in ("server", "host", "port", "secret", "app_id", "scheme"):
            value = os.environ.get(f"{prefix}{name.upper()}")
            if value:
                values[name] = value
        values.update({k: v for k, v in overrides.items() if v is not None})

        if "port" in values:
            try:
                values["port"] = int(values["port"])
            except ValueError:
                raise ConfigurationError(f"Invalid port: {values['port']!r}")

        values.setdefault("server", "")
        values.setdefault("host", "")
        return cls(**values)
