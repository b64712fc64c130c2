"""Client configuration and per-instance session state."""

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

import httpx

from pleiades.config.settings import Settings

# camelCase configuration keys -> ClientConfig field names
_CONFIG_KEYS = {
    "clientId": "client_id",
    "clientSecret": "client_secret",
    "userName": "user_name",
    "userPassword": "user_password",
    "iamTokenEndpoint": "iam_token_endpoint",
    "apiEndpoint": "api_endpoint",
    "debugFile": "debug_file",
    "verifyTls": "verify_tls",
    "s3Endpoint": "s3_endpoint",
    "s3Region": "s3_region",
    "s3AccessKey": "s3_access_key",
    "s3SecretKey": "s3_secret_key",
}


@dataclass(frozen=True)
class ClientConfig:
    client_id: str = ""
    client_secret: str = ""
    user_name: str = ""
    user_password: str = ""
    iam_token_endpoint: str = ""
    api_endpoint: str = ""
    debug_file: str = ""  # empty = no request tracing
    verify_tls: bool = True
    s3_endpoint: str = "http://localhost:9000"
    s3_region: str = "us-east-1"
    s3_access_key: str = "access-user-1"
    s3_secret_key: str = "secret-user-1"

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> "ClientConfig":
        """Build a config from a camelCase (or snake_case) mapping.

        Missing or None values fall back to defaults; unknown keys are ignored.
        """
        names = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in config.items():
            name = _CONFIG_KEYS.get(key, key)
            if name in names and value is not None:
                kwargs[name] = value
        return cls(**kwargs)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ClientConfig":
        return cls(**{f.name: getattr(settings, f.name) for f in fields(cls)})


@dataclass
class Session:
    """Mutable state of one logical API session."""

    access_token: str = ""
    database: str = ""
    last_response: httpx.Response | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)
