"""Client settings loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # IAM (Keycloak) password-grant credentials
    client_id: str = ""
    client_secret: str = ""
    user_name: str = ""
    user_password: str = ""

    # Endpoints
    iam_token_endpoint: str = ""  # token URL is {iam_token_endpoint}/token
    api_endpoint: str = ""
    verify_tls: bool = True

    # Raw HTTP trace of the last API request. Empty = disabled
    debug_file: str = ""

    # Object storage (S3-compatible, path-style)
    s3_endpoint: str = "http://localhost:9000"
    s3_region: str = "us-east-1"
    s3_access_key: str = "access-user-1"
    s3_secret_key: str = "secret-user-1"

    # Logging
    log_level: str = "INFO"
    log_file: str = ""  # Empty = stdout only

    model_config = {"env_prefix": "PLEIADES_", "env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
