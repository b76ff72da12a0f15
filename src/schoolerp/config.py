"""ERP client configuration loaded from environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings


class ErpConfig(BaseSettings):
    """ERP client configuration loaded from environment variables.

    Settings are loaded from environment variables with sensible defaults.
    For local development, create a .env file in the project root.
    """

    # Backend REST API
    erp_api_url: str = Field(
        default="http://localhost:4000/api/v1",
        description="Base URL of the school ERP REST API",
    )
    erp_email: str = Field(
        default="",
        description="Login email used to obtain a bearer token",
    )
    erp_password: str = Field(
        default="",
        description="Login password used to obtain a bearer token",
    )
    erp_token: str = Field(
        default="",
        description="Explicit bearer token (skips the saved token file)",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        description="Per-request HTTP timeout",
    )

    # Paths
    state_dir: str = Field(
        default="data/state",
        description="Directory for the saved bearer token",
    )

    # Token settings
    max_token_age_hours: int = Field(
        default=24,
        description="Maximum age of a saved token before logging in again",
    )

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format (for production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {
        "env_prefix": "",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


# Singleton pattern
_config: ErpConfig | None = None


def get_config() -> ErpConfig:
    """Get the ERP client configuration singleton.

    Returns:
        ErpConfig: ERP client configuration instance
    """
    global _config
    if _config is None:
        _config = ErpConfig()
    return _config

