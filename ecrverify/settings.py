"""
ecrverify Settings - Configuration management using Pydantic Settings.

Loads configuration from environment variables and .env files.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Find project root (where .env file is located)
PROJECT_ROOT = Path(__file__).parent.parent


class VerifySettings(BaseSettings):
    """
    ecrverify configuration settings.

    Settings are loaded from:
    1. Environment variables (highest priority)
    2. .env file in project root
    3. Default values (lowest priority)
    """

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="EV_",  # All ecrverify env vars must start with EV_
    )

    # Scenario layout: {config_folder}/{scenario}/{config_file_name}
    # A relative config_folder is resolved against the working directory, not PROJECT_ROOT
    config_folder: str = Field(
        default="examples",
        description=(
            "Folder holding one sub-folder per scenario, relative to the working "
            "directory unless absolute (env: EV_CONFIG_FOLDER)"
        ),
    )

    config_file_name: str = Field(
        default="test.tfvars",
        description="Variables file used at apply time (env: EV_CONFIG_FILE_NAME)",
    )

    # AWS session (used by the CLI only; the core receives a ready client)
    aws_region: str | None = Field(
        default=None,
        description="AWS region for the ECR client (env: EV_AWS_REGION)",
    )

    aws_profile: str | None = Field(
        default=None,
        description="Named AWS profile for the ECR client (env: EV_AWS_PROFILE)",
    )

    # Terraform Configuration
    terraform_binary: str = Field(
        default="terraform",
        description="Terraform executable used to read outputs (env: EV_TERRAFORM_BINARY)",
    )

    # Provider retries (disabled by default; each retry is logged)
    api_max_retries: int = Field(
        default=0,
        ge=0,
        description="Retries on provider API errors (env: EV_API_MAX_RETRIES)",
    )

    api_retry_base_delay: float = Field(
        default=1.0,
        ge=0,
        description="Base delay in seconds for exponential backoff (env: EV_API_RETRY_BASE_DELAY)",
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR) (env: EV_LOG_LEVEL)",
    )


# Global settings instance
_settings: VerifySettings | None = None


def get_settings() -> VerifySettings:
    """
    Get the global settings instance.

    Creates the settings instance on first call, then returns cached instance.

    Returns:
        VerifySettings instance
    """
    global _settings
    if _settings is None:
        _settings = VerifySettings()
    return _settings


def reload_settings() -> VerifySettings:
    """
    Reload settings from environment/files.

    Useful for testing or when .env file changes.

    Returns:
        Fresh VerifySettings instance
    """
    global _settings
    _settings = VerifySettings()
    return _settings
