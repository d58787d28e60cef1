"""
Central configuration management for ibmcloud-resources.

This module provides type-safe configuration management using Pydantic,
loading IBM Cloud credentials, endpoints and polling behaviour from the
environment.
"""

from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CloudSettings(BaseSettings):
    """IBM Cloud account and endpoint configuration."""

    api_key: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("IC_API_KEY", "IBMCLOUD_API_KEY")
    )
    region: str = Field(
        default="us-south", validation_alias=AliasChoices("IC_REGION", "IBMCLOUD_REGION")
    )
    iam_url: str = Field(
        default="https://iam.cloud.ibm.com", validation_alias="IBMCLOUD_IAM_URL"
    )

    # Endpoint overrides, derived from the region when unset
    vpc_endpoint: Optional[str] = Field(default=None, validation_alias="IBMCLOUD_IS_NG_API_ENDPOINT")
    code_engine_endpoint: Optional[str] = Field(
        default=None, validation_alias="IBMCLOUD_CODE_ENGINE_API_ENDPOINT"
    )
    tagging_endpoint: str = Field(
        default="https://tags.global-search-tagging.cloud.ibm.com",
        validation_alias="IBMCLOUD_GT_API_ENDPOINT",
    )
    console_url: str = Field(default="https://cloud.ibm.com", validation_alias="IBMCLOUD_CONSOLE_URL")

    # Tags applied to every taggable resource
    env_tags_raw: str = Field(default="", validation_alias="IC_ENV_TAGS")

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, populate_by_name=True, extra="ignore"
    )

    @field_validator("region")
    @classmethod
    def validate_region(cls, v):
        """Validate region name."""
        if not v or not v.strip():
            raise ValueError("Region must not be empty")
        return v.strip().lower()

    @property
    def env_tags(self) -> List[str]:
        """Environment tags parsed from the comma separated setting."""
        return [tag.strip() for tag in self.env_tags_raw.split(",") if tag.strip()]

    @property
    def resolved_vpc_endpoint(self) -> str:
        """Get the VPC API URL for the configured region."""
        return self.vpc_endpoint or f"https://{self.region}.iaas.cloud.ibm.com/v1"

    @property
    def resolved_code_engine_endpoint(self) -> str:
        """Get the Code Engine API URL for the configured region."""
        return (
            self.code_engine_endpoint
            or f"https://api.{self.region}.codeengine.cloud.ibm.com/v2"
        )


class PollingSettings(BaseSettings):
    """Status polling configuration."""

    poll_interval: float = Field(default=10.0, validation_alias="IBMCLOUD_POLL_INTERVAL")
    poll_delay: float = Field(default=10.0, validation_alias="IBMCLOUD_POLL_DELAY")
    default_timeout: float = Field(default=600.0, validation_alias="IBMCLOUD_OPERATION_TIMEOUT")

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, populate_by_name=True, extra="ignore"
    )

    @field_validator("poll_interval", "poll_delay", "default_timeout")
    @classmethod
    def validate_non_negative(cls, v):
        """Validate durations are not negative."""
        if v < 0:
            raise ValueError("Durations must be zero or positive")
        return v


class MonitoringSettings(BaseSettings):
    """Logging configuration."""

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_format: str = Field(default="text", validation_alias="LOG_FORMAT")  # json or text
    log_file: Optional[str] = Field(default=None, validation_alias="LOG_FILE")

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, populate_by_name=True, extra="ignore"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        """Validate log format."""
        if v not in ["json", "text"]:
            raise ValueError("Log format must be 'json' or 'text'")
        return v


class AppSettings(BaseSettings):
    """Main application settings."""

    app_name: str = Field(default="ibmcloud-resources", validation_alias="APP_NAME")
    app_version: str = Field(default="0.1.0", validation_alias="APP_VERSION")
    environment: str = Field(default="development", validation_alias="ENVIRONMENT")

    # Nested settings
    cloud: CloudSettings = Field(default_factory=CloudSettings)
    polling: PollingSettings = Field(default_factory=PollingSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment name."""
        valid_envs = ["development", "testing", "staging", "production", "ci"]
        if v not in valid_envs:
            raise ValueError(f"Environment must be one of: {valid_envs}")
        return v

    def get_safe_dict(self) -> Dict[str, Any]:
        """Get configuration dict with sensitive values masked."""
        config = self.model_dump()

        def mask_sensitive(obj):
            """Recursively mask sensitive fields."""
            if isinstance(obj, dict):
                for key, value in obj.items():
                    if any(
                        sensitive in key.lower()
                        for sensitive in ["password", "secret", "key", "token"]
                    ):
                        if value and str(value).strip():
                            obj[key] = "***MASKED***"
                    elif isinstance(value, (dict, list)):
                        mask_sensitive(value)
            elif isinstance(obj, list):
                for item in obj:
                    if isinstance(item, (dict, list)):
                        mask_sensitive(item)

        mask_sensitive(config)
        return config


# Singleton pattern for settings
_settings: Optional[AppSettings] = None


def get_settings() -> AppSettings:
    """Get application settings singleton."""
    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings


def reload_settings() -> AppSettings:
    """Force reload of settings (useful for testing)."""
    global _settings
    _settings = None
    return get_settings()
