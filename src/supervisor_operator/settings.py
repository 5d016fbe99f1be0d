"""Centralized operator settings using pydantic-settings.

This module provides a single source of truth for all operator configuration
loaded from environment variables. Uses pydantic for automatic validation,
type coercion, and documentation.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_STATE_ENCRYPTION_KEY_PREFIX,
    DEFAULT_STATE_SIGNING_KEY_PREFIX,
    DEFAULT_TOKEN_SIGNING_KEY_PREFIX,
    OPERATOR_LABEL_KEY,
    OPERATOR_LABEL_VALUE,
)


class Settings(BaseSettings):
    """Operator configuration loaded from environment variables.

    All settings have sensible defaults for production use. Override via
    environment variables as documented per field.
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    operator_namespace: str = Field(
        default="supervisor-system",
        description="Namespace where the operator is deployed",
        validation_alias="OPERATOR_NAMESPACE",
    )

    # Logging configuration
    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    json_logs: bool = Field(
        default=True,
        validation_alias="JSON_LOGS",
        description="Enable JSON formatted logging for structured log aggregation",
    )
    correlation_ids: bool = Field(
        default=True,
        validation_alias="CORRELATION_IDS",
        description="Enable correlation IDs in logs for request tracing",
    )

    # Namespace watching
    namespaces: str = Field(
        default="",
        validation_alias="SUPERVISOR_OPERATOR_NAMESPACES",
        description="Comma-separated list of namespaces to watch (empty = all namespaces)",
    )

    # Metrics and observability
    metrics_port: int = Field(
        default=8081,
        validation_alias="METRICS_PORT",
        description="Port for Prometheus metrics endpoint",
    )
    metrics_host: str = Field(
        default="0.0.0.0",
        validation_alias="METRICS_HOST",
        description="Host address to bind metrics server",
    )

    # Generated secrets
    token_signing_key_secret_prefix: str = Field(
        default=DEFAULT_TOKEN_SIGNING_KEY_PREFIX,
        validation_alias="TOKEN_SIGNING_KEY_SECRET_PREFIX",
        description="Name prefix of generated token signing key secrets",
    )
    state_signing_key_secret_prefix: str = Field(
        default=DEFAULT_STATE_SIGNING_KEY_PREFIX,
        validation_alias="STATE_SIGNING_KEY_SECRET_PREFIX",
        description="Name prefix of generated state signing key secrets",
    )
    state_encryption_key_secret_prefix: str = Field(
        default=DEFAULT_STATE_ENCRYPTION_KEY_PREFIX,
        validation_alias="STATE_ENCRYPTION_KEY_SECRET_PREFIX",
        description="Name prefix of generated state encryption key secrets",
    )
    generated_secret_labels: dict[str, str] = Field(
        default_factory=lambda: {OPERATOR_LABEL_KEY: OPERATOR_LABEL_VALUE},
        validation_alias="GENERATED_SECRET_LABELS",
        description="Labels (JSON object) applied verbatim to every generated secret",
    )
    resync_interval_seconds: float = Field(
        default=300.0,
        validation_alias="RESYNC_INTERVAL_SECONDS",
        description="Interval in seconds between periodic re-validation of key secrets",
    )

    @field_validator(
        "token_signing_key_secret_prefix",
        "state_signing_key_secret_prefix",
        "state_encryption_key_secret_prefix",
    )
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        if not v:
            raise ValueError("secret name prefix must not be empty")
        return v

    @property
    def watched_namespaces(self) -> list[str] | None:
        """Parse watched namespaces from comma-separated string.

        Returns:
            List of namespace names, or None to watch all namespaces
        """
        if self.namespaces:
            return [ns.strip() for ns in self.namespaces.split(",") if ns.strip()]
        return None


# Global settings instance - initialized once at module import
settings = Settings()
