# app/config.py
"""
Centralized configuration management with startup validation.

Defines REQUIRED vs OPTIONAL environment variables and provides
safe configuration loading with validation and logging.
"""
import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from auth.session import MIN_SECRET_LENGTH

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

SERVICE_NAME = "fourpaws"
SERVICE_VERSION = "0.1.0"

VALID_ENVIRONMENTS = ("development", "test", "production")

# Default values
DEFAULT_DATABASE_PATH = "data/fourpaws.db"
DEFAULT_MAX_REQUEST_SIZE_BYTES = 1_048_576  # 1MB
MIN_REQUEST_SIZE_BYTES = 1024  # 1KB minimum


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""

    pass


# =============================================================================
# Configuration Dataclass
# =============================================================================


@dataclass
class AppConfig:
    """Application configuration loaded from environment."""

    # REQUIRED
    session_secret: str = field(repr=False)

    # Service info
    service_name: str = SERVICE_NAME
    service_version: str = SERVICE_VERSION
    environment: str = "development"

    # Storage
    database_path: str = DEFAULT_DATABASE_PATH

    # Security settings
    max_request_size_bytes: int = DEFAULT_MAX_REQUEST_SIZE_BYTES

    # Warnings collected during config load
    warnings: list = field(default_factory=list)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def secure_cookies(self) -> bool:
        """Session cookies carry the Secure attribute in production only."""
        return self.is_production


# =============================================================================
# Configuration Loading
# =============================================================================


def _parse_int_env(
    name: str, default: int, min_value: Optional[int] = None
) -> tuple[int, Optional[str]]:
    """
    Parse an integer environment variable with validation.

    Returns (value, warning_message).
    On invalid input, returns default with a warning.
    """
    raw = os.environ.get(name)
    if raw is None:
        return default, None

    try:
        value = int(raw)
    except ValueError:
        warning = f"{name}='{raw}' is not a valid integer; using default {default}"
        return default, warning

    if min_value is not None and value < min_value:
        warning = f"{name}={value} is below minimum {min_value}; using default {default}"
        return default, warning

    return value, None


def load_config() -> AppConfig:
    """
    Load and validate application configuration from environment.

    Returns:
        AppConfig instance with validated configuration.

    Raises:
        ConfigurationError: If SESSION_SECRET is missing or too short,
                            or APP_ENV is not a known environment.
    """
    warnings = []

    session_secret = os.environ.get("SESSION_SECRET", "")
    if len(session_secret) < MIN_SECRET_LENGTH:
        raise ConfigurationError(
            f"SESSION_SECRET must be at least {MIN_SECRET_LENGTH} characters for HMAC signing"
        )

    environment = os.environ.get("APP_ENV", "development").strip().lower()
    if environment not in VALID_ENVIRONMENTS:
        raise ConfigurationError(
            f"APP_ENV='{environment}' is invalid; expected one of {', '.join(VALID_ENVIRONMENTS)}"
        )

    database_path = os.environ.get("DATABASE_PATH", DEFAULT_DATABASE_PATH).strip()
    if not database_path:
        warnings.append(f"DATABASE_PATH is empty; using default {DEFAULT_DATABASE_PATH}")
        database_path = DEFAULT_DATABASE_PATH

    max_request_size, size_warning = _parse_int_env(
        "MAX_REQUEST_SIZE_BYTES",
        DEFAULT_MAX_REQUEST_SIZE_BYTES,
        min_value=MIN_REQUEST_SIZE_BYTES,
    )
    if size_warning:
        warnings.append(size_warning)

    for warning in warnings:
        logger.warning(f"[CONFIG] {warning}")

    return AppConfig(
        session_secret=session_secret,
        environment=environment,
        database_path=database_path,
        max_request_size_bytes=max_request_size,
        warnings=warnings,
    )


def log_config_snapshot(config: AppConfig) -> str:
    """
    Generate and log a safe configuration snapshot.

    Returns the snapshot string for testing purposes.
    Never logs the session secret - only a presence flag.
    """
    snapshot = (
        f"[STARTUP] service={config.service_name} "
        f"version={config.service_version} "
        f"environment={config.environment} "
        f"database_path={config.database_path} "
        f"max_request_size_bytes={config.max_request_size_bytes} "
        f"secure_cookies={config.secure_cookies} "
        f"session_secret_present={bool(config.session_secret)}"
    )
    logger.info(snapshot)
    return snapshot
