"""Application settings from environment variables.

Centralized environment variable parsing and validation.
"""

import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """Application settings from environment.

    Handles parsing, validation, and defaults for all env vars.
    """

    # Rollout
    retries: int = field(default=3)
    retry_delay: int = field(default=0)
    staging_root: str = field(default="/tmp/rollout")
    install_args: str | None = field(default=None)
    max_concurrency: int = field(default=10)
    command_timeout: int = field(default=1800)
    copy_timeout: int = field(default=600)
    cleanup_timeout: int = field(default=300)
    probe_hosts: bool = field(default=False)
    default_user: str = field(default="root")

    # Reports
    export_dir: str = field(default="rollout-reports")
    log_dir: str = field(default="rollout-logs")

    # Connection pool
    idle_timeout: int = field(default=60)
    max_pool_size: int = field(default=100)
    known_hosts: str | None = field(default=None)
    strict_host_key_checking: bool = field(default=True)

    # Transport
    transport: str = field(default="http")
    http_host: str = field(default="0.0.0.0")
    http_port: int = field(default=8000)

    # Logging
    log_level: str = field(default="INFO")
    include_traceback: bool = field(default=False)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from ROLLOUT_* environment variables.

        Returns:
            Settings instance with values from environment
        """
        return cls(
            retries=cls._get_positive_int("ROLLOUT_RETRIES", 3),
            retry_delay=max(cls._get_int("ROLLOUT_RETRY_DELAY", 0), 0),
            staging_root=os.getenv("ROLLOUT_STAGING_ROOT", "/tmp/rollout"),
            install_args=os.getenv("ROLLOUT_INSTALL_ARGS") or None,
            max_concurrency=cls._get_positive_int("ROLLOUT_MAX_CONCURRENCY", 10),
            command_timeout=cls._get_positive_int("ROLLOUT_COMMAND_TIMEOUT", 1800),
            copy_timeout=cls._get_positive_int("ROLLOUT_COPY_TIMEOUT", 600),
            cleanup_timeout=cls._get_positive_int("ROLLOUT_CLEANUP_TIMEOUT", 300),
            probe_hosts=cls._get_bool("ROLLOUT_PROBE_HOSTS", False),
            default_user=os.getenv("ROLLOUT_DEFAULT_USER", "root"),
            export_dir=os.getenv("ROLLOUT_EXPORT_DIR", "rollout-reports"),
            log_dir=os.getenv("ROLLOUT_LOG_DIR", "rollout-logs"),
            idle_timeout=cls._get_int("ROLLOUT_IDLE_TIMEOUT", 60),
            max_pool_size=cls._get_positive_int("ROLLOUT_MAX_POOL_SIZE", 100),
            known_hosts=cls._get_known_hosts(),
            strict_host_key_checking=cls._get_bool(
                "ROLLOUT_STRICT_HOST_KEY_CHECKING", True
            ),
            transport=cls._get_transport(),
            http_host=os.getenv("ROLLOUT_HTTP_HOST", "0.0.0.0"),
            http_port=cls._get_int("ROLLOUT_HTTP_PORT", 8000),
            log_level=os.getenv("ROLLOUT_LOG_LEVEL", "INFO").upper(),
            include_traceback=cls._get_bool("ROLLOUT_INCLUDE_TRACEBACK", False),
        )

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Get integer from environment.

        Args:
            key: Environment variable key
            default: Default value if not set

        Returns:
            Integer value from environment or default
        """
        value = os.getenv(key)
        if value is None:
            return default

        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid int for %s: %s, using default %d", key, value, default)
            return default

    @classmethod
    def _get_positive_int(cls, key: str, default: int) -> int:
        """Get integer that must be >= 1, falling back to default otherwise."""
        value = cls._get_int(key, default)
        if value < 1:
            logger.warning("%s must be >= 1, got %d. Using default: %d", key, value, default)
            return default
        return value

    @staticmethod
    def _get_bool(key: str, default: bool) -> bool:
        """Get boolean from environment.

        Args:
            key: Environment variable key
            default: Default value if not set

        Returns:
            Boolean value from environment or default
        """
        value = os.getenv(key)
        if value is None:
            return default
        return value.lower() in ("1", "true", "yes", "on")

    @staticmethod
    def _get_known_hosts() -> str | None:
        """Get known_hosts path.

        'none' disables verification; unset falls back to
        ~/.ssh/known_hosts when that file exists.
        """
        value = os.getenv("ROLLOUT_KNOWN_HOSTS", "").strip()
        if value.lower() == "none":
            return None
        if value:
            return os.path.expanduser(value)
        default = os.path.expanduser("~/.ssh/known_hosts")
        if os.path.exists(default):
            return default
        logger.warning("known_hosts not found at %s, verification disabled", default)
        return None

    @staticmethod
    def _get_transport() -> str:
        """Get transport from environment with validation.

        Returns:
            Transport type ("http" or "stdio")
        """
        transport = os.getenv("ROLLOUT_TRANSPORT", "").lower()
        if transport in ("http", "stdio"):
            return transport
        return "http"
